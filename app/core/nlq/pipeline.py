from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

from app.core.database import RelationalStore, Row
from app.core.exceptions import (
    ExecutionFailure,
    QuestionValidationError,
    TranslationFailure,
)
from app.core.llm import TextGenerator
from app.core.nlq import prompts
from app.core.nlq.classify import QuestionClassifier
from app.core.nlq.execute import QueryExecutor
from app.core.nlq.synthesize import ResponseSynthesizer
from app.core.nlq.translate import QueryTranslator
from app.core.schemas import MedicalQueryResponse, QuestionType, Tab


# -----------------------------------------------------------------------------
# PIPELINE MODULE - Orchestration
# Purpose: run classify -> translate -> execute -> summarize as an explicit
# state machine, with the knowledge path as the fallback for SQL failures.
# Why: every terminal outcome and fallback edge is a named transition that
# can be checked on its own.
# -----------------------------------------------------------------------------

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """States a single question moves through."""

    RECEIVED = "received"
    CLASSIFYING = "classifying"
    TRANSLATING = "translating"
    EXECUTING = "executing"
    SUMMARIZING = "summarizing"
    HEALTH_ANSWERING = "health_answering"
    NON_MEDICAL_ANSWER = "non_medical_answer"
    DATABASE_ANSWER = "database_answer"
    HEALTH_ANSWER = "health_answer"


TERMINAL_STATES = {
    PipelineState.NON_MEDICAL_ANSWER,
    PipelineState.DATABASE_ANSWER,
    PipelineState.HEALTH_ANSWER,
}

TRANSITIONS = {
    PipelineState.RECEIVED: {PipelineState.CLASSIFYING},
    PipelineState.CLASSIFYING: {
        PipelineState.NON_MEDICAL_ANSWER,
        PipelineState.TRANSLATING,
        PipelineState.HEALTH_ANSWERING,
    },
    # Both SQL stages fall back to the knowledge path on failure
    PipelineState.TRANSLATING: {PipelineState.EXECUTING, PipelineState.HEALTH_ANSWERING},
    PipelineState.EXECUTING: {PipelineState.SUMMARIZING, PipelineState.HEALTH_ANSWERING},
    PipelineState.SUMMARIZING: {PipelineState.DATABASE_ANSWER},
    PipelineState.HEALTH_ANSWERING: {PipelineState.HEALTH_ANSWER},
}


def validate_question(question: Any) -> str:
    """Return the trimmed question or raise QuestionValidationError."""
    if not isinstance(question, str) or not question.strip():
        raise QuestionValidationError()
    return question.strip()


@dataclass
class PipelineRun:
    """Request-scoped state for one question."""

    question: str
    state: PipelineState = PipelineState.RECEIVED
    trace: List[PipelineState] = field(default_factory=lambda: [PipelineState.RECEIVED])
    question_type: Optional[QuestionType] = None
    sql: Optional[str] = None
    results: Optional[List[Row]] = None
    answer: Optional[str] = None
    error: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)

    def advance(self, next_state: PipelineState):
        if next_state not in TRANSITIONS.get(self.state, set()):
            raise RuntimeError(
                f"Illegal pipeline transition {self.state.value} -> {next_state.value}"
            )
        self.state = next_state
        self.trace.append(next_state)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_response(self) -> MedicalQueryResponse:
        if self.state == PipelineState.NON_MEDICAL_ANSWER:
            return MedicalQueryResponse(
                type=QuestionType.NON_MEDICAL,
                question=self.question,
                answer=self.answer,
                tab=Tab.CHAT,
            )
        if self.state == PipelineState.DATABASE_ANSWER:
            return MedicalQueryResponse(
                type=QuestionType.DATABASE,
                question=self.question,
                answer=self.answer,
                tab=Tab.RESULTS,
                sql=self.sql,
                results=self.results,
            )
        if self.state == PipelineState.HEALTH_ANSWER:
            return MedicalQueryResponse(
                type=QuestionType.HEALTH,
                question=self.question,
                answer=self.answer,
                tab=Tab.CHAT,
                error=self.error,
            )
        raise RuntimeError(f"Pipeline stopped in non-terminal state {self.state.value}")


class MedicalQueryPipeline:
    """
    Answers one medical question end to end.

    The language model and the relational store are injected, so tests can
    swap in deterministic fakes. Instances hold no per-request state and can
    serve concurrent requests.
    """

    def __init__(
        self,
        generator: TextGenerator,
        store: RelationalStore,
        classifier: Optional[QuestionClassifier] = None,
        translator: Optional[QueryTranslator] = None,
        executor: Optional[QueryExecutor] = None,
        synthesizer: Optional[ResponseSynthesizer] = None,
    ):
        self.classifier = classifier or QuestionClassifier(generator)
        self.translator = translator or QueryTranslator(generator)
        self.executor = executor or QueryExecutor(store)
        self.synthesizer = synthesizer or ResponseSynthesizer(generator, self.classifier)

        self._handlers: Dict[
            PipelineState, Callable[[PipelineRun], Awaitable[PipelineState]]
        ] = {
            PipelineState.RECEIVED: self._received,
            PipelineState.CLASSIFYING: self._classifying,
            PipelineState.TRANSLATING: self._translating,
            PipelineState.EXECUTING: self._executing,
            PipelineState.SUMMARIZING: self._summarizing,
            PipelineState.HEALTH_ANSWERING: self._health_answering,
        }

    async def answer(self, question: Any) -> MedicalQueryResponse:
        run = await self.run_pipeline(question)
        return run.to_response()

    async def run_pipeline(self, question: Any) -> PipelineRun:
        """
        Drive one question to a terminal state.

        Raises:
            QuestionValidationError: question missing, not a string, or blank.
        """
        run = PipelineRun(question=validate_question(question))

        while not run.finished:
            next_state = await self._handlers[run.state](run)
            run.advance(next_state)

        elapsed = (datetime.now() - run.started_at).total_seconds()
        logger.info(
            f"Pipeline finished in {run.state.value} after {elapsed:.2f}s: "
            f"{' -> '.join(state.value for state in run.trace)}"
        )
        return run

    async def _received(self, run: PipelineRun) -> PipelineState:
        return PipelineState.CLASSIFYING

    async def _classifying(self, run: PipelineRun) -> PipelineState:
        run.question_type = await self.classifier.classify(run.question)

        if run.question_type == QuestionType.NON_MEDICAL:
            run.answer = prompts.NON_MEDICAL_REFUSAL
            return PipelineState.NON_MEDICAL_ANSWER
        if run.question_type == QuestionType.DATABASE:
            return PipelineState.TRANSLATING
        return PipelineState.HEALTH_ANSWERING

    async def _translating(self, run: PipelineRun) -> PipelineState:
        try:
            run.sql = await self.translator.translate(run.question)
        except TranslationFailure as e:
            logger.error(f"Translation failed, falling back to health answer: {e}")
            return PipelineState.HEALTH_ANSWERING
        return PipelineState.EXECUTING

    async def _executing(self, run: PipelineRun) -> PipelineState:
        try:
            run.results = await self.executor.execute(run.sql)
        except ExecutionFailure as e:
            logger.error(f"Execution failed, falling back to health answer: {e}")
            run.error = str(e)
            return PipelineState.HEALTH_ANSWERING
        return PipelineState.SUMMARIZING

    async def _summarizing(self, run: PipelineRun) -> PipelineState:
        run.answer = await self.synthesizer.summarize(run.question, run.results)
        return PipelineState.DATABASE_ANSWER

    async def _health_answering(self, run: PipelineRun) -> PipelineState:
        run.answer = await self.synthesizer.answer_knowledge(run.question)
        return PipelineState.HEALTH_ANSWER
