import logging

from app.core.llm import TextGenerator
from app.core.nlq import prompts
from app.core.schemas import QuestionType


# -----------------------------------------------------------------------------
# CLASSIFY MODULE
# Purpose: decide whether a question is in scope, and if so which path answers it.
# Failures never escape: the domain check fails open to "medical" and the
# intent check falls back to the knowledge ("health") path.
# -----------------------------------------------------------------------------

logger = logging.getLogger(__name__)

CLASSIFY_MAX_TOKENS = 5


def _normalize(output: str) -> str:
    return output.strip().strip("\"'`.").strip().lower()


class QuestionClassifier:
    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def is_medical(self, question: str) -> bool:
        """
        Domain check. Only an explicit "false" marks a question as non-medical;
        unexpected output or a failed call counts as medical.
        """
        try:
            output = await self.generator.generate(
                prompts.DOMAIN_CHECK_PROMPT.format(question=question),
                temperature=0,
                max_tokens=CLASSIFY_MAX_TOKENS,
            )
        except Exception as e:
            logger.warning(f"Domain check failed, treating question as medical: {e}")
            return True

        verdict = _normalize(output)
        if verdict == "false":
            return False
        if verdict != "true":
            logger.warning(f"Unexpected domain check output {output!r}, treating as medical")
        return True

    async def classify_intent(self, question: str) -> QuestionType:
        """Intent check. Anything but "database" goes to the knowledge path."""
        try:
            output = await self.generator.generate(
                prompts.INTENT_CHECK_PROMPT.format(question=question),
                temperature=0,
                max_tokens=CLASSIFY_MAX_TOKENS,
            )
        except Exception as e:
            logger.warning(f"Intent check failed, defaulting to health: {e}")
            return QuestionType.HEALTH

        if _normalize(output) == QuestionType.DATABASE.value:
            return QuestionType.DATABASE
        return QuestionType.HEALTH

    async def classify(self, question: str) -> QuestionType:
        if not await self.is_medical(question):
            logger.info("Question classified as non-medical")
            return QuestionType.NON_MEDICAL

        question_type = await self.classify_intent(question)
        logger.info(f"Question classified as {question_type.value}")
        return question_type
