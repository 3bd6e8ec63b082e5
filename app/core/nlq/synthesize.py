import json
import logging
import re
from typing import List, Optional

from app.core.config import settings
from app.core.database import Row
from app.core.llm import TextGenerator
from app.core.nlq import prompts
from app.core.nlq.classify import QuestionClassifier


# -----------------------------------------------------------------------------
# SYNTHESIZE MODULE
# Purpose: write the user-facing answer, either a summary of query rows or a
# short knowledge answer. Generation failures become fixed apology strings.
# -----------------------------------------------------------------------------

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"\d+")


def enforce_count(summary: str, count: int) -> str:
    """
    Make sure the summary states the real row count.

    If the count is missing, the first number in the text is replaced with it;
    a summary without any number gets the count prepended.

    Example:
        enforce_count("There are 5 cardiologists available.", 3)
        # "There are 3 cardiologists available."
    """
    expected = str(count)
    # Digits of a larger number or a decimal (3.2, 13) do not state the count
    if re.search(rf"(?<![\d.]){expected}(?!\d|\.\d)", summary):
        return summary

    if _NUMBER.search(summary):
        logger.warning(f"Summary stated the wrong result count, correcting it to {count}")
        return _NUMBER.sub(expected, summary, count=1)

    logger.warning(f"Summary did not state the result count, adding {count}")
    return f"There are {count} results. {summary}".strip()


def _serialize(results: List[Row]) -> str:
    return json.dumps(results, indent=2, default=str)


class ResponseSynthesizer:
    def __init__(
        self,
        generator: TextGenerator,
        classifier: Optional[QuestionClassifier] = None,
    ):
        self.generator = generator
        self.classifier = classifier or QuestionClassifier(generator)

    async def summarize(self, question: str, results: List[Row]) -> str:
        """Summarize query rows in 2-3 sentences that state the exact row count."""
        count = len(results)
        prompt = prompts.SUMMARY_PROMPT.format(
            count=count, question=question, results=_serialize(results)
        )

        try:
            summary = await self.generator.generate(
                prompt,
                temperature=settings.KNOWLEDGE_TEMPERATURE,
                max_tokens=settings.SUMMARY_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"Result summary generation failed: {e}")
            return prompts.SUMMARY_APOLOGY.format(count=count)

        return enforce_count(summary or "", count)

    async def answer_knowledge(self, question: str) -> str:
        """
        Answer from general knowledge, gated by the domain check.

        Off-topic questions get the fixed refusal. Answers always carry the
        advice to consult a healthcare professional.
        """
        if not await self.classifier.is_medical(question):
            return prompts.NON_MEDICAL_REFUSAL

        try:
            answer = await self.generator.generate(
                prompts.HEALTH_ANSWER_PROMPT.format(question=question),
                temperature=settings.KNOWLEDGE_TEMPERATURE,
                max_tokens=settings.ANSWER_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"Health answer generation failed: {e}")
            return prompts.HEALTH_APOLOGY

        answer = (answer or "").strip()
        if not answer:
            return prompts.HEALTH_APOLOGY
        if "healthcare professional" not in answer.lower():
            answer = f"{answer} {prompts.HEALTH_DISCLAIMER}"
        return answer
