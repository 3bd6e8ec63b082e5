import logging
import re
from typing import Optional

from app.core.config import settings
from app.core.exceptions import TranslationFailure
from app.core.llm import TextGenerator
from app.core.nlq import prompts


# -----------------------------------------------------------------------------
# TRANSLATE MODULE
# Purpose: turn a question into one SQL statement over the clinic schema.
# Every generated statement goes through strip_code_fences() and then
# sanitize_sql() before anyone is allowed to run it.
# -----------------------------------------------------------------------------

logger = logging.getLogger(__name__)

_FIELDS = "|".join(re.escape(field) for field in prompts.SENSITIVE_FIELDS)

# Best-effort filter over comma-adjacent projection items only. Qualified
# names (d.email), aliases, expressions, and a lone field behind TOP n or
# DISTINCT (SELECT TOP 5 email) are not caught.
_TRAILING_FIELD = re.compile(rf",\s*(?:{_FIELDS})\b", re.IGNORECASE)
_LEADING_FIELD = re.compile(rf"\b(?:{_FIELDS})\s*,", re.IGNORECASE)
_SOLE_FIELD = re.compile(rf"\bSELECT\s+(?:{_FIELDS})\b", re.IGNORECASE)

_CODE_FENCE = re.compile(r"```(?:sql|tsql|t-sql|mssql)?", re.IGNORECASE)


def strip_code_fences(sql: str) -> str:
    """Drop Markdown fences such as ```sql ... ``` around the statement."""
    return _CODE_FENCE.sub("", sql).strip()


def sanitize_sql(sql: str) -> str:
    """
    Remove denylisted columns from projection lists.

    Handles ", email" and "email," list items, and rewrites a projection made
    only of a denylisted column ("SELECT email") to "SELECT id".

    Example:
        sanitize_sql("SELECT firstName, email FROM doctors")
        # "SELECT firstName FROM doctors"
    """
    sql = _TRAILING_FIELD.sub("", sql)
    sql = _LEADING_FIELD.sub("", sql)
    sql = _SOLE_FIELD.sub("SELECT id", sql)
    return sql.strip()


class QueryTranslator:
    def __init__(
        self,
        generator: TextGenerator,
        dialect: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        self.generator = generator
        self.dialect = dialect or settings.SQL_DIALECT
        self.max_tokens = max_tokens or settings.SQL_MAX_TOKENS

    def build_prompt(self, question: str) -> str:
        return prompts.TRANSLATE_PROMPT.format(
            dialect=self.dialect,
            schema=prompts.SCHEMA_DESCRIPTION,
            sensitive_fields=", ".join(prompts.SENSITIVE_FIELDS),
            question=question,
        )

    async def translate(self, question: str) -> str:
        """
        Generate SQL for the question with deterministic sampling.

        Raises:
            TranslationFailure: the generation call failed or produced nothing.
        """
        try:
            raw = await self.generator.generate(
                self.build_prompt(question), temperature=0, max_tokens=self.max_tokens
            )
        except Exception as e:
            raise TranslationFailure(f"SQL generation failed: {e}") from e

        sql = sanitize_sql(strip_code_fences(raw or ""))
        if not sql:
            raise TranslationFailure("SQL generation returned an empty statement")

        logger.info(f"Generated SQL: {sql}")
        return sql
