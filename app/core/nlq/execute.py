import asyncio
import logging
from typing import List

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from app.core.database import RelationalStore, Row
from app.core.exceptions import ConfigurationError, ExecutionFailure

logger = logging.getLogger(__name__)


def _error_message(exc: Exception) -> str:
    # Driver errors carry the useful text on .orig; the wrapper adds SQL and links
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    if isinstance(exc, asyncio.TimeoutError):
        return "Query timed out"
    return str(exc) or exc.__class__.__name__


class QueryExecutor:
    """Runs generated SQL once against the shared relational store. Never retries."""

    def __init__(self, store: RelationalStore):
        self.store = store

    async def execute(self, sql: str) -> List[Row]:
        try:
            rows = await self.store.fetch_all(sql)
        except ConfigurationError:
            raise
        except (SQLAlchemyError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Query execution failed: {e}")
            raise ExecutionFailure(_error_message(e)) from e
        except Exception as e:
            logger.exception("Unexpected error while executing query")
            raise ExecutionFailure(_error_message(e)) from e

        rows = list(rows or [])
        logger.info(f"Query returned {len(rows)} rows")
        return rows
