import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from app.core.config import settings
from app.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class RelationalStore(Protocol):
    """Anything that can run one read statement and hand back its rows."""

    async def fetch_all(self, sql: str) -> List[Row]: ...


class SqlAlchemyStore:
    """
    Relational store backed by a pooled SQLAlchemy async engine.

    The engine (and with it the connection pool) is created on first use and
    then shared by every request in the process. Creation is guarded by a
    lock so concurrent cold starts still build exactly one engine.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        pool_size: Optional[int] = None,
        timeout: Optional[float] = None,
        echo: Optional[bool] = None,
    ):
        self.url = url if url is not None else settings.SQL_DATABASE_URL
        self.pool_size = pool_size or settings.SQL_POOL_SIZE
        self.timeout = timeout or settings.SQL_QUERY_TIMEOUT_SECONDS
        self.echo = settings.SQL_ECHO if echo is None else echo
        self._engine: Optional[AsyncEngine] = None
        self._engine_lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.url)

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def get_engine(self) -> AsyncEngine:
        if self._engine is not None:
            return self._engine

        with self._engine_lock:
            # Another caller may have won the race while we waited
            if self._engine is None:
                if not self.url:
                    raise ConfigurationError(
                        "Relational store is not configured (SQL_DATABASE_URL is missing)"
                    )
                logger.info("Creating relational store engine (pool_size=%s)", self.pool_size)
                try:
                    self._engine = self._create_engine()
                except Exception as e:
                    # Bad URL or missing driver
                    logger.error(f"Could not create relational store engine: {e}")
                    raise ConfigurationError(
                        f"Relational store could not be initialized: {e}"
                    ) from e
        return self._engine

    def _create_engine(self) -> AsyncEngine:
        kwargs: Dict[str, Any] = {"echo": self.echo, "pool_pre_ping": True}
        # SQLite uses a static pool that rejects sizing arguments
        if not self.url.startswith("sqlite"):
            kwargs["pool_size"] = self.pool_size
        return create_async_engine(self.url, **kwargs)

    async def fetch_all(self, sql: str) -> List[Row]:
        engine = self.get_engine()
        async with engine.connect() as conn:
            result = await asyncio.wait_for(conn.execute(text(sql)), timeout=self.timeout)
            if not result.returns_rows:
                return []
            return [dict(row._mapping) for row in result]

    async def dispose(self):
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Relational store engine disposed")


# Process-wide store shared by every request
store = SqlAlchemyStore()


def get_store() -> RelationalStore:
    if not store.configured:
        raise ConfigurationError(
            "Relational store is not configured (SQL_DATABASE_URL is missing)"
        )
    return store
