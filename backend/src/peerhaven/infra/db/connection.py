"""Async database connection management.

``DatabaseManager`` owns the SQLAlchemy async engine and hands out sessions.
The engine is created lazily so importing the app never opens a connection.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from peerhaven.infra.db.base import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the async engine and session factory for one database URL."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self.initialize()
        return self._engine

    def initialize(self) -> None:
        """Create the engine and session factory (idempotent)."""
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.database_url, echo=self.echo)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        logger.info("[DB] Engine initialized | url=%s", self._safe_url())

    async def create_tables(self) -> None:
        """Create all mapped tables that do not exist yet."""
        # Import models so they register on Base.metadata
        from peerhaven.models import chat_message_db  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("[DB] Tables ensured")

    @asynccontextmanager
    async def get_async_session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, rolling back if the block raises."""
        if self._session_factory is None:
            self.initialize()
        session = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("[DB] Engine disposed")

    def _safe_url(self) -> str:
        # Hide credentials in logs
        return self.database_url.split("@")[-1]
