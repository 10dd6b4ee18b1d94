"""Database engine & session utilities.

The engine is owned by an explicitly constructed :class:`Database` handle
instead of living at module level: the application opens it on start-up,
passes it to the store and disposes it on shutdown.  Tests build their own
in-memory handle.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from transcription_api.db.base import Base
from transcription_api.errors import PersistenceError

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """Sync SQLAlchemy engine + classic session maker with a lifecycle."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise PersistenceError("Database is not connected")
        return self._engine

    def connect(self) -> "Database":
        """Create the engine and make sure the schema exists. Idempotent."""
        if self._engine is not None:
            return self

        kwargs = {"echo": self.echo, "future": True}
        if self.url.startswith("sqlite"):
            # Sessions are used from FastAPI's threadpool as well as the event loop.
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_sqlite(self.url):
                # Every session must see the same in-memory database.
                kwargs["poolclass"] = StaticPool

        logger.info("Creating database engine for %s", self.url.split("@")[-1])
        self._engine = create_engine(self.url, **kwargs)
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self._engine,
        )
        self.create_tables()
        return self

    def create_tables(self) -> None:
        """Create all tables if they do not yet exist. Harmless when they do."""
        # Registers every model with Base before create_all runs.
        from transcription_api import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables ensured")

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yields a database session and ensures it's closed after use."""
        if self._session_factory is None:
            raise PersistenceError("Database is not connected")
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()
            logger.debug("DB session closed")

    def dispose(self) -> None:
        """Close every pooled connection. Safe to call more than once."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")
