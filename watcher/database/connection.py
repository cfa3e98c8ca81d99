# watcher/database/connection.py

from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import Engine, create_engine, make_url, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from ..core.logging import LoggingMixin
from ..types import DatabaseConfig
from .base import Base


class DatabaseManager(LoggingMixin):
    """
    Owns the engine and hands out sessions.

    get_session() rolls back on error; get_transaction() also commits when
    the block exits cleanly.
    """

    def __init__(self, config: DatabaseConfig):
        if not config or not config.url:
            raise ValueError("DatabaseConfig with a url is required")

        self.config = config
        self.url = make_url(config.url)
        self._engine = None
        self._session_factory = None

    def _engine_options(self) -> Dict[str, Any]:
        if self.url.get_backend_name() == 'sqlite':
            # One shared connection, so in-memory databases outlive a session
            return {
                'poolclass': StaticPool,
                'connect_args': {'check_same_thread': False},
            }
        return {
            'poolclass': QueuePool,
            'pool_size': self.config.pool_size,
            'max_overflow': self.config.max_overflow,
            'pool_timeout': 30,
            'pool_recycle': 3600,
            'pool_pre_ping': True,
        }

    def initialize(self) -> None:
        if self._engine is not None:
            self.log_warning("Database already initialized")
            return

        try:
            engine = create_engine(self.url, **self._engine_options())
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            self.log_error("Failed to initialize database",
                           error=str(e),
                           exception_type=type(e).__name__)
            raise

        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self.log_info(f"Database initialized ({self.url.get_backend_name()} at {self.url.host or 'local'})")

    def create_tables(self) -> None:
        from . import tables  # noqa: F401

        Base.metadata.create_all(self.engine)
        self.log_info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")

    def shutdown(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self.log_info("Database connections closed")
        self._engine = None
        self._session_factory = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._session_factory()
        try:
            yield session
        except Exception as e:
            self.log_debug("Rolling back session", error=str(e), exception_type=type(e).__name__)
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def get_transaction(self) -> Iterator[Session]:
        with self.get_session() as session:
            yield session
            session.commit()
