"""SQLite engine and session factory for the offering and enrollment tables."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from academia.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY = ":memory:"
DEFAULT_BUSY_TIMEOUT = 30.0


def _apply_pragmas(dbapi_connection: object, _connection_record: object) -> None:
    # WAL lets readers proceed while a seat update holds the write lock;
    # foreign keys keep enrollments tied to an existing offering.
    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine for one Academia database.

    A file database gives every session its own connection. A writer that
    finds the file locked waits up to ``busy_timeout`` seconds, so concurrent
    enrollments into the same offering queue up instead of failing.

    ``:memory:`` shares a single connection between threads (the API test
    client runs requests on a worker thread) and so cannot model separate
    writers.
    """

    def __init__(
        self, db_path: str = "academia.db", busy_timeout: float = DEFAULT_BUSY_TIMEOUT
    ) -> None:
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def in_memory(self) -> bool:
        return self.db_path == MEMORY

    def _create_engine(self) -> Engine:
        if self.in_memory:
            return create_engine(
                f"sqlite:///{MEMORY}",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False, "timeout": self.busy_timeout},
        )

    @property
    def engine(self) -> Engine:
        """Engine for this database, created on first use."""
        if self._engine is None:
            self._engine = self._create_engine()
            event.listen(self._engine, "connect", _apply_pragmas)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        # Loaded rows stay readable after the session that loaded them closes
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    def create_tables(self) -> None:
        """Create the offering and enrollment tables if missing."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self.session_factory()

    def is_wal_mode(self) -> bool:
        """Whether the database is running in write-ahead-log mode."""
        with self.engine.connect() as conn:
            return conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def close(self) -> None:
        """Dispose of the engine. The next access reconnects."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
