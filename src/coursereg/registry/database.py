"""SQLite engine and session management for the Registry."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coursereg.registry.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY = ":memory:"


def _apply_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_path: str) -> Engine:
    """Create an engine for a SQLite file, or a shared in-memory database.

    Every connection runs with foreign keys enforced and WAL journaling.
    Connections may be used from worker threads (``asyncio.to_thread``).
    """
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if db_path == MEMORY:
        # One connection for the whole process, otherwise each would see its own database
        options["poolclass"] = StaticPool
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(f"sqlite:///{db_path}", **options)
    event.listen(engine, "connect", _apply_pragmas)
    return engine


class Database:
    """Lazily built engine plus the session factory the store draws from."""

    def __init__(self, db_path: str = "coursereg.db") -> None:
        """
        Args:
            db_path: SQLite file path, or ":memory:".
        """
        self.db_path = db_path
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(self.db_path)
        return self._engine

    def create_tables(self) -> None:
        """Create any missing tables."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Open a session. Loaded objects stay usable after commit and close."""
        if self._sessions is None:
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions()

    def journal_mode(self) -> str:
        """Return SQLite's active journal mode ("wal" for file databases)."""
        with self.engine.connect() as conn:
            return str(conn.execute(text("PRAGMA journal_mode")).scalar())

    def close(self) -> None:
        """Dispose of the engine. A later access rebuilds it."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None
