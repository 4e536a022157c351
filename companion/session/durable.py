"""Durable key-value persistence for the session, backed by libsql.

The connection target follows settings:

- **Hosted**: ``TURSO_DATABASE_URL`` + ``TURSO_AUTH_TOKEN`` → remote Turso
- **Local/test**: otherwise a local SQLite file at ``database_path``

The synchronous libsql driver is driven from ``asyncio.to_thread()``; each
call opens, uses and closes its own connection.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import libsql
from pydantic import ValidationError

from companion.config import settings
from companion.session.models import Session, now_iso

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS session_state (
    key        TEXT PRIMARY KEY,
    data       TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_UPSERT = """
INSERT INTO session_state (key, data, updated_at) VALUES (?, ?, ?)
ON CONFLICT(key) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
"""


@runtime_checkable
class SessionDurable(Protocol):
    """Where the session store persists snapshots."""

    async def load(self, key: str) -> Session | None: ...

    async def save(self, key: str, session: Session) -> None: ...


class SqliteSessionDurable:
    """Stores one JSON document per key in the ``session_state`` table.

    Pass an explicit *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path
        self._initialised = False

    # -- Internal helpers ------------------------------------------------------

    def _open(self) -> Any:
        if self._db_path is None and settings.turso_database_url:
            conn = libsql.connect(
                database=settings.turso_database_url,
                auth_token=settings.turso_auth_token,
            )
        else:
            path = self._db_path or settings.database_path
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = libsql.connect(str(path))
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=5000")
        if not self._initialised:
            conn.execute(_CREATE_TABLE)
            conn.commit()
            self._initialised = True
        return conn

    def _read(self, key: str) -> str | None:
        conn = self._open()
        try:
            row = conn.execute(
                "SELECT data FROM session_state WHERE key = ?", (key,)
            ).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def _write(self, key: str, data: str) -> None:
        conn = self._open()
        try:
            conn.execute(_UPSERT, (key, data, now_iso()))
            conn.commit()
        finally:
            conn.close()

    # -- Public API ------------------------------------------------------------

    async def load(self, key: str) -> Session | None:
        """Return the stored session for *key*, or None if absent or unreadable.

        An unreadable row is copied to ``<key>.unreadable`` first, so the next
        save under *key* does not destroy the only copy.
        """
        data = await asyncio.to_thread(self._read, key)
        if data is None:
            return None
        try:
            return Session.model_validate_json(data)
        except ValidationError:
            logger.exception(
                "Stored session '%s' is unreadable; kept as '%s.unreadable'", key, key
            )
            await asyncio.to_thread(self._write, f"{key}.unreadable", data)
            return None

    async def save(self, key: str, session: Session) -> None:
        await asyncio.to_thread(self._write, key, session.model_dump_json())
        logger.debug("Saved session '%s' (%d messages)", key, len(session.chat_history))
