"""Durable append-only message log backed by SQLite."""

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional

from lobbychat.constants import Role
from lobbychat.errors import StorageError
from lobbychat.models import Message

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER NOT NULL,
    lobbyCode TEXT NOT NULL,
    sender TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    createdAt INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_messages_lobby_created
    ON messages (lobbyCode, createdAt);
"""


class MessageStore:
    """Messages keyed by lobby code, listed in arrival order.

    The SQLite connection is shared across worker threads; every statement
    runs under ``self._lock`` and the public coroutines hop off the event
    loop with ``asyncio.to_thread``.
    """

    def __init__(self, path: str = MEMORY_PATH) -> None:
        self.path = path
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def open(self) -> None:
        if self._connection is not None:
            return
        try:
            if self.path != MEMORY_PATH:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(self.path, check_same_thread=False)
            connection.row_factory = sqlite3.Row
            connection.executescript(_SCHEMA)
            connection.commit()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Could not open message store at {self.path}") from exc
        self._connection = connection
        logger.info("Message store ready at %s", self.path)

    def close(self) -> None:
        with self._lock:
            if self._connection is None:
                return
            self._connection.close()
            self._connection = None

    async def append(self, code: str, sender: str, role: Role, content: str, created_at: int) -> int:
        return await asyncio.to_thread(self.append_sync, code, sender, role, content, created_at)

    async def list_by_lobby(self, code: str) -> List[Message]:
        return await asyncio.to_thread(self.list_by_lobby_sync, code)

    def append_sync(self, code: str, sender: str, role: Role, content: str, created_at: int) -> int:
        with self._lock:
            connection = self._require_connection()
            try:
                connection.execute(
                    "INSERT INTO messages (id, lobbyCode, sender, role, content, createdAt) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (created_at, code, sender, Role(role).value, content, created_at),
                )
                connection.commit()
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to append message to lobby {code}") from exc
        return created_at

    def list_by_lobby_sync(self, code: str) -> List[Message]:
        with self._lock:
            connection = self._require_connection()
            try:
                rows = connection.execute(
                    "SELECT id, lobbyCode, sender, role, content, createdAt FROM messages "
                    "WHERE lobbyCode = ? ORDER BY createdAt ASC, rowid ASC",
                    (code,),
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to read messages for lobby {code}") from exc
        return [
            Message(
                id=row["id"],
                lobby_code=row["lobbyCode"],
                sender=row["sender"],
                role=Role(row["role"]),
                content=row["content"],
                created_at=row["createdAt"],
            )
            for row in rows
        ]

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StorageError("Message store is not open.")
        return self._connection
