"""SQLite message store adapter.

Implements the core MessageStorePort using a simple SQLite database. This is
the local/dev backend; production runs against Firestore.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional

from core.models import MessageRecord

DEFAULT_PAGE_SIZE = 500


def _to_db(value: datetime) -> str:
    # Fixed-width UTC ISO strings compare in chronological order.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db(value: str) -> datetime:
    return datetime.fromisoformat(value)


class SQLiteDeleteBatch:
    """Collects record ids and deletes them in a single transaction."""

    def __init__(self, store: "SQLiteMessageStore") -> None:
        self._store = store
        self._ids: list[str] = []

    def delete(self, record: MessageRecord) -> None:
        self._ids.append(record.ref or record.record_id)

    async def commit(self) -> None:
        if not self._ids:
            return
        # The connection context manager commits on success and rolls the
        # whole batch back on any error.
        with self._store._connect() as conn:
            conn.executemany(
                "DELETE FROM messages WHERE id = ?",
                [(record_id,) for record_id in self._ids],
            )


class SQLiteMessageStore:
    """Thin SQLite wrapper that satisfies the MessageStorePort contract."""

    def __init__(self, db_path: str, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._db_path = db_path
        self._page_size = page_size

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - messages: chat messages, mirroring the document store fields
        """

        with self._connect() as conn:
            # Fields:
            # - id: opaque record id (PRIMARY KEY)
            # - uid / display_name: sender identity and display name
            # - text: optional message body
            # - image_url / storage_path: set together when a photo is attached
            # - timestamp: UTC ISO creation time, the only filter/order key
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS messages (
                    id TEXT PRIMARY KEY,
                    uid TEXT NOT NULL,
                    display_name TEXT NOT NULL,
                    text TEXT,
                    image_url TEXT,
                    storage_path TEXT,
                    timestamp TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_timestamp ON messages (timestamp, id)")

    def add_message(self, record: MessageRecord) -> str:
        """Insert a message and return its record id."""

        if bool(record.image_url) != bool(record.storage_path):
            raise ValueError("image_url and storage_path must be set together")
        record_id = record.record_id or uuid.uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO messages (id, uid, display_name, text, image_url, storage_path, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record_id,
                    record.sender_id,
                    record.sender_name,
                    record.text,
                    record.image_url,
                    record.storage_path,
                    _to_db(record.created_at),
                ),
            )
        return record_id

    def count_messages(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM messages").fetchone()
        return int(row["total"])

    async def find_older_than(self, cutoff: datetime) -> list[MessageRecord]:
        """Return every message strictly older than cutoff.

        Pages are read with a (timestamp, id) keyset cursor so a row can never
        appear twice, and rows written after the cutoff never qualify.
        """

        bound = _to_db(cutoff)
        records: list[MessageRecord] = []
        last: Optional[tuple[str, str]] = None
        with self._connect() as conn:
            while True:
                if last is None:
                    rows = conn.execute(
                        """
                        SELECT * FROM messages WHERE timestamp < ?
                        ORDER BY timestamp, id LIMIT ?
                        """,
                        (bound, self._page_size),
                    ).fetchall()
                else:
                    rows = conn.execute(
                        """
                        SELECT * FROM messages
                        WHERE timestamp < ? AND (timestamp > ? OR (timestamp = ? AND id > ?))
                        ORDER BY timestamp, id LIMIT ?
                        """,
                        (bound, last[0], last[0], last[1], self._page_size),
                    ).fetchall()
                records.extend(self._to_record(row) for row in rows)
                if len(rows) < self._page_size:
                    break
                last = (rows[-1]["timestamp"], rows[-1]["id"])
        return records

    def batch(self) -> SQLiteDeleteBatch:
        return SQLiteDeleteBatch(self)

    @staticmethod
    def _to_record(row: sqlite3.Row) -> MessageRecord:
        return MessageRecord(
            record_id=row["id"],
            sender_id=row["uid"],
            sender_name=row["display_name"],
            created_at=_from_db(row["timestamp"]),
            text=row["text"],
            image_url=row["image_url"],
            storage_path=row["storage_path"],
            ref=row["id"],
        )
