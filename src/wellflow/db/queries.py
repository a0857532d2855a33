"""Raw queries against the state_records key-value table."""

from __future__ import annotations

import sqlite3
from typing import Optional


class RecordQueries:
    """Database queries for JSON state records."""

    @staticmethod
    def get_record(conn: sqlite3.Connection, key: str) -> Optional[str]:
        """Return the raw JSON text stored under key, or None."""
        row = conn.execute(
            "SELECT value FROM state_records WHERE key = ?",
            (key,),
        ).fetchone()
        return row[0] if row is not None else None

    @staticmethod
    def put_record(conn: sqlite3.Connection, key: str, value: str) -> None:
        """Insert or replace the record stored under key."""
        conn.execute(
            """
            INSERT INTO state_records (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value),
        )
