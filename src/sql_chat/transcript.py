"""
Transcript Log
==============

Records each chat turn to the application database. Writes are
fire-and-forget: a failure is logged and never reaches the caller.
"""

import sqlite3
from contextlib import closing
from datetime import datetime, timezone

import structlog

logger = structlog.get_logger(__name__)

CHAT_MESSAGES_DDL = """
CREATE TABLE IF NOT EXISTS ChatMessages (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    UserId TEXT NOT NULL,
    Message TEXT NOT NULL,
    Response TEXT NOT NULL,
    SqlQuery TEXT,
    CreatedAt TEXT NOT NULL
)"""


class TranscriptLog:
    """Chat transcript storage, separate from the employee store."""

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path, timeout=self.timeout)

    def initialize(self) -> None:
        with closing(self._connect()) as connection:
            connection.execute(CHAT_MESSAGES_DDL)
            connection.commit()

    def record(self, caller_id: str, message: str, response: str, sql_query: str | None) -> bool:
        """Store one (input, output, generated SQL) tuple. Returns False on failure."""
        try:
            with closing(self._connect()) as connection:
                connection.execute(
                    "INSERT INTO ChatMessages (UserId, Message, Response, SqlQuery, CreatedAt) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (caller_id, message, response, sql_query, datetime.now(timezone.utc).isoformat()),
                )
                connection.commit()
        except sqlite3.Error as e:
            logger.warning("transcript_write_failed", caller_id=caller_id, error=str(e))
            return False
        return True

    def recent(self, caller_id: str, limit: int = 20) -> list[dict]:
        """A caller's most recent turns, newest first."""
        with closing(self._connect()) as connection:
            connection.row_factory = sqlite3.Row
            rows = connection.execute(
                "SELECT Message, Response, SqlQuery, CreatedAt FROM ChatMessages "
                "WHERE UserId = ? ORDER BY Id DESC LIMIT ?",
                (caller_id, limit),
            ).fetchall()
        return [
            {
                "message": row["Message"],
                "response": row["Response"],
                "sql_query": row["SqlQuery"],
                "created_at": row["CreatedAt"],
            }
            for row in rows
        ]
