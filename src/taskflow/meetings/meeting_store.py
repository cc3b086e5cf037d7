# src/taskflow/meetings/meeting_store.py

from __future__ import annotations

import logging
import sqlite3
import time
import uuid
from datetime import datetime
from pathlib import Path

from ..core.db import SQLiteStore
from .meeting_models import Meeting

logger = logging.getLogger(__name__)


class MeetingStore(SQLiteStore):
    """SQLite store for meeting records (minutes + source). Listed newest first."""

    table = "meetings"

    def __init__(self, db_path: str | Path = "taskflow.sqlite3") -> None:
        super().__init__(db_path)
        logger.info("MeetingStore ready db=%s total=%s", self._db_path, self.count())

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS meetings (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    date TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    summary TEXT,
                    recording_path TEXT,
                    created_at REAL NOT NULL
                )
                """
            )
            self._add_missing_columns(cur, {"summary": "TEXT", "recording_path": "TEXT"})
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_meeting(row: sqlite3.Row) -> Meeting:
        return Meeting(
            id=str(row["id"]),
            title=str(row["title"]),
            date=datetime.fromisoformat(row["date"]),
            content=str(row["content"] or ""),
            summary=row["summary"],
            recording_path=row["recording_path"],
        )

    def add_meeting(
        self,
        *,
        title: str,
        date: datetime,
        content: str,
        summary: str | None = None,
        recording_path: str | None = None,
    ) -> Meeting:
        meeting = Meeting(
            id=uuid.uuid4().hex,
            title=title,
            date=date,
            content=content,
            summary=summary,
            recording_path=recording_path,
        )
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO meetings(id, title, date, content, summary, recording_path, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    meeting.id,
                    meeting.title,
                    meeting.date.isoformat(),
                    meeting.content,
                    meeting.summary,
                    meeting.recording_path,
                    time.time(),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Meeting added id=%s title=%s", meeting.id, meeting.title)
        return meeting

    def list_meetings(self, limit: int = 50) -> list[Meeting]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM meetings ORDER BY created_at DESC, rowid DESC LIMIT ?", (int(limit),)
            ).fetchall()
            return [self._row_to_meeting(r) for r in rows]
        finally:
            conn.close()
