# src/taskflow/tasks/task_store.py

from __future__ import annotations

import logging
import re
import sqlite3
import time
import uuid
from datetime import date, datetime
from pathlib import Path

from ..core.db import SQLiteStore
from ..core.errors import TaskNotFound
from .task_models import Task, TaskDraft, TaskStatus

logger = logging.getLogger(__name__)

# Ids are uuid4 hex; anything else (LIKE wildcards included) matches nothing.
_HEX_PREFIX = re.compile(r"[0-9a-f]+")


def new_task_id() -> str:
    return uuid.uuid4().hex


class TaskStore(SQLiteStore):
    """
    SQLite task store.

    Writes are full-record replacements: callers read a snapshot, run it
    through the status engine and hand back the whole Task.
    """

    table = "tasks"

    def __init__(self, db_path: str | Path = "taskflow.sqlite3") -> None:
        super().__init__(db_path)
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'NOT_STARTED',
                    progress INTEGER NOT NULL DEFAULT 0,
                    due_date TEXT NOT NULL,
                    completed_at TEXT,
                    creator_id TEXT,
                    assignee_id TEXT,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # If any old DB is missing any of these, we add them.
            self._add_missing_columns(
                cur,
                {
                    "content": "TEXT NOT NULL DEFAULT ''",
                    "progress": "INTEGER NOT NULL DEFAULT 0",
                    "completed_at": "TEXT",
                    "creator_id": "TEXT",
                    "assignee_id": "TEXT",
                    "updated_at": "REAL NOT NULL DEFAULT 0",
                },
            )

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assignee_id)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due_date)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        completed_raw = row["completed_at"]
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            content=str(row["content"] or ""),
            status=TaskStatus.from_db(row["status"]),
            progress=int(row["progress"] or 0),
            due_date=date.fromisoformat(row["due_date"]),
            completed_at=datetime.fromisoformat(completed_raw) if completed_raw else None,
            creator_id=row["creator_id"],
            assignee_id=row["assignee_id"],
        )

    @staticmethod
    def _task_params(task: Task) -> tuple:
        return (
            task.title,
            task.content,
            task.status.value,
            int(task.progress),
            task.due_date.isoformat(),
            task.completed_at.isoformat() if task.completed_at else None,
            task.creator_id,
            task.assignee_id,
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        return self.count()

    def add_task(self, draft: TaskDraft, *, creator_id: str | None) -> Task:
        """Insert a fresh task: NOT_STARTED, progress 0."""
        if not draft.title or not draft.title.strip():
            raise ValueError("title is required")

        task = Task(
            id=new_task_id(),
            title=draft.title.strip(),
            content=(draft.content or "").strip(),
            status=TaskStatus.NOT_STARTED,
            progress=0,
            due_date=draft.due_date,
            creator_id=creator_id,
            assignee_id=draft.assignee_id,
        )

        now = time.time()
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, title, content, status, progress, due_date,
                    completed_at, creator_id, assignee_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (task.id, *self._task_params(task), now, now),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Task added id=%s assignee=%s due=%s", task.id, task.assignee_id, task.due_date)
        return task

    def get_task(self, task_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def find_by_prefix(self, prefix: str) -> list[Task]:
        """Tasks whose id starts with `prefix` (the console shows short ids)."""
        prefix = (prefix or "").strip().lower()
        if not _HEX_PREFIX.fullmatch(prefix):
            return []
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE id LIKE ? ORDER BY created_at ASC, rowid ASC",
                (prefix + "%",),
            ).fetchall()
            return [self._row_to_task(r) for r in rows]
        finally:
            conn.close()

    def list_tasks(self) -> list[Task]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM tasks ORDER BY created_at ASC, rowid ASC").fetchall()
            return [self._row_to_task(r) for r in rows]
        finally:
            conn.close()

    def replace_task(self, task: Task) -> Task:
        """Persist a full replacement record (no partial-field updates)."""
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?, content = ?, status = ?, progress = ?, due_date = ?,
                    completed_at = ?, creator_id = ?, assignee_id = ?, updated_at = ?
                WHERE id = ?
                """,
                (*self._task_params(task), time.time(), task.id),
            )
            conn.commit()
            if cur.rowcount != 1:
                raise TaskNotFound(task.id)
        finally:
            conn.close()

        logger.debug("Task replaced id=%s status=%s progress=%s", task.id, task.status.value, task.progress)
        return task

    def delete_task(self, task_id: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()
