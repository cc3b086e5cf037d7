# src/taskflow/core/db.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)


class SQLiteStore:
    """
    Base for the SQLite-backed stores.

    Schemas are migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    table: str = ""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        raise NotImplementedError

    def _add_missing_columns(self, cur: sqlite3.Cursor, columns: dict[str, str]) -> None:
        cur.execute(f"PRAGMA table_info({self.table})")
        existing = {row["name"] for row in cur.fetchall()}
        for name, decl in columns.items():
            if name in existing:
                continue
            cur.execute(f"ALTER TABLE {self.table} ADD COLUMN {name} {decl}")
            logger.info("%s migration: added column %s", type(self).__name__, name)

    def count(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()
            return int(n)
        finally:
            conn.close()
