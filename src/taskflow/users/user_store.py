# src/taskflow/users/user_store.py

from __future__ import annotations

import logging
import sqlite3
import time
import uuid
from pathlib import Path

from ..core.db import SQLiteStore
from ..core.errors import InvalidInput
from .passwords import hash_password, verify_password
from .user_models import User, UserRole, avatar_url

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Employee"


class UserStore(SQLiteStore):
    """
    SQLite user store.

    The first registered user becomes ADMIN; everybody after that starts as USER.
    """

    table = "users"

    def __init__(self, db_path: str | Path = "taskflow.sqlite3") -> None:
        super().__init__(db_path)
        logger.info("UserStore ready db=%s total=%s", self._db_path, self.count())

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    role TEXT NOT NULL DEFAULT 'USER',
                    title TEXT NOT NULL DEFAULT '',
                    avatar TEXT NOT NULL DEFAULT '',
                    password_hash TEXT,
                    created_at REAL NOT NULL
                )
                """
            )
            self._add_missing_columns(
                cur,
                {
                    "title": "TEXT NOT NULL DEFAULT ''",
                    "avatar": "TEXT NOT NULL DEFAULT ''",
                    "password_hash": "TEXT",
                },
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=str(row["id"]),
            name=str(row["name"]),
            role=UserRole.from_db(row["role"]),
            title=str(row["title"] or ""),
            avatar=str(row["avatar"] or ""),
            password_hash=row["password_hash"],
        )

    # ---- public API ----

    def register_user(self, *, name: str, password: str, title: str = "") -> User:
        name = (name or "").strip()
        if not name or not password:
            raise InvalidInput("Name and password are required.")
        if self.find_by_name(name) is not None:
            raise InvalidInput(f"User name already exists: {name}")

        role = UserRole.ADMIN if self.count() == 0 else UserRole.USER
        user = User(
            id=uuid.uuid4().hex,
            name=name,
            role=role,
            title=(title or "").strip() or DEFAULT_TITLE,
            avatar=avatar_url(name),
            password_hash=hash_password(password),
        )

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users(id, name, role, title, avatar, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (user.id, user.name, user.role.value, user.title, user.avatar, user.password_hash, time.time()),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            raise InvalidInput(f"User name already exists: {name}") from e
        finally:
            conn.close()

        logger.info("User registered id=%s name=%s role=%s", user.id, user.name, user.role.value)
        return user

    def login_user(self, name: str, password: str | None) -> User | None:
        """Users registered without a password accept any password."""
        user = self.find_by_name(name)
        if user is None:
            return None
        if not user.password_hash:
            return user
        if password and verify_password(password, user.password_hash):
            return user
        return None

    def update_user_role(self, user_id: str, role: UserRole) -> User | None:
        conn = self._get_conn()
        try:
            conn.execute("UPDATE users SET role = ? WHERE id = ?", (role.value, user_id))
            conn.commit()
        finally:
            conn.close()
        return self.get_user(user_id)

    def get_user(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return self._row_to_user(row) if row else None
        finally:
            conn.close()

    def find_by_name(self, name: str | None) -> User | None:
        name = (name or "").strip()
        if not name:
            return None
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE name = ?", (name,)).fetchone()
            return self._row_to_user(row) if row else None
        finally:
            conn.close()

    def list_users(self) -> list[User]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at ASC, rowid ASC").fetchall()
            return [self._row_to_user(r) for r in rows]
        finally:
            conn.close()
