# src/taskflow/users/user_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import quote


class UserRole(StrEnum):
    ADMIN = "ADMIN"  # CEO / administrator
    OPERATOR = "OPERATOR"  # assistant / system operator
    USER = "USER"  # employee

    @classmethod
    def from_db(cls, raw: str | None) -> UserRole:
        if not raw:
            return cls.USER
        try:
            return cls(raw)
        except ValueError:
            return cls.USER

    @property
    def label(self) -> str:
        return {
            UserRole.ADMIN: "Administrator",
            UserRole.OPERATOR: "Operator",
            UserRole.USER: "Employee",
        }[self]


@dataclass(slots=True)
class User:
    id: str
    name: str
    role: UserRole
    title: str
    avatar: str
    password_hash: str | None = None


def avatar_url(name: str) -> str:
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={quote(name, safe='')}"
