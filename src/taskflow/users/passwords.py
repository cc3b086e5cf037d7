# src/taskflow/users/passwords.py

"""Password hashing (bcrypt with SHA-256 pre-hash, so long passwords are not truncated at 72 bytes)."""

from __future__ import annotations

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bool(bcrypt.checkpw(_prehash(password), hashed.encode("utf-8")))
    except (ValueError, TypeError):
        return False
