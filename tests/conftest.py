# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from taskflow.core.clock import FixedClock
from taskflow.core.state import AppState
from taskflow.meetings.meeting_store import MeetingStore
from taskflow.tasks.task_store import TaskStore
from taskflow.users.user_models import User, UserRole
from taskflow.users.user_store import UserStore

from .fakes import FakeLLMClient

CST = ZoneInfo("Asia/Shanghai")

# 2024-01-10 09:30 in Shanghai (01:30 UTC)
REFERENCE = datetime(2024, 1, 10, 9, 30, tzinfo=CST)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the services.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskflow-test",
        reference_timezone="Asia/Shanghai",
        default_due_days=3,
        data_dir=tmp_path,
        db_path=tmp_path / "taskflow.sqlite3",
        recordings_dir=tmp_path / "recordings",
    )


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def state(settings: SimpleNamespace, llm: FakeLLMClient) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: We keep real SQLite stores here because their correctness is part
    of what we want to test.
    """
    return AppState(
        settings=settings,
        llm=llm,
        clock=FixedClock(REFERENCE),
        tasks=TaskStore(settings.db_path),
        users=UserStore(settings.db_path),
        meetings=MeetingStore(settings.db_path),
    )


@pytest.fixture()
def admin(state: AppState) -> User:
    # First registered user becomes ADMIN.
    return state.users.register_user(name="Boss", password="pw-admin", title="CEO")


@pytest.fixture()
def operator(state: AppState, admin: User) -> User:
    user = state.users.register_user(name="Olga", password="pw-op", title="Assistant")
    updated = state.users.update_user_role(user.id, UserRole.OPERATOR)
    assert updated is not None
    return updated


@pytest.fixture()
def employee(state: AppState, admin: User) -> User:
    return state.users.register_user(name="Eve", password="pw-eve", title="Sales")
