# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskflow.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TIMEZONE", "DEFAULT_DUE_DAYS", "LLM_MODELS", "DATA_DIR", "DB_PATH", "RECORDINGS_DIR"):
        monkeypatch.delenv(f"TASKFLOW_{name}", raising=False)

    s = Settings.from_env()

    assert s.reference_timezone == "Asia/Shanghai"
    assert s.default_due_days == 3
    assert s.llm_models[0] == "google/gemini-2.5-flash"
    assert s.db_path == Path(".local/taskflow/taskflow.sqlite3")


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKFLOW_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("TASKFLOW_DEFAULT_DUE_DAYS", "not-a-number")
    monkeypatch.setenv("TASKFLOW_LLM_MODELS", "a/one, b/two")
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKFLOW_DB_PATH", raising=False)
    monkeypatch.setenv("TASKFLOW_LLM_FIRST_TOKEN_TIMEOUT_SECONDS", "90")
    monkeypatch.setenv("TASKFLOW_LLM_READ_TIMEOUT_SECONDS", "10")

    s = Settings.from_env()

    assert s.reference_timezone == "Europe/Berlin"
    assert s.default_due_days == 3
    assert s.llm_models == ["a/one", "b/two"]
    assert s.db_path == tmp_path / "taskflow.sqlite3"
    assert s.llm_read_timeout_seconds == 90.0
