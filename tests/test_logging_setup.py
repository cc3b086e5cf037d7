# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskflow.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("taskflow.tasks.task_api", logging.INFO, True),
        ("taskflow.core.clock", logging.INFO, False),
        ("taskflow.core.clock", logging.WARNING, True),
        ("taskflow.core.clockwork", logging.INFO, True),
        ("httpx", logging.WARNING, False),
        ("openai", logging.ERROR, True),
        ("py.warnings", logging.WARNING, False),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        setup_logging(log_dir=tmp_path / "logs")
        logging.getLogger("taskflow.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()
        assert "hello file" in (tmp_path / "logs" / "taskflow.log").read_text(encoding="utf-8")
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved[0]:
            root.addHandler(handler)
        root.setLevel(saved[1])
        logging.captureWarnings(False)
