# src/taskflow/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_CLOCK_LOGGER = "taskflow.core.clock"
_QUIET_LIBRARIES = ("httpx", "httpcore", "openai")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decides what reaches the terminal next to the command replies.

    Task, user and meeting events are shown. The clock only speaks up when it
    falls back to local time (WARNING). Library chatter and captured Python
    warnings stay in the log file unless they are errors.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == _CLOCK_LOGGER or record.name.startswith(_CLOCK_LOGGER + "."):
            return record.levelno >= logging.WARNING
        if record.name == "taskflow" or record.name.startswith("taskflow."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskflow",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Route logs to stderr (filtered) and to <log_dir>/taskflow.log (everything).

    Idempotent: existing root handlers are replaced. Call before the stores
    are created so their "ready" lines land in the file.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_dir / "taskflow.log"), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(formatter)
    root.addHandler(logfile)

    logging.captureWarnings(True)

    # HTTP request lines from the clock and LLM calls would drown the file.
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
