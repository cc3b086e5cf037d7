# src/taskflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Components receive settings injected; get_settings() is only the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKFLOW"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Real environment variables win over .env entries.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Time ----
    reference_timezone: str
    time_source_url: str
    time_timeout_seconds: float
    default_due_days: int

    # ---- LLM / OpenRouter ----
    openrouter_api_key: Optional[str]
    openrouter_base_url: str
    llm_models: List[str]
    extra_headers: Dict[str, str]
    llm_connect_timeout_seconds: float
    llm_read_timeout_seconds: float
    llm_first_token_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    recordings_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskflow") or "taskflow"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        # China Standard Time is the house timezone for all day-boundary math.
        reference_timezone = _env(_k("TIMEZONE"), "Asia/Shanghai")
        time_source_url = _env(_k("TIME_SOURCE_URL"), "https://www.baidu.com")
        time_timeout_seconds = _env_float(_k("TIME_TIMEOUT_SECONDS"), 2.0)
        default_due_days = _env_int(_k("DEFAULT_DUE_DAYS"), 3)

        openrouter_api_key = _first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None)
        openrouter_base_url = _env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1")

        http_referer = _env(_k("HTTP_REFERER"), "https://example.com")
        title = _env(_k("APP_TITLE"), app_name)
        extra_headers = {
            "HTTP-Referer": http_referer,
            "X-Title": title,
        }

        llm_models = _env_list(
            _k("LLM_MODELS"),
            [
                "google/gemini-2.5-flash",
                "openai/gpt-4o-audio-preview",
            ],
        )

        first_token = _env_float(_k("LLM_FIRST_TOKEN_TIMEOUT_SECONDS"), 30.0)
        read_timeout = _env_float(_k("LLM_READ_TIMEOUT_SECONDS"), 60.0)
        connect_timeout = _env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskflow"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "taskflow.sqlite3")
        recordings_dir = _env_path(_k("RECORDINGS_DIR"), data_dir / "recordings")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            reference_timezone=reference_timezone,
            time_source_url=time_source_url,
            time_timeout_seconds=time_timeout_seconds,
            default_due_days=default_due_days,
            openrouter_api_key=openrouter_api_key,
            openrouter_base_url=openrouter_base_url,
            llm_models=llm_models,
            extra_headers=extra_headers,
            llm_connect_timeout_seconds=connect_timeout,
            # keep read >= first_token as a sane baseline
            llm_read_timeout_seconds=max(read_timeout, first_token),
            llm_first_token_timeout_seconds=first_token,
            data_dir=data_dir,
            db_path=db_path,
            recordings_dir=recordings_dir,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
