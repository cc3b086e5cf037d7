# config.example.py

"""
Documentation-only module (safe to commit).

Settings come from environment variables, optionally loaded from a local .env
file (gitignored). Real variables win over .env entries. Never commit secrets.

See src/taskflow/config.py for how each value is parsed.
"""

ENV_VARS = {
    # App / logging
    "TASKFLOW_APP_NAME": "App display name (default: taskflow).",
    "TASKFLOW_LOG_LEVEL": "Console logging level (default: INFO); the log file always gets DEBUG.",
    # Time
    "TASKFLOW_TIMEZONE": "Reference timezone for day boundaries and overdue math (default: Asia/Shanghai).",
    "TASKFLOW_TIME_SOURCE_URL": "Server whose HTTP Date header is trusted as 'now' (default: https://www.baidu.com).",
    "TASKFLOW_TIME_TIMEOUT_SECONDS": "Timeout for the time request before falling back to local time (default: 2).",
    "TASKFLOW_DEFAULT_DUE_DAYS": "Due date offset for AI suggestions without a usable date (default: 3).",
    # LLM / OpenRouter
    "TASKFLOW_OPENROUTER_API_KEY": "OpenRouter API key (without it the app runs in offline demo mode).",
    "TASKFLOW_OPENROUTER_BASE_URL": "OpenAI-compatible base URL (default: https://openrouter.ai/api/v1).",
    "TASKFLOW_LLM_MODELS": "Comma/space separated models to try in order; audio needs an audio-capable model.",
    "TASKFLOW_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "TASKFLOW_APP_TITLE": "Optional OpenRouter metadata header title.",
    "TASKFLOW_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "TASKFLOW_LLM_READ_TIMEOUT_SECONDS": "Read timeout (default: 60, never below the first-token timeout).",
    "TASKFLOW_LLM_FIRST_TOKEN_TIMEOUT_SECONDS": "Give up on a model without a first token after this (default: 30).",
    # Paths (gitignored)
    "TASKFLOW_DATA_DIR": "Local data directory (default: .local/taskflow).",
    "TASKFLOW_DB_PATH": "SQLite database for tasks, users and meetings (default: <data_dir>/taskflow.sqlite3).",
    "TASKFLOW_RECORDINGS_DIR": "Where meeting recordings are kept (default: <data_dir>/recordings).",
}
