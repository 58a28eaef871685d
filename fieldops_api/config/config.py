"""Configuration module for fieldops-api."""
import os
from typing import Dict

TRUTHY_VALUES = ("1", "true", "yes", "on")


def _get_required_env(name: str) -> str:
    """Get required environment variable or raise error."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {value!r}")


def get_database_settings() -> Dict[str, str]:
    """Get Postgres connection settings from environment variables."""
    return {
        "host": _get_required_env("FIELDOPS_DB_HOST"),
        "port": _get_required_env("FIELDOPS_DB_PORT"),
        "user": _get_required_env("FIELDOPS_DB_USER"),
        "password": _get_required_env("FIELDOPS_DB_PASSWORD"),
        "dbname": _get_required_env("FIELDOPS_DB_NAME"),
    }


def get_postgres_dsn() -> str:
    """Get Postgres DSN from environment variables."""
    settings = get_database_settings()
    return f"postgresql://{settings['user']}:{settings['password']}@{settings['host']}:{settings['port']}/{settings['dbname']}"


def get_session_encryption_key() -> str:
    """Get the session encryption key; absence is a fatal configuration error."""
    return _get_required_env("SCE_SESSION_ENCRYPTION_KEY")


def is_automation_enabled() -> bool:
    """Whether cloud extraction endpoints are enabled."""
    return os.getenv("SCE_AUTOMATION_ENABLED", "false").strip().lower() in TRUTHY_VALUES


def get_automation_timeout_seconds() -> float:
    """Timeout handed to the automation client for each extraction call."""
    return _get_int_env("SCE_AUTOMATION_TIMEOUT_MS", 45000) / 1000.0


def get_extraction_retry_config() -> Dict[str, float]:
    """Backoff parameters for per-item extraction calls."""
    return {
        "max_attempts": _get_int_env("EXTRACTION_RETRY_MAX_ATTEMPTS", 1),
        "initial_delay": _get_int_env("EXTRACTION_RETRY_INITIAL_DELAY_MS", 1000) / 1000.0,
        "max_delay": _get_int_env("EXTRACTION_RETRY_MAX_DELAY_MS", 10000) / 1000.0,
        "multiplier": float(os.getenv("EXTRACTION_RETRY_MULTIPLIER", "2")),
    }


def get_log_level() -> str:
    """Get log level name, defaulting to INFO."""
    return os.getenv("LOG_LEVEL", "INFO").upper()
