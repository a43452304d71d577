"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from depcatalog.models.config import (
    APIConfig,
    DatabaseConfig,
    DepCatalogConfig,
    GraphConfig,
    LogConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"DEPCATALOG_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_db_path(value: str) -> str:
    if not value.strip():
        raise ValueError("Database path must not be empty")
    return value


def load_config() -> DepCatalogConfig:
    """Load configuration from DEPCATALOG_* environment variables."""
    return DepCatalogConfig(
        database=DatabaseConfig(
            path=_validate_db_path(_env("DB_PATH", "depcatalog.db")),
            latency_window_hours=_env_int("LATENCY_WINDOW_HOURS", 24, min_val=1, max_val=168),
        ),
        graph=GraphConfig(
            include_canonical_overrides=_env_bool("GRAPH_CANONICAL_OVERRIDES", True),
        ),
        api=APIConfig(
            host=_env("API_HOST", "0.0.0.0"),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
