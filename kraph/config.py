"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kraph.models.config import (
    DEFAULT_WEIGHT,
    GitHubConfig,
    GraphConfig,
    KraphConfig,
    LogConfig,
    ScraperConfig,
)
from kraph.observability.logging import LOG_FORMATS


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KRAPH_{key}", default)


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


def _env_float(key: str, default: float) -> float:
    return float(_env(key, str(default)))


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ValueError(f"Invalid log format: {value}. Must be one of {LOG_FORMATS}")
    return value.lower()


def load_config() -> KraphConfig:
    """Load configuration from KRAPH_* environment variables."""
    return KraphConfig(
        scraper=ScraperConfig(
            namespace=_env("NAMESPACE", ""),
            page_size=_env_int("PAGE_SIZE", 100, min_val=1, max_val=500),
            workers=_env_int("WORKERS", 0, min_val=0),
            queue_size=_env_int("QUEUE_SIZE", 250, min_val=1),
        ),
        github=GitHubConfig(
            user=_env("GITHUB_USER", ""),
            token=_env("GITHUB_TOKEN", ""),
            paging=_env_int("GITHUB_PAGING", 50, min_val=1, max_val=100),
        ),
        graph=GraphConfig(
            id=_env("GRAPH_ID", "kraph"),
            weight=_env_float("GRAPH_WEIGHT", DEFAULT_WEIGHT),
            multi_line=_env_bool("GRAPH_MULTI_LINE", False),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
