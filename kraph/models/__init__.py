"""Configuration data structures for kraph."""

from kraph.models.config import (
    GitHubConfig,
    GraphConfig,
    KraphConfig,
    LogConfig,
    ScraperConfig,
)

__all__ = [
    "GitHubConfig",
    "GraphConfig",
    "KraphConfig",
    "LogConfig",
    "ScraperConfig",
]
