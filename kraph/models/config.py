"""Configuration data structures.

Every section validates itself on construction so an invalid setting
fails before any network call is made.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_WEIGHT = 1.0


@dataclass
class ScraperConfig:
    """Listing pipeline configuration.

    namespace:  only list objects of this namespace; empty means all namespaces.
    page_size:  items requested per listing call.
    workers:    maximum concurrent listing tasks; 0 means one per resource.
    queue_size: capacity of the page stream between listers and the aggregator.
    """

    namespace: str = ""
    page_size: int = 100
    workers: int = 0
    queue_size: int = 250

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.workers < 0:
            raise ValueError(f"workers must not be negative, got {self.workers}")
        if self.queue_size < 1:
            raise ValueError(f"queue_size must be positive, got {self.queue_size}")


@dataclass
class GitHubConfig:
    """GitHub starred-repository source configuration."""

    user: str = ""
    token: str = ""
    paging: int = 50
    base_url: str = "https://api.github.com"

    def __post_init__(self) -> None:
        if not 1 <= self.paging <= 100:
            raise ValueError(f"paging must be within 1..100, got {self.paging}")


@dataclass
class GraphConfig:
    """Graph store configuration.

    weight:     weight of edges built from topology links.
    multi_line: keep one edge per link instead of one edge per object pair.
    """

    id: str = "kraph"
    weight: float = DEFAULT_WEIGHT
    multi_line: bool = False
    graph_attrs: dict[str, str] = field(default_factory=dict)
    node_attrs: dict[str, str] = field(default_factory=dict)
    edge_attrs: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("graph id must not be empty")


@dataclass
class LogConfig:
    """Logging configuration; ``format`` is ``json`` or ``console``."""

    level: str = "info"
    format: str = "json"


@dataclass
class KraphConfig:
    """Top-level kraph configuration."""

    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    log: LogConfig = field(default_factory=LogConfig)
