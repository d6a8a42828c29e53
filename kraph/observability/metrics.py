"""Prometheus metrics for the mapping pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

pages_listed_total = Counter(
    "kraph_pages_listed_total",
    "Pages returned by listing calls",
    ["resource"],
)

objects_mapped_total = Counter(
    "kraph_objects_mapped_total",
    "Objects added to a topology by the aggregator",
)

mapping_errors_total = Counter(
    "kraph_mapping_errors_total",
    "Errors that aborted a mapping run",
    ["stage"],
)

map_duration_seconds = Histogram(
    "kraph_map_duration_seconds",
    "Wall time of a complete mapping run",
)
