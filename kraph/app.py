"""End-to-end graph builds.

A build runs discover -> map -> build_graph against one source and
closes the source client afterwards.
"""

from __future__ import annotations

from pathlib import Path

from kraph.api import load_seed
from kraph.graph import MemoryGraph, build_graph
from kraph.models.config import KraphConfig
from kraph.observability.logging import get_logger, log_context
from kraph.scraper import Client

_log = get_logger("app")


async def build(client: Client, config: KraphConfig) -> MemoryGraph:
    """Discover the API of *client*, map its objects and return their graph."""
    api = await client.discover()
    with log_context(source=api.source):
        top = await client.map(api)
        _log.info("topology_mapped", resources=len(api), objects=len(top))
        return build_graph(top, config.graph)


async def build_kubernetes(config: KraphConfig) -> MemoryGraph:
    from kraph.scraper.kubernetes import KubernetesClient

    client = await KubernetesClient.from_environment(config.scraper)
    try:
        return await build(client, config)
    finally:
        await client.close()


async def build_github(config: KraphConfig) -> MemoryGraph:
    from kraph.scraper.github import GitHubStarsClient

    client = GitHubStarsClient.from_config(config.github)
    try:
        return await build(client, config)
    finally:
        await client.close()


def build_seed(path: str | Path, config: KraphConfig) -> MemoryGraph:
    """Build the graph of a YAML seed file; no network access."""
    api, top = load_seed(path)
    with log_context(source=api.source, path=str(path)):
        _log.info("topology_mapped", resources=len(api), objects=len(top))
        return build_graph(top, config.graph)
