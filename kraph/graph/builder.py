"""Builds a MemoryGraph from a Topology."""

from __future__ import annotations

from kraph.api import Topology
from kraph.graph.entity import EdgeOptions
from kraph.graph.memory import MemoryGraph
from kraph.models.config import GraphConfig
from kraph.observability.logging import get_logger
from kraph.uid import UID

_log = get_logger("graph.builder")


def build_graph(top: Topology, config: GraphConfig | None = None) -> MemoryGraph:
    """Return a graph with one node per object and one edge per link.

    A link and its reverse share a UID and yield a single edge. Links to
    objects outside the topology are skipped.
    """
    config = config or GraphConfig()
    graph = MemoryGraph(config)
    for obj in top.objects():
        graph.new_node(obj)

    seen: set[UID] = set()
    dangling = 0
    for obj in top.objects():
        for link in obj.links():
            if link.uid in seen:
                continue
            seen.add(link.uid)
            if link.to_uid.value not in graph:
                dangling += 1
                _log.debug("dangling_link", link=str(link.uid), source=str(link.from_uid), target=str(link.to_uid))
                continue
            graph.link(
                link.from_uid.value,
                link.to_uid.value,
                EdgeOptions(
                    weight=config.weight,
                    attrs={"relation": link.relation} if link.relation else None,
                    metadata=link.metadata,
                    line=config.multi_line,
                ),
            )

    _log.info("graph_built", graph=config.id, nodes=graph.node_count, edges=graph.edge_count, dangling=dangling)
    return graph
