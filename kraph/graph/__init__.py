"""Undirected object graph built from a Topology.

Exports:
    MemoryGraph  -- in-memory weighted multigraph with query, subgraph and DOT output.
    Node, Edge   -- graph entities; EdgeOptions configures MemoryGraph.link.
    build_graph  -- turn a Topology into a MemoryGraph.
"""

from kraph.graph.builder import build_graph
from kraph.graph.entity import Edge, EdgeOptions, Node
from kraph.graph.memory import MemoryGraph

__all__ = ["Edge", "EdgeOptions", "MemoryGraph", "Node", "build_graph"]
