"""Data structures for the object graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kraph.api import Object


@dataclass
class Node:
    """A graph node wrapping one API object.

    ``dot_id`` is the DOT statement identifier; ``attrs`` end up in the
    DOT output, ``metadata`` does not.
    """

    uid: str
    dot_id: str
    obj: Object
    attrs: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Edge:
    """One undirected line between two nodes; several may join the same pair."""

    uid: str
    from_uid: str
    to_uid: str
    weight: float
    attrs: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class EdgeOptions:
    """Options for :meth:`kraph.graph.MemoryGraph.link`.

    weight:   edge weight; ``None`` or a negative value means the default weight.
    uid:      use this edge UID instead of a random one.
    line:     add a new line even if the nodes are already connected.
    """

    weight: float | None = None
    uid: str | None = None
    attrs: dict[str, str] | None = None
    metadata: dict[str, Any] | None = None
    line: bool = False
