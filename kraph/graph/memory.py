"""In-memory undirected weighted multigraph of API objects."""

from __future__ import annotations

import itertools
from collections import deque
from collections.abc import Iterator
from dataclasses import replace
from typing import Any
from uuid import uuid4

from kraph.api import Object
from kraph.attrs import copy_attrs, copy_metadata, string_attrs
from kraph.errors import EdgeNotFoundError, MissingResourceError, NodeNotFoundError, UnknownEntityError
from kraph.graph import dot
from kraph.graph.entity import Edge, EdgeOptions, Node
from kraph.models.config import DEFAULT_WEIGHT, GraphConfig
from kraph.observability.logging import get_logger
from kraph.query import Entity, Query

_log = get_logger("graph.memory")


class MemoryGraph:
    """Undirected weighted multigraph keyed by node UID.

    Every pair of nodes may be joined by several lines; by default
    :meth:`link` keeps at most one. Nodes and lines get an insertion
    sequence number that fixes traversal and encoding order, so the same
    build always produces the same output.

    Not safe for concurrent mutation; build it from a single task.
    """

    def __init__(self, config: GraphConfig | None = None) -> None:
        self.config = config or GraphConfig()
        self._nodes: dict[str, Node] = {}
        self._lines: dict[str, Edge] = {}
        self._seq: dict[str, int] = {}
        self._counter = itertools.count()
        # node uid -> peer uid -> line uid -> line
        self._adj: dict[str, dict[str, dict[str, Edge]]] = {}

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._lines)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def new_node(
        self,
        obj: Object,
        attrs: dict[str, str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Node:
        """Return the node of *obj*, creating and adding it if needed.

        String-valued object metadata is copied into the node attributes;
        ``name`` is always set to the ``version/namespace/kind/name`` label.

        Raises:
            MissingResourceError: if *obj* has no resource.
        """
        uid = obj.uid.value
        if uid in self._nodes:
            return self._nodes[uid]
        if obj.resource is None:
            raise MissingResourceError(uid)

        node_attrs = string_attrs(obj.metadata)
        node_attrs.update(copy_attrs(attrs))
        node_attrs["name"] = dot.node_label(obj)
        return self.add_node(
            Node(uid=uid, dot_id=dot.dot_id(obj), obj=obj, attrs=node_attrs, metadata=copy_metadata(metadata))
        )

    def add_node(self, node: Node) -> Node:
        """Add *node* unless a node with its UID exists; return the stored node."""
        if node.uid in self._nodes:
            return self._nodes[node.uid]
        self._nodes[node.uid] = node
        self._seq[node.uid] = next(self._counter)
        self._adj[node.uid] = {}
        return node

    def node(self, uid: str) -> Node:
        """Return the node with *uid*.

        Raises:
            NodeNotFoundError: if the graph has no such node.
        """
        try:
            return self._nodes[uid]
        except KeyError:
            raise NodeNotFoundError(uid) from None

    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def remove_node(self, uid: str) -> None:
        """Remove the node with *uid* and every line touching it; unknown UIDs are ignored."""
        peers = self._adj.pop(uid, None)
        if peers is None:
            return
        for peer, lines in peers.items():
            for line_uid in lines:
                self._lines.pop(line_uid, None)
                self._seq.pop(line_uid, None)
            if peer != uid:
                self._adj[peer].pop(uid, None)
        del self._nodes[uid]
        del self._seq[uid]

    def neighbors(self, uid: str) -> list[Node]:
        """Return the nodes sharing at least one line with *uid*, in insertion order."""
        self.node(uid)
        return [self._nodes[p] for p in self._peers(uid)]

    def _peers(self, uid: str) -> list[str]:
        return sorted(self._adj.get(uid, {}), key=self._seq.__getitem__)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def link(self, from_uid: str, to_uid: str, opts: EdgeOptions | None = None) -> Edge:
        """Join two nodes and return the line.

        Without ``line`` an existing line between the nodes is returned
        unchanged. Attributes and metadata are copied into the new line.

        Raises:
            NodeNotFoundError: if either node is missing.
        """
        opts = opts or EdgeOptions()
        self.node(from_uid)
        self.node(to_uid)

        existing = self._adj[from_uid].get(to_uid)
        if existing and not opts.line:
            return next(iter(existing.values()))
        if opts.uid and opts.uid in self._lines:
            return self._lines[opts.uid]

        weight = opts.weight if opts.weight is not None and opts.weight >= 0 else DEFAULT_WEIGHT
        edge = Edge(
            uid=opts.uid or str(uuid4()),
            from_uid=from_uid,
            to_uid=to_uid,
            weight=weight,
            attrs=copy_attrs(opts.attrs),
            metadata=copy_metadata(opts.metadata),
        )
        self._lines[edge.uid] = edge
        self._seq[edge.uid] = next(self._counter)
        self._adj[from_uid].setdefault(to_uid, {})[edge.uid] = edge
        self._adj[to_uid].setdefault(from_uid, {})[edge.uid] = edge
        return edge

    def edges(self, from_uid: str, to_uid: str) -> list[Edge]:
        """Return every line joining the two nodes, possibly none.

        Raises:
            NodeNotFoundError: if either node is missing.
        """
        self.node(from_uid)
        self.node(to_uid)
        return list(self._adj[from_uid].get(to_uid, {}).values())

    def edge(self, from_uid: str, to_uid: str) -> Edge:
        """Return the first line joining the two nodes.

        Raises:
            EdgeNotFoundError: if the nodes are not connected.
        """
        lines = self.edges(from_uid, to_uid)
        if not lines:
            raise EdgeNotFoundError(from_uid, to_uid)
        return lines[0]

    def all_edges(self) -> list[Edge]:
        return list(self._lines.values())

    def remove_edge(self, from_uid: str, to_uid: str, uid: str | None = None) -> None:
        """Remove the line *uid* between the nodes, or all of their lines when *uid* is None.

        Raises:
            EdgeNotFoundError: if no matching line exists.
        """
        lines = self._adj.get(from_uid, {}).get(to_uid)
        if not lines or (uid is not None and uid not in lines):
            raise EdgeNotFoundError(from_uid, to_uid, uid)

        for line_uid in [uid] if uid is not None else list(lines):
            del self._lines[line_uid]
            del self._seq[line_uid]
            self._adj[from_uid][to_uid].pop(line_uid, None)
            self._adj[to_uid][from_uid].pop(line_uid, None)

        if not self._adj[from_uid][to_uid]:
            del self._adj[from_uid][to_uid]
            self._adj[to_uid].pop(from_uid, None)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def subgraph(self, uid: str, depth: int) -> MemoryGraph:
        """Return a new graph with every node within *depth* hops of *uid*.

        Lines joining two collected nodes are copied, each exactly once.

        Raises:
            NodeNotFoundError: if *uid* is not in the graph.
            ValueError:        if *depth* is negative.
        """
        self.node(uid)
        if depth < 0:
            raise ValueError(f"depth must not be negative, got {depth}")

        hops = {uid: 0}
        queue = deque([uid])
        while queue:
            current = queue.popleft()
            if hops[current] == depth:
                continue
            for peer in self._peers(current):
                if peer not in hops:
                    hops[peer] = hops[current] + 1
                    queue.append(peer)

        config = replace(
            self.config,
            graph_attrs=copy_attrs(self.config.graph_attrs),
            node_attrs=copy_attrs(self.config.node_attrs),
            edge_attrs=copy_attrs(self.config.edge_attrs),
        )
        sub = MemoryGraph(config)
        for node_uid in sorted(hops, key=self._seq.__getitem__):
            node = self._nodes[node_uid]
            sub.new_node(node.obj, attrs=node.attrs, metadata=node.metadata)

        for line in self._lines.values():
            if line.from_uid in hops and line.to_uid in hops:
                sub.link(
                    line.from_uid,
                    line.to_uid,
                    EdgeOptions(weight=line.weight, uid=line.uid, attrs=line.attrs, metadata=line.metadata, line=True),
                )

        _log.debug("subgraph_built", root=uid, depth=depth, nodes=sub.node_count, edges=sub.edge_count)
        return sub

    def _walk(self) -> Iterator[str]:
        """Depth-first node order over every connected component."""
        seen: set[str] = set()
        for start in self._nodes:
            if start in seen:
                continue
            stack = [start]
            while stack:
                current = stack.pop()
                if current in seen:
                    continue
                seen.add(current)
                yield current
                stack.extend(reversed(self._peers(current)))

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, q: Query) -> list[Node] | list[Edge]:
        """Return copies of the nodes or lines matching *q*, per its entity.

        Raises:
            UnknownEntityError: if the query entity is neither node nor edge.
        """
        entity = q.value("entity")
        if entity == Entity.NODE:
            return self._query_nodes(q)
        if entity == Entity.EDGE:
            return self._query_edges(q)
        raise UnknownEntityError(entity)

    def _query_nodes(self, q: Query) -> list[Node]:
        if q.narrows("uid"):
            node = self._nodes.get(q.value("uid").value)
            candidates = [node] if node is not None else []
        else:
            candidates = [self._nodes[uid] for uid in self._walk()]

        return [
            replace(n, attrs=copy_attrs(n.attrs), metadata=copy_metadata(n.metadata))
            for n in candidates
            if q.match("uid", n.uid)
            and q.match("namespace", n.obj.namespace)
            and q.match("kind", n.obj.kind)
            and q.match("name", n.obj.name)
            and q.match("attrs", n.attrs)
        ]

    def _query_edges(self, q: Query) -> list[Edge]:
        if q.narrows("uid"):
            line = self._lines.get(q.value("uid").value)
            candidates = [line] if line is not None else []
        else:
            candidates = []
            seen: set[str] = set()
            for uid in self._walk():
                for peer in self._peers(uid):
                    for line in self._adj[uid][peer].values():
                        if line.uid not in seen:
                            seen.add(line.uid)
                            candidates.append(line)

        return [
            replace(e, attrs=copy_attrs(e.attrs), metadata=copy_metadata(e.metadata))
            for e in candidates
            if q.match("uid", e.uid) and q.match("weight", e.weight) and q.match("attrs", e.attrs)
        ]

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def dot(self) -> str:
        """Encode the graph as Graphviz DOT."""
        nodes = [(n.dot_id, n.attrs) for n in self._nodes.values()]
        edges = [
            (self._nodes[e.from_uid].dot_id, self._nodes[e.to_uid].dot_id, e.attrs) for e in self._lines.values()
        ]
        return dot.marshal(
            self.config.id,
            nodes,
            edges,
            graph_attrs=self.config.graph_attrs,
            node_attrs=self.config.node_attrs,
            edge_attrs=self.config.edge_attrs,
        )

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, uid: object) -> bool:
        return uid in self._nodes
