"""Graphviz DOT encoding of undirected graphs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from kraph.api import Object

INDENT = "  "


def dot_id(obj: Object) -> str:
    """Return the DOT identifier of *obj*: ``group/version/kind/namespace/name``."""
    res = obj.resource
    group, version = (res.group, res.version) if res is not None else ("", "")
    return "/".join([group, version, obj.kind, obj.namespace, obj.name])


def node_label(obj: Object) -> str:
    """Return the human readable ``version/namespace/kind/name`` label of *obj*."""
    version = obj.resource.version if obj.resource is not None else ""
    return "/".join([version, obj.namespace, obj.kind, obj.name])


def quote(value: str) -> str:
    """Quote *value* as a DOT string literal."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'


def attr_list(attrs: Mapping[str, str]) -> str:
    return ", ".join(f"{quote(k)}={quote(v)}" for k, v in sorted(attrs.items()))


def _statement(head: str, attrs: Mapping[str, str]) -> str:
    return f"{INDENT}{head} [{attr_list(attrs)}];" if attrs else f"{INDENT}{head};"


def marshal(
    graph_id: str,
    nodes: Iterable[tuple[str, Mapping[str, str]]],
    edges: Iterable[tuple[str, str, Mapping[str, str]]],
    graph_attrs: Mapping[str, str] | None = None,
    node_attrs: Mapping[str, str] | None = None,
    edge_attrs: Mapping[str, str] | None = None,
) -> str:
    """Encode an undirected graph as DOT.

    *nodes* yields ``(id, attrs)`` and *edges* ``(from_id, to_id, attrs)``;
    one statement is written per node and per edge, in the given order.
    Only explicitly set attributes are written.
    """
    lines = [f"graph {quote(graph_id)} {{"]
    for keyword, defaults in (("graph", graph_attrs), ("node", node_attrs), ("edge", edge_attrs)):
        if defaults:
            lines.append(f"{INDENT}{keyword} [{attr_list(defaults)}];")
    for nid, attrs in nodes:
        lines.append(_statement(quote(nid), attrs))
    for from_id, to_id, attrs in edges:
        lines.append(_statement(f"{quote(from_id)} -- {quote(to_id)}", attrs))
    lines.append("}")
    return "\n".join(lines) + "\n"
