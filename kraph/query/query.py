"""Composable predicate builder shared by Topology.get and MemoryGraph.query."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

from kraph.errors import InvalidQueryError
from kraph.query import funcs
from kraph.query.matcher import MATCH_ANY, MatchFunc, Matcher
from kraph.uid import UID


class Entity(StrEnum):
    """Graph entity a query targets."""

    NODE = "node"
    EDGE = "edge"


FIELDS = (
    "uid",
    "namespace",
    "kind",
    "name",
    "group",
    "version",
    "entity",
    "weight",
    "attrs",
    "metadata",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


class Query:
    """Field-wise AND of matchers; every field starts as a wildcard.

    Setters return the query so calls can be chained::

        q = Query().namespace("default").kind("pod")

    When no comparison function is passed the natural one for the field is
    used. Values of the wrong type raise :class:`InvalidQueryError`;
    passing ``MATCH_ANY`` resets a field to the wildcard.
    """

    def __init__(self) -> None:
        self._matchers: dict[str, Matcher] = {f: Matcher() for f in FIELDS}

    def _set(
        self,
        field: str,
        value: Any,
        fns: tuple[MatchFunc, ...],
        default: Callable[[Any], MatchFunc],
    ) -> Query:
        if value is MATCH_ANY:
            self._matchers[field] = Matcher()
        else:
            self._matchers[field] = Matcher(value, fns or (default(value),), exact=not fns)
        return self

    def _string(self, field: str, value: Any, fns: tuple[MatchFunc, ...]) -> Query:
        if value is not MATCH_ANY and not isinstance(value, str):
            raise InvalidQueryError(field, value, "str")
        return self._set(field, value, fns, funcs.string_eq)

    def uid(self, uid: UID | str, *fns: MatchFunc) -> Query:
        if isinstance(uid, str):
            uid = UID(uid)
        if uid is not MATCH_ANY and not isinstance(uid, UID):
            raise InvalidQueryError("uid", uid, "UID")
        return self._set("uid", uid, fns, funcs.uid_eq)

    def namespace(self, ns: str, *fns: MatchFunc) -> Query:
        return self._string("namespace", ns, fns)

    def kind(self, kind: str, *fns: MatchFunc) -> Query:
        return self._string("kind", kind, fns)

    def name(self, name: str, *fns: MatchFunc) -> Query:
        return self._string("name", name, fns)

    def group(self, group: str, *fns: MatchFunc) -> Query:
        return self._string("group", group, fns)

    def version(self, version: str, *fns: MatchFunc) -> Query:
        return self._string("version", version, fns)

    def entity(self, entity: Entity | str, *fns: MatchFunc) -> Query:
        # Not validated here: dispatching consumers reject unknown entities.
        return self._set("entity", entity, fns, funcs.entity_eq)

    def weight(self, weight: float, *fns: MatchFunc) -> Query:
        if weight is not MATCH_ANY and not _is_number(weight):
            raise InvalidQueryError("weight", weight, "float")
        return self._set("weight", weight, fns, funcs.float_eq)

    def attrs(self, attrs: Mapping[str, str], *fns: MatchFunc) -> Query:
        if attrs is not MATCH_ANY:
            if not isinstance(attrs, Mapping):
                raise InvalidQueryError("attrs", attrs, "mapping")
            attrs = dict(attrs)
        return self._set("attrs", attrs, fns, funcs.has_attrs)

    def metadata(self, metadata: Mapping[str, Any], *fns: MatchFunc) -> Query:
        if metadata is not MATCH_ANY:
            if not isinstance(metadata, Mapping):
                raise InvalidQueryError("metadata", metadata, "mapping")
            metadata = dict(metadata)
        return self._set("metadata", metadata, fns, funcs.has_metadata)

    def matcher(self, field: str) -> Matcher:
        return self._matchers[field]

    def value(self, field: str) -> Any:
        """Return the stored match value of *field* (``MATCH_ANY`` when unset)."""
        return self._matchers[field].value

    def is_any(self, field: str) -> bool:
        return self._matchers[field].is_any

    def narrows(self, field: str) -> bool:
        """Return True if *field* only accepts candidates equal to its value."""
        m = self._matchers[field]
        return not m.is_any and m.exact

    def match(self, field: str, candidate: Any) -> bool:
        return self._matchers[field].match(candidate)

    def reset(self) -> Query:
        """Return a fresh match-all query."""
        return Query()

    def copy(self) -> Query:
        q = Query()
        q._matchers = dict(self._matchers)
        return q

    def __repr__(self) -> str:
        constrained = ", ".join(f"{f}={m.value!r}" for f, m in self._matchers.items() if not m.is_any)
        return f"Query({constrained})"
