"""Predicate-based query engine.

Exports:
    Query     -- fluent builder of per-field matchers (wildcard by default).
    Entity    -- node/edge selector for graph queries.
    Matcher   -- stored value plus comparison functions for one field.
    MATCH_ANY -- wildcard sentinel.
    funcs     -- comparison function factories.
"""

from kraph.query import funcs
from kraph.query.matcher import MATCH_ANY, Matcher, MatchFunc, MatchVal
from kraph.query.query import Entity, Query

__all__ = [
    "MATCH_ANY",
    "Entity",
    "MatchFunc",
    "MatchVal",
    "Matcher",
    "Query",
    "funcs",
]
