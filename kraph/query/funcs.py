"""Comparison functions for query matchers.

Each factory captures the reference value and returns a predicate over a
candidate. Predicates return False, never raise, when the candidate has
the wrong type.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from kraph.query.matcher import MatchFunc
from kraph.uid import UID


def is_any(_candidate: Any) -> bool:
    return True


def string_eq(ref: str) -> MatchFunc:
    def _match(candidate: Any) -> bool:
        return isinstance(candidate, str) and candidate == ref

    return _match


def float_eq(ref: float, rel_tol: float = 1e-9) -> MatchFunc:
    def _match(candidate: Any) -> bool:
        if isinstance(candidate, bool) or not isinstance(candidate, int | float):
            return False
        return math.isclose(float(candidate), float(ref), rel_tol=rel_tol)

    return _match


def uid_eq(ref: UID) -> MatchFunc:
    def _match(candidate: Any) -> bool:
        if isinstance(candidate, UID):
            return candidate.value == ref.value
        if isinstance(candidate, str):
            return candidate == ref.value
        return False

    return _match


def entity_eq(ref: Any) -> MatchFunc:
    def _match(candidate: Any) -> bool:
        return candidate == ref

    return _match


def has_attrs(ref: Mapping[str, str]) -> MatchFunc:
    """Match candidates whose attributes contain every key/value of *ref*."""

    def _match(candidate: Any) -> bool:
        if not isinstance(candidate, Mapping):
            return False
        return all(k in candidate and candidate[k] == v for k, v in ref.items())

    return _match


def has_metadata(ref: Mapping[str, Any]) -> MatchFunc:
    """Like :func:`has_attrs` but compares arbitrary values by equality."""

    def _match(candidate: Any) -> bool:
        if not isinstance(candidate, Mapping):
            return False
        return all(k in candidate and candidate[k] == v for k, v in ref.items())

    return _match
