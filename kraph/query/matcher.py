"""Per-field matchers used by :class:`kraph.query.Query`."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

MatchFunc = Callable[[Any], bool]


class MatchVal(Enum):
    """Sentinel values a matcher can hold instead of a concrete value."""

    ANY = "any"


MATCH_ANY = MatchVal.ANY


@dataclass(frozen=True)
class Matcher:
    """A stored match value plus the comparison functions to apply.

    A matcher holding ``MATCH_ANY`` accepts every candidate. Otherwise
    every function must accept the candidate. ``exact`` is set when the
    only function is equality with ``value``, so indexes may look the
    value up directly.
    """

    value: Any = MATCH_ANY
    funcs: tuple[MatchFunc, ...] = ()
    exact: bool = False

    @property
    def is_any(self) -> bool:
        return self.value is MATCH_ANY

    def match(self, candidate: Any) -> bool:
        if self.is_any:
            return True
        return all(fn(candidate) for fn in self.funcs)
