"""Opaque object identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class UID:
    """String-comparable identifier of an API object, link or graph entity.

    Derive it from source data (``UID("...")``) whenever the remote API
    offers a stable identity so that re-scraping yields the same value;
    fall back to ``UID.new()`` otherwise.
    """

    value: str

    @classmethod
    def new(cls) -> UID:
        """Return a random UID."""
        return cls(str(uuid4()))

    def __str__(self) -> str:
        return self.value

    def __bool__(self) -> bool:
        return bool(self.value)
