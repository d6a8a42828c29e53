"""Directed relations between API objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kraph.uid import UID

RELATION_KEY = "relation"


@dataclass
class Link:
    """A directed relation ``from_uid -> to_uid``.

    The relation classifier (``own``, ``topic``, ``lang``...) lives under
    ``metadata["relation"]``. Endpoints are referenced by UID only; the
    owning Topology resolves them.
    """

    uid: UID
    from_uid: UID
    to_uid: UID
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def relation(self) -> str:
        rel = self.metadata.get(RELATION_KEY, "")
        return rel if isinstance(rel, str) else ""


@dataclass
class LinkOptions:
    """Options for :meth:`kraph.api.Object.link`.

    uid:      use this link UID instead of a random one.
    merge:    merge metadata into an existing link to the same target.
    multi:    allow several links to the same target when their metadata differ.
    metadata: link metadata; copied into the new link.
    """

    uid: UID | None = None
    merge: bool = False
    multi: bool = False
    metadata: dict[str, Any] | None = None
