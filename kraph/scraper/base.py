"""Collaborator boundaries of the mapping pipeline."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from kraph.api import API, Object, Resource, Topology


@dataclass
class Page:
    """One page of raw items returned by a listing call.

    An empty ``continue_token`` marks the last page.
    """

    items: list[Mapping[str, Any]] = field(default_factory=list)
    continue_token: str = ""


class Lister(Protocol):
    """Lists the raw objects of one resource, one page per call."""

    async def list(self, resource: Resource, namespace: str, limit: int, continue_token: str) -> Page: ...


# Converts one raw listed item into the objects it describes.
ObjectFactory = Callable[[Resource, Mapping[str, Any]], Iterable[Object]]


class Discoverer(Protocol):
    async def discover(self) -> API: ...


class Mapper(Protocol):
    async def map(self, api: API) -> Topology: ...


class Client(Discoverer, Mapper, Protocol):
    """Discovers an API source and maps its objects."""
