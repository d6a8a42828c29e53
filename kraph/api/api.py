"""Discovered resource set of one API source."""

from __future__ import annotations

from kraph.api.resource import Resource
from kraph.errors import ResourceNotFoundError
from kraph.query import Query


class API:
    """Resources discovered from one source plus an alias index.

    The index maps every :meth:`Resource.paths` alias to the resources
    reachable under it, so mapping code can resolve ``deploy``,
    ``deployments/apps`` or ``deployments/apps/v1`` in O(1).
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self._resources: list[Resource] = []
        self._paths: dict[str, list[Resource]] = {}

    def add(self, resource: Resource) -> None:
        self._resources.append(resource)
        for path in resource.paths():
            self._paths.setdefault(path, []).append(resource)

    def resources(self) -> list[Resource]:
        return list(self._resources)

    def lookup(self, path: str) -> list[Resource]:
        """Return the resources indexed under *path*.

        Raises:
            ResourceNotFoundError: if no resource is known by that alias.
        """
        found = self._paths.get(path.lower())
        if not found:
            raise ResourceNotFoundError(path)
        return list(found)

    def get(self, q: Query) -> list[Resource]:
        """Return all resources matching the name/kind/group/version of *q*."""
        return [
            r
            for r in self._resources
            if q.match("name", r.name)
            and q.match("kind", r.kind)
            and q.match("group", r.group)
            and q.match("version", r.version)
        ]

    def __len__(self) -> int:
        return len(self._resources)
