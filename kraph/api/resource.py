"""API resource types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Resource:
    """A type of object exposed by an API source (e.g. ``pods`` in ``v1``).

    ``name`` is the plural identifier of the listing endpoint; (group,
    version, kind) identifies the type within one source. ``short_names``
    and ``singular_name`` only feed :meth:`paths`.
    """

    name: str
    kind: str
    group: str = ""
    version: str = ""
    namespaced: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    short_names: tuple[str, ...] = ()
    singular_name: str = ""
    verbs: tuple[str, ...] = ()

    def paths(self) -> list[str]:
        """Return every alias the resource may be referenced by.

        Each of the plural name, singular name (the kind when the source
        leaves it empty) and short names is expanded to ``name``,
        ``name/group`` and ``name/group/version``.
        """
        names = [self.name.lower()]
        singular = (self.singular_name or self.kind).lower()
        if singular and singular not in names:
            names.append(singular)
        names.extend(s.lower() for s in self.short_names if s.lower() not in names)

        paths: list[str] = []
        for name in names:
            paths.extend([name, f"{name}/{self.group}", f"{name}/{self.group}/{self.version}"])
        return paths

    def provides(self, verb: str) -> bool:
        """Return True if the resource supports *verb*; no declared verbs means all."""
        return not self.verbs or verb in self.verbs

    @property
    def group_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version
