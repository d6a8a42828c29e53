"""API object instances."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kraph.api.link import Link, LinkOptions
from kraph.api.resource import Resource
from kraph.attrs import copy_metadata
from kraph.uid import UID

NS_GLOBAL = "global"


@dataclass
class Object:
    """One instance of a :class:`Resource`.

    Links are indexed by link UID and by target UID. Objects never hold
    references to other objects, only their UIDs.
    """

    uid: UID
    name: str
    namespace: str
    resource: Resource | None
    metadata: dict[str, Any] = field(default_factory=dict)
    _links: dict[UID, Link] = field(default_factory=dict, init=False, repr=False)
    _targets: dict[UID, list[Link]] = field(default_factory=dict, init=False, repr=False)

    @property
    def kind(self) -> str:
        return self.resource.kind if self.resource is not None else ""

    def link(self, to: UID, opts: LinkOptions | None = None) -> Link:
        """Link this object to *to* and return the effective link.

        Without ``multi`` there is at most one link per target: an existing
        link is returned, with ``merge`` its metadata is updated first.
        With ``multi`` a new link is created unless an existing link to
        *to* carries equal metadata.
        """
        opts = opts or LinkOptions()
        metadata = copy_metadata(opts.metadata)
        existing = self._targets.get(to, [])

        if existing and not opts.multi:
            link = existing[0]
            if opts.merge:
                link.metadata.update(metadata)
            return link

        if opts.multi:
            for link in existing:
                if link.metadata == metadata:
                    return link

        uid = opts.uid if opts.uid else UID.new()
        if uid in self._links:
            return self._links[uid]

        link = Link(uid=uid, from_uid=self.uid, to_uid=to, metadata=metadata)
        self._links[uid] = link
        self._targets.setdefault(to, []).append(link)
        return link

    def links(self) -> list[Link]:
        return list(self._links.values())

    def links_to(self, to: UID) -> list[Link]:
        return list(self._targets.get(to, []))
