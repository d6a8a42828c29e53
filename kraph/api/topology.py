"""Indexed collection of the API objects of one mapping run."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass

from kraph.api.api import API
from kraph.api.link import Link, LinkOptions
from kraph.api.object import Object
from kraph.errors import ObjectNotFoundError
from kraph.observability.logging import get_logger
from kraph.query import Query
from kraph.uid import UID

_log = get_logger("api.topology")


@dataclass
class AddOptions:
    """Options for :meth:`Topology.add`.

    merge_links: merge the links of an already known object instead of ignoring it.
    multi_link:  allow several links between the same objects when their metadata differ.
    """

    merge_links: bool = False
    multi_link: bool = False


class Topology:
    """Objects keyed by UID and indexed by namespace -> kind -> name.

    Both views always contain the same objects. Adding an object keeps
    links symmetric: every link ``a -> b`` gets a reverse link
    ``b -> a`` once both objects are present, whatever the insertion
    order. Links to objects that are not present yet stay pending until
    the target is added.
    """

    def __init__(self, api: API | None = None) -> None:
        self.api = api
        self._objects: dict[UID, Object] = {}
        # namespace -> kind -> name -> uid; distinct UIDs may share a name
        self._index: dict[str, dict[str, dict[str, dict[UID, Object]]]] = {}
        # target uid -> links waiting for that target to be added
        self._pending: dict[UID, list[Link]] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, obj: Object, opts: AddOptions | None = None) -> None:
        """Add *obj*; a known UID is ignored unless ``merge_links`` is set."""
        opts = opts or AddOptions()
        with self._lock:
            existing = self._objects.get(obj.uid)
            if existing is None:
                self._insert(obj, opts)
            elif opts.merge_links:
                self._merge(existing, obj, opts)

    def _insert(self, obj: Object, opts: AddOptions) -> None:
        self._objects[obj.uid] = obj
        self._index.setdefault(obj.namespace, {}).setdefault(obj.kind, {}).setdefault(obj.name, {})[obj.uid] = obj

        for link in obj.links():
            self._reverse(link, opts)

        for link in self._pending.pop(obj.uid, []):
            obj.link(link.from_uid, self._link_opts(link, opts))

    def _merge(self, existing: Object, obj: Object, opts: AddOptions) -> None:
        _log.debug("topology_merge", uid=str(obj.uid), links=len(obj.links()))
        for link in obj.links():
            existing.link(link.to_uid, self._link_opts(link, opts, merge=True))
            self._reverse(link, opts, merge=True)

    def _reverse(self, link: Link, opts: AddOptions, merge: bool = False) -> None:
        """Record ``link.to -> link.from`` on the target, or park the link."""
        target = self._objects.get(link.to_uid)
        if target is None:
            pending = self._pending.setdefault(link.to_uid, [])
            if all(p.uid != link.uid for p in pending):
                pending.append(link)
            return
        target.link(link.from_uid, self._link_opts(link, opts, merge=merge))

    @staticmethod
    def _link_opts(link: Link, opts: AddOptions, merge: bool = False) -> LinkOptions:
        return LinkOptions(uid=link.uid, merge=merge, multi=opts.multi_link, metadata=link.metadata)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def object(self, uid: UID | str) -> Object:
        """Return the object with *uid*.

        Raises:
            ObjectNotFoundError: if the topology has no such object.
        """
        key = UID(uid) if isinstance(uid, str) else uid
        with self._lock:
            try:
                return self._objects[key]
            except KeyError:
                raise ObjectNotFoundError(str(key)) from None

    def objects(self) -> list[Object]:
        with self._lock:
            return list(self._objects.values())

    def pending(self) -> list[Link]:
        """Return links whose target has not been added."""
        with self._lock:
            return [link for links in self._pending.values() for link in links]

    def get(self, q: Query) -> list[Object]:
        """Return every object matching the uid/namespace/kind/name of *q*.

        An exact UID short-circuits to a point lookup. Otherwise each
        index level narrows to one key when its field is an exact value
        and fans out over all keys present when it is not.
        """
        with self._lock:
            if q.narrows("uid"):
                obj = self._objects.get(q.value("uid"))
                candidates: Iterator[Object] = iter([obj] if obj is not None else [])
            else:
                namespaces = [q.value("namespace")] if q.narrows("namespace") else list(self._index)
                candidates = (obj for ns in namespaces for obj in self._namespace_objects(ns, q))

            return [
                obj
                for obj in candidates
                if q.match("uid", obj.uid)
                and q.match("namespace", obj.namespace)
                and q.match("kind", obj.kind)
                and q.match("name", obj.name)
            ]

    def _namespace_objects(self, ns: str, q: Query) -> Iterator[Object]:
        kinds = self._index.get(ns, {})
        if not q.narrows("kind"):
            for names in kinds.values():
                yield from self._kind_objects(names, q)
        elif q.value("kind") in kinds:
            yield from self._kind_objects(kinds[q.value("kind")], q)

    @staticmethod
    def _kind_objects(names: dict[str, dict[UID, Object]], q: Query) -> Iterator[Object]:
        if not q.narrows("name"):
            for objs in names.values():
                yield from objs.values()
        elif q.value("name") in names:
            yield from names[q.value("name")].values()

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)

    def __contains__(self, uid: object) -> bool:
        key = UID(uid) if isinstance(uid, str) else uid
        with self._lock:
            return key in self._objects
