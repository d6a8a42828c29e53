"""Build deterministic topologies from YAML seed documents.

Document shape::

    resources:
      - {name: pods, kind: Pod, group: "", version: v1, namespaced: true}
    objects:
      - uid: pod-1
        name: web-0
        namespace: default
        resource: pods            # alias of a declared resource, or a full record
        links:
          - {uid: l-1, from: pod-1, to: rs-1, metadata: {relation: own}}
        metadata: {app: web}
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from kraph.api.api import API
from kraph.api.link import LinkOptions
from kraph.api.object import NS_GLOBAL, Object
from kraph.api.resource import Resource
from kraph.api.topology import AddOptions, Topology
from kraph.errors import ResourceNotFoundError, SeedError
from kraph.uid import UID

SEED_SOURCE = "seed"


def load_seed(path: str | Path, opts: AddOptions | None = None) -> tuple[API, Topology]:
    """Read the YAML seed at *path* and return its API and Topology.

    Raises:
        SeedError: if the file is not valid YAML or not a seed document.
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise SeedError(f"invalid seed file {path}: {exc}") from exc
    return parse_seed(data, opts)


def parse_seed(data: Mapping[str, Any], opts: AddOptions | None = None) -> tuple[API, Topology]:
    if not isinstance(data, Mapping):
        raise SeedError(f"seed document must be a mapping, got {type(data).__name__}")

    api = API(SEED_SOURCE)
    for record in _records(data, "resources"):
        api.add(_resource(record))

    top = Topology(api)
    for record in _records(data, "objects"):
        top.add(_object(api, record), opts)
    return api, top


def _records(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    records = data.get(key) or []
    if not isinstance(records, list):
        raise SeedError(f"{key} must be a list, got {type(records).__name__}")
    for record in records:
        if not isinstance(record, Mapping):
            raise SeedError(f"{key} entries must be mappings, got {record!r}")
    return records


def _resource(record: Mapping[str, Any]) -> Resource:
    try:
        return Resource(
            name=str(record["name"]),
            kind=str(record["kind"]),
            group=str(record.get("group") or ""),
            version=str(record.get("version") or ""),
            namespaced=bool(record.get("namespaced", False)),
            metadata=dict(record.get("metadata") or {}),
            short_names=tuple(record.get("short_names") or ()),
        )
    except (KeyError, TypeError) as exc:
        raise SeedError(f"invalid resource record {record!r}: {exc}") from exc


def _object(api: API, record: Mapping[str, Any]) -> Object:
    try:
        uid = UID(str(record["uid"]))
        name = str(record["name"])
    except (KeyError, TypeError) as exc:
        raise SeedError(f"invalid object record {record!r}: {exc}") from exc

    ref = record.get("resource")
    if isinstance(ref, Mapping):
        resource: Resource | None = _resource(ref)
    elif isinstance(ref, str):
        try:
            resource = api.lookup(ref)[0]
        except ResourceNotFoundError as exc:
            raise SeedError(f"object {uid}: {exc}") from exc
    else:
        resource = None

    namespace = record.get("namespace") or NS_GLOBAL
    if resource is not None and not resource.namespaced:
        namespace = NS_GLOBAL

    obj = Object(
        uid=uid,
        name=name,
        namespace=str(namespace),
        resource=resource,
        metadata=dict(record.get("metadata") or {}),
    )

    for link in _records(record, "links"):
        src = link.get("from")
        if src is not None and str(src) != uid.value:
            raise SeedError(f"object {uid}: link {link.get('uid')} starts at {src}")
        if "to" not in link:
            raise SeedError(f"object {uid}: link without target")
        obj.link(
            UID(str(link["to"])),
            LinkOptions(
                uid=UID(str(link["uid"])) if link.get("uid") else None,
                multi=True,
                metadata=dict(link.get("metadata") or {}),
            ),
        )
    return obj
