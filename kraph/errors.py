"""Exception hierarchy for kraph.

Not-found errors are recoverable and callers are expected to branch on
them. Upstream errors abort a whole mapping run.
"""

from __future__ import annotations


class KraphError(Exception):
    """Base class for every error raised by kraph."""


class NotFoundError(KraphError):
    """An entity looked up by identity does not exist."""


class NodeNotFoundError(NotFoundError):
    def __init__(self, uid: str) -> None:
        super().__init__(f"node not found: {uid}")
        self.uid = uid


class EdgeNotFoundError(NotFoundError):
    def __init__(self, from_uid: str, to_uid: str, uid: str | None = None) -> None:
        detail = f"{from_uid} -- {to_uid}" if uid is None else f"{uid} ({from_uid} -- {to_uid})"
        super().__init__(f"edge not found: {detail}")
        self.from_uid = from_uid
        self.to_uid = to_uid
        self.uid = uid


class ObjectNotFoundError(NotFoundError):
    def __init__(self, uid: str) -> None:
        super().__init__(f"object not found: {uid}")
        self.uid = uid


class ResourceNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__(f"resource not found: {name}")
        self.name = name


class MissingResourceError(KraphError):
    """An Object has no Resource, which graph nodes require for naming."""

    def __init__(self, uid: str) -> None:
        super().__init__(f"object {uid} has no resource")
        self.uid = uid


class UnknownEntityError(KraphError):
    """A query targets an entity other than a node or an edge."""

    def __init__(self, entity: object) -> None:
        super().__init__(f"unknown entity: {entity!r}")
        self.entity = entity


class InvalidQueryError(KraphError, ValueError):
    """A query field was given a value of the wrong type."""

    def __init__(self, field: str, value: object, expected: str) -> None:
        super().__init__(f"invalid query value for {field!r}: {value!r} (expected {expected})")
        self.field = field
        self.value = value


class UpstreamError(KraphError):
    """Discovery or listing against the remote API failed."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message if cause is None else f"{message}: {cause}")
        self.cause = cause


class DiscoveryError(UpstreamError):
    """Resource discovery failed."""


class ListingError(UpstreamError):
    """Listing the objects of one resource failed."""

    def __init__(self, resource: str, cause: BaseException | None = None) -> None:
        super().__init__(f"listing {resource} failed", cause)
        self.resource = resource


class SeedError(KraphError, ValueError):
    """A seed document is malformed."""


class MappingError(KraphError):
    """A listed item could not be converted into objects or added to the topology."""

    def __init__(self, resource: str, cause: BaseException) -> None:
        super().__init__(f"mapping {resource} failed: {cause}")
        self.resource = resource
        self.cause = cause
