"""Attribute and metadata containers.

Attributes are ``dict[str, str]`` and end up in DOT output. Metadata is
``dict[str, Any]`` and carries arbitrary data (timestamps, labels,
relation classifiers).
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

Attrs = dict[str, str]
Metadata = dict[str, Any]


def copy_attrs(attrs: Mapping[str, str] | None) -> Attrs:
    return dict(attrs) if attrs else {}


def copy_metadata(metadata: Mapping[str, Any] | None) -> Metadata:
    """Deep-copy *metadata* so the copy shares no mutable state."""
    return copy.deepcopy(dict(metadata)) if metadata else {}


def string_attrs(metadata: Mapping[str, Any] | None) -> Attrs:
    """Project the string-valued entries of *metadata* onto attributes."""
    if not metadata:
        return {}
    return {k: v for k, v in metadata.items() if isinstance(v, str)}
