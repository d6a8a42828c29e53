"""Generic resource/object/topology model.

Exports:
    Resource   -- an API resource type and its path aliases.
    Object     -- one instance of a Resource with links to other objects.
    Link       -- directed relation between two objects, by UID.
    API        -- discovered resource set with an alias index.
    Topology   -- objects of one mapping run, UID map plus ns/kind/name index.
    load_seed  -- build an API and Topology from a YAML seed file.
"""

from kraph.api.api import API
from kraph.api.link import RELATION_KEY, Link, LinkOptions
from kraph.api.object import NS_GLOBAL, Object
from kraph.api.resource import Resource
from kraph.api.seed import load_seed, parse_seed
from kraph.api.topology import AddOptions, Topology

__all__ = [
    "API",
    "NS_GLOBAL",
    "RELATION_KEY",
    "AddOptions",
    "Link",
    "LinkOptions",
    "Object",
    "Resource",
    "Topology",
    "load_seed",
    "parse_seed",
]
