"""
phenoattr Attributes Package - Recursive Attribute Values and Their Codec

Composition:
------------
- ``values``: the AttributeValue / AttributeValueList / Attributes triad,
  the ValueKind tag table and the NullValue marker.
- ``traversal``: iterative, depth-bounded walk, deep equality and deep copy.
- ``payloads``: injected codecs for structured (record) payloads.
- ``codec``: versioned binary wire format.
- ``convert``: plain-Python and tagged-JSON mappings.
"""

from .values import (
    NULL_VALUE,
    STRUCTURED_TYPES,
    AttributeValue,
    AttributeValueList,
    Attributes,
    NullValue,
    ValueKind,
)
from .traversal import (
    AttributeVisitor,
    Event,
    TreeBuilder,
    TreeStats,
    collect_stats,
    deep_copy,
    deep_equal,
    iter_events,
    iter_leaves,
    tree_depth,
    walk,
)
from .payloads import DEFAULT_PAYLOAD_CODECS, PayloadCodec, json_payload_codec
from .codec import WIRE_VERSION, AttributeCodec, decode, encode
from .convert import from_python, from_tagged, to_python, to_tagged

__all__ = [
    # Values
    "NULL_VALUE",
    "STRUCTURED_TYPES",
    "AttributeValue",
    "AttributeValueList",
    "Attributes",
    "NullValue",
    "ValueKind",
    # Traversal
    "AttributeVisitor",
    "Event",
    "TreeBuilder",
    "TreeStats",
    "collect_stats",
    "deep_copy",
    "deep_equal",
    "iter_events",
    "iter_leaves",
    "tree_depth",
    "walk",
    # Codec
    "DEFAULT_PAYLOAD_CODECS",
    "PayloadCodec",
    "json_payload_codec",
    "WIRE_VERSION",
    "AttributeCodec",
    "decode",
    "encode",
    # Conversion
    "from_python",
    "from_tagged",
    "to_python",
    "to_tagged",
]
