"""
phenoattr - Recursive attribute values for phenopacket records.

A tagged attribute-value tree (strings, integers, booleans, doubles, nulls,
ontology classes, external references, experiments, analyses, nested lists
and maps) with a versioned binary codec and depth-bounded traversal.

Usage:
------
    from phenoattr import AttributeValue, Attributes, AttributeCodec

    attrs = Attributes()
    attrs.set("color", [AttributeValue.of_string("red")])
    data = AttributeCodec().encode_attributes(attrs)
"""

__version__ = "0.1.0"

from .errors import (
    DepthExceededError,
    FrozenCollectionError,
    IndexOutOfRangeError,
    MalformedEncodingError,
    MissingRequiredFieldError,
    PhenoattrError,
    SizeLimitExceededError,
    TypeMismatchError,
    UnknownVariantError,
)
from .config import CodecLimits, PhenoattrConfig, get_config
from .attributes import (
    NULL_VALUE,
    AttributeCodec,
    AttributeValue,
    AttributeValueList,
    Attributes,
    NullValue,
    ValueKind,
    decode,
    deep_copy,
    deep_equal,
    encode,
    from_python,
    from_tagged,
    to_python,
    to_tagged,
)

__all__ = [
    "__version__",
    # Errors
    "DepthExceededError",
    "FrozenCollectionError",
    "IndexOutOfRangeError",
    "MalformedEncodingError",
    "MissingRequiredFieldError",
    "PhenoattrError",
    "SizeLimitExceededError",
    "TypeMismatchError",
    "UnknownVariantError",
    # Config
    "CodecLimits",
    "PhenoattrConfig",
    "get_config",
    # Core
    "NULL_VALUE",
    "AttributeCodec",
    "AttributeValue",
    "AttributeValueList",
    "Attributes",
    "NullValue",
    "ValueKind",
    "decode",
    "deep_copy",
    "deep_equal",
    "encode",
    "from_python",
    "from_tagged",
    "to_python",
    "to_tagged",
]
