# phenoattr/errors.py
"""Exceptions raised by the attribute-value core.

Every error derives from :class:`PhenoattrError`, so callers can reject a
buffer or a tree with a single ``except`` clause.  Nothing here is fatal to
the process; a failed decode never returns a partial tree.
"""

from __future__ import annotations

from typing import Any, Optional


class PhenoattrError(Exception):
    """Base class for all phenoattr errors."""


class TypeMismatchError(PhenoattrError):
    """Raised when a payload is read under a kind other than the populated one."""

    def __init__(self, expected: Any, actual: Any):
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected {_name(expected)}, found {_name(actual)}")


class MissingRequiredFieldError(PhenoattrError):
    """Raised when a required structured payload or record field is absent."""

    def __init__(self, field: str, detail: Optional[str] = None):
        self.field = field
        self.detail = detail
        msg = f"missing required field '{field}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class IndexOutOfRangeError(PhenoattrError, IndexError):
    """Raised on list access outside ``[-len, len)``."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"index {index} out of range for list of length {length}")


class UnknownVariantError(PhenoattrError):
    """Raised when a tag (or tagged-JSON kind name) is not in the kind table."""

    def __init__(self, tag: Any):
        self.tag = tag
        super().__init__(f"unknown variant tag {tag!r}")


class DepthExceededError(PhenoattrError):
    """Raised when container nesting goes past the configured bound."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"nesting depth exceeds limit of {limit}")


class SizeLimitExceededError(PhenoattrError):
    """Raised when a claimed count or length is above the configured bound."""

    def __init__(self, what: str, size: int, limit: int):
        self.what = what
        self.size = size
        self.limit = limit
        super().__init__(f"{what} of {size} exceeds limit of {limit}")


class FrozenCollectionError(PhenoattrError):
    """Raised when a list or map is mutated after being attached to a parent."""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"{what} is attached to a parent and can no longer be modified")


class MalformedEncodingError(PhenoattrError, ValueError):
    """Raised on truncated buffers, bad length prefixes or invalid UTF-8."""

    def __init__(self, detail: str, offset: Optional[int] = None):
        self.detail = detail
        self.offset = offset
        msg = detail if offset is None else f"{detail} at offset {offset}"
        super().__init__(msg)


def _name(kind: Any) -> str:
    return getattr(kind, "name", str(kind))
