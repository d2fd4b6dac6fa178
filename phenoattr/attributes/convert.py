# phenoattr/attributes/convert.py
"""Mappings between attribute trees and plain Python / JSON structures.

Two flavours:

- ``to_python`` / ``from_python``: convenient and lossy.  ``int32`` and
  ``int64`` both become ``int``; ``from_python`` reads every ``int`` as
  INT64 (or the kind passed as *int_kind*).
- ``to_tagged`` / ``from_tagged``: lossless and JSON-compatible.  Each node is
  a single-key object naming its kind, e.g. ``{"int32": 5}``,
  ``{"null": null}``, ``{"list": [...]}``, ``{"map": {"k": [...]}}``.  NaN
  and the infinities are written as ``{"double": "NaN"}`` and so on, so the
  output passes a strict JSON encoder.

Maps become ``dict[str, list]`` in both flavours because every attribute key
is multi-valued.  All four functions keep an explicit stack and honour
*max_depth*.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..errors import MalformedEncodingError, UnknownVariantError
from .payloads import validation_error_to_phenoattr
from .traversal import AttributeVisitor, Node, TreeBuilder, walk
from .values import (
    NULL_VALUE,
    STRUCTURED_TYPES,
    AttributeValue,
    AttributeValueList,
    Attributes,
    ValueKind,
)

__all__ = ["to_python", "from_python", "to_tagged", "from_tagged"]

_KIND_BY_LABEL = {kind.label: kind for kind in ValueKind}
_KIND_BY_RECORD = {model: kind for kind, model in STRUCTURED_TYPES.items()}

# Stack operations shared by the two builders below
_NODE, _KEY, _CLOSE_LIST, _CLOSE_MAP, _CLOSE_KEY = range(5)


class _ContainerVisitor(AttributeVisitor):
    """Collects nested Python lists/dicts; subclasses render leaves and wrappers."""

    def __init__(self):
        self._stack: list[list] = [[]]

    @property
    def result(self) -> Any:
        return self._stack[0][0]

    def render_leaf(self, value: AttributeValue) -> Any:
        raise NotImplementedError

    def wrap(self, kind: ValueKind, container: Any) -> Any:
        return container

    def visit_leaf(self, value, path):
        self._stack[-1].append(self.render_leaf(value))

    def enter_list(self, values, path):
        items: list = []
        self._stack[-1].append(self.wrap(ValueKind.LIST, items))
        self._stack.append(items)

    def enter_map(self, attributes, path):
        entries: dict = {}
        self._stack[-1].append(self.wrap(ValueKind.MAP, entries))
        # Keys are attached to the dict by enter_key; keep it reachable.
        self._stack.append(entries)  # type: ignore[arg-type]

    def enter_key(self, key, values, path):
        items: list = []
        self._stack[-1][key] = items  # type: ignore[call-overload]
        self._stack.append(items)

    def leave_list(self, values, path):
        self._stack.pop()

    def leave_map(self, attributes, path):
        self._stack.pop()

    def leave_key(self, key, values, path):
        self._stack.pop()


class _PythonVisitor(_ContainerVisitor):
    def render_leaf(self, value):
        if value.kind is ValueKind.NULL:
            return None
        return value.payload


def _json_double(number: float) -> Any:
    """Spell NaN and the infinities as strings; JSON has no literals for them."""
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    return number


class _TaggedVisitor(_ContainerVisitor):
    def render_leaf(self, value):
        kind = value.kind
        if kind is ValueKind.NULL:
            payload = None
        elif kind.is_structured:
            payload = value.payload.model_dump(mode="json", exclude_defaults=True)
        elif kind is ValueKind.DOUBLE:
            payload = _json_double(value.payload)
        else:
            payload = value.payload
        return {kind.label: payload}

    def wrap(self, kind, container):
        return {kind.label: container}


def to_python(node: Node, max_depth: Optional[int] = None) -> Any:
    """Render *node* as plain Python (lossy for integer width)."""
    return walk(node, _PythonVisitor(), max_depth=max_depth).result


def to_tagged(node: Node, max_depth: Optional[int] = None) -> Any:
    """Render *node* as lossless, JSON-compatible tagged objects."""
    return walk(node, _TaggedVisitor(), max_depth=max_depth).result


def _python_leaf(obj: Any, int_kind: ValueKind) -> AttributeValue:
    if obj is None or obj is NULL_VALUE:
        return AttributeValue.null()
    if isinstance(obj, bool):
        return AttributeValue.of_bool(obj)
    if isinstance(obj, int):
        return AttributeValue(int_kind, obj)
    if isinstance(obj, float):
        return AttributeValue.of_double(obj)
    if isinstance(obj, str):
        return AttributeValue.of_string(obj)
    if isinstance(obj, BaseModel):
        kind = _KIND_BY_RECORD.get(type(obj))
        if kind is not None:
            return AttributeValue(kind, obj)
    raise TypeError(f"cannot convert {type(obj).__name__} to an attribute value")


def from_python(
    obj: Any,
    max_depth: Optional[int] = None,
    int_kind: ValueKind = ValueKind.INT64,
) -> AttributeValue:
    """Build a tree from plain Python data.

    ``list``/``tuple``/:class:`AttributeValueList` become LIST,
    ``dict``/:class:`Attributes` become MAP (a non-list value under a key is
    wrapped in a one-element list), records from
    :mod:`phenoattr.schemas.records` become structured leaves and existing
    :class:`AttributeValue` objects are attached as they are.
    """
    if int_kind not in (ValueKind.INT64, ValueKind.INT32):
        raise ValueError("int_kind must be INT64 or INT32")
    builder = TreeBuilder(max_depth=max_depth)
    stack: list[tuple[int, Any]] = [(_NODE, obj)]
    while stack:
        op, item = stack.pop()
        if op == _NODE:
            if isinstance(item, AttributeValue):
                builder.leaf(item)
            elif isinstance(item, (Mapping, Attributes)):
                builder.open_map()
                stack.append((_CLOSE_MAP, None))
                for entry in reversed(list(item.items())):
                    stack.append((_KEY, entry))
            elif isinstance(item, (list, tuple, AttributeValueList)):
                builder.open_list()
                stack.append((_CLOSE_LIST, None))
                for child in reversed(list(item)):
                    stack.append((_NODE, child))
            else:
                builder.leaf(_python_leaf(item, int_kind))
        elif op == _KEY:
            key, values = item
            if not isinstance(key, str):
                raise TypeError(f"attribute keys must be str, got {type(key).__name__}")
            builder.open_key(key)
            stack.append((_CLOSE_KEY, None))
            if not isinstance(values, (list, tuple, AttributeValueList)):
                values = [values]
            for child in reversed(list(values)):
                stack.append((_NODE, child))
        elif op == _CLOSE_KEY:
            builder.close_key()
        elif op == _CLOSE_LIST:
            builder.close_list()
        else:
            builder.close_map()
    return builder.result


def _tagged_leaf(kind: ValueKind, payload: Any) -> AttributeValue:
    if kind is ValueKind.NULL:
        if payload is not None:
            raise MalformedEncodingError("null must carry a null payload")
        return AttributeValue.null()
    if kind.is_structured:
        if payload is None:
            return AttributeValue(kind, None)  # raises MissingRequiredFieldError
        try:
            record = STRUCTURED_TYPES[kind].model_validate(payload)
        except ValidationError as exc:
            raise validation_error_to_phenoattr(kind, exc) from exc
        return AttributeValue(kind, record)
    if kind is ValueKind.DOUBLE and isinstance(payload, str):
        # JSON has no NaN/Infinity literals; accept their common spellings.
        try:
            number = float(payload)
        except ValueError as exc:
            raise MalformedEncodingError(f"invalid double {payload!r}") from exc
        if not (math.isnan(number) or math.isinf(number)):
            raise MalformedEncodingError(f"double given as string {payload!r}")
        return AttributeValue.of_double(number)
    try:
        return AttributeValue(kind, payload)
    except (TypeError, ValueError) as exc:
        raise MalformedEncodingError(f"invalid {kind.label} payload: {exc}") from exc


def _split_tagged(node: Any) -> tuple[ValueKind, Any]:
    if not isinstance(node, Mapping) or len(node) != 1:
        raise MalformedEncodingError("tagged node must be an object with exactly one key")
    ((label, payload),) = node.items()
    kind = _KIND_BY_LABEL.get(label)
    if kind is None:
        raise UnknownVariantError(label)
    return kind, payload


def from_tagged(obj: Any, max_depth: Optional[int] = None) -> AttributeValue:
    """Inverse of :func:`to_tagged`."""
    builder = TreeBuilder(max_depth=max_depth)
    stack: list[tuple[int, Any]] = [(_NODE, obj)]
    while stack:
        op, item = stack.pop()
        if op == _NODE:
            kind, payload = _split_tagged(item)
            if kind is ValueKind.LIST:
                if not isinstance(payload, list):
                    raise MalformedEncodingError("list payload must be an array")
                builder.open_list()
                stack.append((_CLOSE_LIST, None))
                for child in reversed(payload):
                    stack.append((_NODE, child))
            elif kind is ValueKind.MAP:
                if not isinstance(payload, Mapping):
                    raise MalformedEncodingError("map payload must be an object")
                builder.open_map()
                stack.append((_CLOSE_MAP, None))
                for entry in reversed(list(payload.items())):
                    stack.append((_KEY, entry))
            else:
                builder.leaf(_tagged_leaf(kind, payload))
        elif op == _KEY:
            key, values = item
            if not isinstance(values, list):
                raise MalformedEncodingError(f"values under key {key!r} must be an array")
            builder.open_key(key)
            stack.append((_CLOSE_KEY, None))
            for child in reversed(values):
                stack.append((_NODE, child))
        elif op == _CLOSE_KEY:
            builder.close_key()
        elif op == _CLOSE_LIST:
            builder.close_list()
        else:
            builder.close_map()
    return builder.result
