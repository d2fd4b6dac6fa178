# phenoattr/attributes/traversal.py
"""Iterative, depth-bounded traversal over attribute trees.

Nothing in this module recurses on the Python stack: every walk keeps its own
explicit stack, so a tree nested far deeper than the interpreter's recursion
limit fails cleanly with :class:`DepthExceededError` instead of crashing.

Depth counts container levels on the path from the root.  A bare leaf has
depth 0 and a list of leaves depth 1.  The value list stored under a map key
belongs to the map entry and does not add a level.

Key components:
    - iter_events / walk: pre-order event stream and visitor dispatch.
    - AttributeVisitor: no-op base class for visitors.
    - TreeBuilder: assembles a tree from the same events.
    - deep_equal, deep_copy, tree_depth, iter_leaves, collect_stats.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple, TypeVar, Union

from ..config import resolve_max_depth
from ..errors import DepthExceededError
from .values import (
    AttributeValue,
    AttributeValueList,
    Attributes,
    ValueKind,
    doubles_equal,
)

Node = Union[AttributeValue, AttributeValueList, Attributes]
Path = Tuple[Union[str, int], ...]
N = TypeVar("N", AttributeValue, AttributeValueList, Attributes)


class Event(Enum):
    LEAF = "leaf"
    ENTER_LIST = "enter_list"
    LEAVE_LIST = "leave_list"
    ENTER_MAP = "enter_map"
    LEAVE_MAP = "leave_map"
    ENTER_KEY = "enter_key"
    LEAVE_KEY = "leave_key"


# Internal stack operations
_NODE, _KEY, _LEAVE_LIST, _LEAVE_MAP, _LEAVE_KEY = range(5)


def _unwrap(node: Node) -> Node:
    if isinstance(node, AttributeValue) and node.kind.is_container:
        return node.payload
    return node


def iter_events(
    root: Node,
    max_depth: Optional[int] = None,
    sort_keys: bool = False,
) -> Iterator[Tuple[Event, object, Path]]:
    """Yield ``(event, node, path)`` in depth-first pre-order.

    ``node`` is the leaf :class:`AttributeValue` for ``LEAF``, the collection
    for list/map events, and a ``(key, values)`` pair for key events.  Paths
    are tuples of map keys and list indices.  With *sort_keys* map entries are
    visited in key order instead of insertion order.
    """
    limit = resolve_max_depth(max_depth)
    stack: list[tuple] = [(_NODE, root, (), 0)]
    while stack:
        op, node, path, depth = stack.pop()
        if op == _NODE:
            node = _unwrap(node)
            if isinstance(node, AttributeValue):
                yield Event.LEAF, node, path
            elif isinstance(node, AttributeValueList):
                depth += 1
                if depth > limit:
                    raise DepthExceededError(limit)
                yield Event.ENTER_LIST, node, path
                stack.append((_LEAVE_LIST, node, path, depth))
                children = list(node)
                for index in range(len(children) - 1, -1, -1):
                    stack.append((_NODE, children[index], path + (index,), depth))
            elif isinstance(node, Attributes):
                depth += 1
                if depth > limit:
                    raise DepthExceededError(limit)
                yield Event.ENTER_MAP, node, path
                stack.append((_LEAVE_MAP, node, path, depth))
                entries = list(node.items())
                if sort_keys:
                    entries.sort(key=lambda entry: entry[0])
                for key, values in reversed(entries):
                    stack.append((_KEY, (key, values), path + (key,), depth))
            else:
                raise TypeError(f"cannot traverse {type(node).__name__}")
        elif op == _KEY:
            yield Event.ENTER_KEY, node, path
            stack.append((_LEAVE_KEY, node, path, depth))
            children = list(node[1])
            for index in range(len(children) - 1, -1, -1):
                stack.append((_NODE, children[index], path + (index,), depth))
        elif op == _LEAVE_KEY:
            yield Event.LEAVE_KEY, node, path
        elif op == _LEAVE_LIST:
            yield Event.LEAVE_LIST, node, path
        else:
            yield Event.LEAVE_MAP, node, path


class AttributeVisitor:
    """Base visitor; override the hooks you need."""

    def visit_leaf(self, value: AttributeValue, path: Path) -> None:
        pass

    def enter_list(self, values: AttributeValueList, path: Path) -> None:
        pass

    def leave_list(self, values: AttributeValueList, path: Path) -> None:
        pass

    def enter_map(self, attributes: Attributes, path: Path) -> None:
        pass

    def leave_map(self, attributes: Attributes, path: Path) -> None:
        pass

    def enter_key(self, key: str, values: AttributeValueList, path: Path) -> None:
        pass

    def leave_key(self, key: str, values: AttributeValueList, path: Path) -> None:
        pass


def walk(
    root: Node,
    visitor: AttributeVisitor,
    max_depth: Optional[int] = None,
    sort_keys: bool = False,
) -> AttributeVisitor:
    """Dispatch :func:`iter_events` to *visitor* and return it."""
    for event, node, path in iter_events(root, max_depth=max_depth, sort_keys=sort_keys):
        if event is Event.LEAF:
            visitor.visit_leaf(node, path)
        elif event is Event.ENTER_LIST:
            visitor.enter_list(node, path)
        elif event is Event.LEAVE_LIST:
            visitor.leave_list(node, path)
        elif event is Event.ENTER_MAP:
            visitor.enter_map(node, path)
        elif event is Event.LEAVE_MAP:
            visitor.leave_map(node, path)
        elif event is Event.ENTER_KEY:
            visitor.enter_key(node[0], node[1], path)
        else:
            visitor.leave_key(node[0], node[1], path)
    return visitor


class TreeBuilder:
    """Assemble an :class:`AttributeValue` from pre-order build calls.

    Used by deep copy, the decoder and the conversion layer.  Opening a
    container past *max_depth* raises :class:`DepthExceededError`.
    """

    def __init__(self, max_depth: Optional[int] = None):
        self._limit = resolve_max_depth(max_depth)
        self._stack: list[Union[AttributeValueList, Attributes]] = []
        self._keys: list[str] = []
        self._depth = 0
        self._result: Optional[AttributeValue] = None

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def result(self) -> AttributeValue:
        if self._stack or self._result is None:
            raise RuntimeError("tree is incomplete")
        return self._result

    def _add(self, value: AttributeValue) -> None:
        if not self._stack:
            if self._result is not None:
                raise RuntimeError("tree already has a root")
            self._result = value
            return
        top = self._stack[-1]
        if not isinstance(top, AttributeValueList):
            raise RuntimeError("map values must be added under a key")
        top.push(value)

    def _open(self) -> None:
        if self._depth + 1 > self._limit:
            raise DepthExceededError(self._limit)
        self._depth += 1

    def leaf(self, value: AttributeValue) -> None:
        self._add(value)

    def open_list(self) -> None:
        self._open()
        self._stack.append(AttributeValueList())

    def close_list(self) -> None:
        values = self._stack.pop()
        self._depth -= 1
        self._add(AttributeValue.of_list(values))

    def open_map(self) -> None:
        self._open()
        self._stack.append(Attributes())

    def open_key(self, key: str) -> None:
        if not self._stack or not isinstance(self._stack[-1], Attributes):
            raise RuntimeError("keys can only be opened inside a map")
        self._keys.append(key)
        self._stack.append(AttributeValueList())

    def close_key(self) -> None:
        values = self._stack.pop()
        self._stack[-1].set(self._keys.pop(), values)

    def close_map(self) -> None:
        attributes = self._stack.pop()
        self._depth -= 1
        self._add(AttributeValue.of_map(attributes))


class _CopyVisitor(AttributeVisitor):
    def __init__(self, builder: TreeBuilder):
        self.builder = builder

    def visit_leaf(self, value, path):
        # Leaf payloads are immutable; only the wrapper is new.
        self.builder.leaf(AttributeValue(value.kind, value.payload))

    def enter_list(self, values, path):
        self.builder.open_list()

    def leave_list(self, values, path):
        self.builder.close_list()

    def enter_map(self, attributes, path):
        self.builder.open_map()

    def leave_map(self, attributes, path):
        self.builder.close_map()

    def enter_key(self, key, values, path):
        self.builder.open_key(key)

    def leave_key(self, key, values, path):
        self.builder.close_key()


def deep_copy(node: N, max_depth: Optional[int] = None) -> N:
    """Return a structurally equal copy that shares no list, map or value wrapper.

    A top-level :class:`AttributeValueList` or :class:`Attributes` comes back
    unfrozen so it can be edited; nested collections are frozen as usual.
    """
    builder = TreeBuilder(max_depth=max_depth)
    walk(node, _CopyVisitor(builder), max_depth=max_depth)
    copied = builder.result
    if isinstance(node, AttributeValueList):
        return AttributeValueList(copied.payload)
    if isinstance(node, Attributes):
        return Attributes(copied.payload.items())
    return copied


def deep_equal(a: Node, b: Node, max_depth: Optional[int] = None) -> bool:
    """Structural equality of two values, lists or maps.

    Same kind and recursively equal payloads; lists are order-sensitive, maps
    compare as sets of ``(key, list)`` pairs.  NaN doubles compare equal.
    """
    limit = resolve_max_depth(max_depth)
    stack: list[tuple[Node, Node, int]] = [(a, b, 0)]
    while stack:
        x, y, depth = stack.pop()
        if isinstance(x, AttributeValue) and isinstance(y, AttributeValue):
            if x.kind is not y.kind:
                return False
            if not x.kind.is_container:
                if x.kind is ValueKind.DOUBLE:
                    if not doubles_equal(x.payload, y.payload):
                        return False
                elif x.payload != y.payload:
                    return False
                continue
            x, y = x.payload, y.payload
        if type(x) is not type(y):
            return False
        depth += 1
        if depth > limit:
            raise DepthExceededError(limit)
        if isinstance(x, AttributeValueList):
            if len(x) != len(y):
                return False
            stack.extend((xi, yi, depth) for xi, yi in zip(x, y))
        elif isinstance(x, Attributes):
            if len(x) != len(y):
                return False
            for key, xs in x.items():
                ys = y.get(key)
                if ys is None or len(xs) != len(ys):
                    return False
                stack.extend((xi, yi, depth) for xi, yi in zip(xs, ys))
        else:
            raise TypeError(f"cannot compare {type(x).__name__}")
    return True


def iter_leaves(
    node: Node, max_depth: Optional[int] = None
) -> Iterator[Tuple[Path, AttributeValue]]:
    """Lazily yield ``(path, leaf)`` pairs in pre-order."""
    for event, value, path in iter_events(node, max_depth=max_depth):
        if event is Event.LEAF:
            yield path, value


@dataclass
class TreeStats:
    """Shape summary of a tree."""

    nodes: int = 0
    leaves: int = 0
    depth: int = 0
    kinds: Counter = field(default_factory=Counter)


class _StatsVisitor(AttributeVisitor):
    def __init__(self):
        self.stats = TreeStats()
        self._current = 0

    def _enter(self, kind: ValueKind) -> None:
        self.stats.nodes += 1
        self.stats.kinds[kind] += 1
        self._current += 1
        self.stats.depth = max(self.stats.depth, self._current)

    def visit_leaf(self, value, path):
        self.stats.nodes += 1
        self.stats.leaves += 1
        self.stats.kinds[value.kind] += 1

    def enter_list(self, values, path):
        self._enter(ValueKind.LIST)

    def leave_list(self, values, path):
        self._current -= 1

    def enter_map(self, attributes, path):
        self._enter(ValueKind.MAP)

    def leave_map(self, attributes, path):
        self._current -= 1


def collect_stats(node: Node, max_depth: Optional[int] = None) -> TreeStats:
    return walk(node, _StatsVisitor(), max_depth=max_depth).stats


def tree_depth(node: Node, max_depth: Optional[int] = None) -> int:
    """Container nesting depth of *node* (0 for a bare leaf)."""
    return collect_stats(node, max_depth=max_depth).depth
