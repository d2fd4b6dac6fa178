# phenoattr/attributes/values.py
"""The attribute-value triad: AttributeValue, AttributeValueList, Attributes.

An :class:`AttributeValue` holds exactly one payload, identified by a
:class:`ValueKind`.  Scalars (string, int64, int32, bool, double, null) and
structured records (external reference, ontology class, experiment, analysis)
are leaves; lists and maps recurse through :class:`AttributeValueList` and
:class:`Attributes`.

Lists and maps are built by pushing/setting entries and freeze the moment they
are attached to a parent, so a finished tree can be shared read-only without
copying.  To change an attached subtree, rebuild it or take a
:func:`~phenoattr.attributes.traversal.deep_copy`.
"""

from __future__ import annotations

import math
from enum import Enum, IntEnum
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

from ..errors import (
    FrozenCollectionError,
    IndexOutOfRangeError,
    MissingRequiredFieldError,
    TypeMismatchError,
)
from ..schemas.records import Analysis, Experiment, ExternalReference, OntologyClass

__all__ = [
    "ValueKind",
    "NullValue",
    "NULL_VALUE",
    "STRUCTURED_TYPES",
    "AttributeValue",
    "AttributeValueList",
    "Attributes",
]

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


class ValueKind(IntEnum):
    """Variant tags.  The numeric values are the wire tags and never change."""

    STRING = 1
    INT64 = 2
    INT32 = 3
    BOOL = 4
    DOUBLE = 5
    NULL = 6
    EXTERNAL_REFERENCE = 7
    ONTOLOGY_CLASS = 8
    EXPERIMENT = 9
    ANALYSIS = 10
    LIST = 11
    MAP = 12

    @property
    def is_scalar(self) -> bool:
        return self <= ValueKind.NULL

    @property
    def is_structured(self) -> bool:
        return ValueKind.EXTERNAL_REFERENCE <= self <= ValueKind.ANALYSIS

    @property
    def is_container(self) -> bool:
        return self >= ValueKind.LIST

    @property
    def label(self) -> str:
        """Lower-case name used in tagged JSON (``"ontology_class"``)."""
        return self.name.lower()


class NullValue(Enum):
    """Explicit null marker; a present null is not the same as a missing key."""

    NULL_VALUE = 0

    def __repr__(self) -> str:
        return "NULL_VALUE"


NULL_VALUE = NullValue.NULL_VALUE

STRUCTURED_TYPES: Mapping[ValueKind, type] = {
    ValueKind.EXTERNAL_REFERENCE: ExternalReference,
    ValueKind.ONTOLOGY_CLASS: OntologyClass,
    ValueKind.EXPERIMENT: Experiment,
    ValueKind.ANALYSIS: Analysis,
}


def _check_int(value: Any, lo: int, hi: int, kind: ValueKind) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{kind.label} payload must be int, got {type(value).__name__}")
    if not lo <= value <= hi:
        raise ValueError(f"{value} does not fit in {kind.label}")
    return value


def _validate(kind: ValueKind, payload: Any) -> Any:
    """Return the normalised payload for *kind* or raise."""
    if kind is ValueKind.STRING:
        if not isinstance(payload, str):
            raise TypeError(f"string payload must be str, got {type(payload).__name__}")
        return payload
    if kind is ValueKind.INT64:
        return _check_int(payload, INT64_MIN, INT64_MAX, kind)
    if kind is ValueKind.INT32:
        return _check_int(payload, INT32_MIN, INT32_MAX, kind)
    if kind is ValueKind.BOOL:
        if not isinstance(payload, bool):
            raise TypeError(f"bool payload must be bool, got {type(payload).__name__}")
        return payload
    if kind is ValueKind.DOUBLE:
        if isinstance(payload, bool) or not isinstance(payload, (int, float)):
            raise TypeError(f"double payload must be float, got {type(payload).__name__}")
        try:
            return float(payload)
        except OverflowError as exc:
            raise ValueError(f"{payload} does not fit in double") from exc
    if kind is ValueKind.NULL:
        if payload is not NULL_VALUE and payload is not None:
            raise TypeError("null payload must be NULL_VALUE")
        return NULL_VALUE
    if kind.is_structured:
        if payload is None:
            raise MissingRequiredFieldError(kind.label)
        expected = STRUCTURED_TYPES[kind]
        if not isinstance(payload, expected):
            raise TypeError(
                f"{kind.label} payload must be {expected.__name__}, got {type(payload).__name__}"
            )
        return payload
    if kind is ValueKind.LIST:
        if not isinstance(payload, AttributeValueList):
            payload = AttributeValueList(payload)
        payload._freeze()
        return payload
    if kind is ValueKind.MAP:
        if not isinstance(payload, Attributes):
            payload = Attributes(payload)
        payload._freeze()
        return payload
    raise TypeError(f"not a value kind: {kind!r}")


class AttributeValue:
    """A tagged union holding exactly one payload.

    Use the ``of_*`` factories rather than the constructor.  Instances are
    immutable and unhashable; equality is structural and depth-bounded.
    """

    __slots__ = ("_kind", "_payload")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, kind: ValueKind, payload: Any):
        kind = ValueKind(kind)
        object.__setattr__(self, "_payload", _validate(kind, payload))
        object.__setattr__(self, "_kind", kind)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("AttributeValue is immutable")

    # -- factories -----------------------------------------------------------

    @classmethod
    def of_string(cls, text: str) -> AttributeValue:
        return cls(ValueKind.STRING, text)

    @classmethod
    def of_int64(cls, number: int) -> AttributeValue:
        return cls(ValueKind.INT64, number)

    @classmethod
    def of_int32(cls, number: int) -> AttributeValue:
        return cls(ValueKind.INT32, number)

    @classmethod
    def of_bool(cls, flag: bool) -> AttributeValue:
        return cls(ValueKind.BOOL, flag)

    @classmethod
    def of_double(cls, number: float) -> AttributeValue:
        return cls(ValueKind.DOUBLE, number)

    @classmethod
    def null(cls) -> AttributeValue:
        return cls(ValueKind.NULL, NULL_VALUE)

    @classmethod
    def of_external_reference(cls, ref: Optional[ExternalReference]) -> AttributeValue:
        return cls(ValueKind.EXTERNAL_REFERENCE, ref)

    @classmethod
    def of_ontology_class(cls, term: Optional[OntologyClass]) -> AttributeValue:
        return cls(ValueKind.ONTOLOGY_CLASS, term)

    @classmethod
    def of_experiment(cls, experiment: Optional[Experiment]) -> AttributeValue:
        return cls(ValueKind.EXPERIMENT, experiment)

    @classmethod
    def of_analysis(cls, analysis: Optional[Analysis]) -> AttributeValue:
        return cls(ValueKind.ANALYSIS, analysis)

    @classmethod
    def of_list(cls, values: Union[AttributeValueList, Iterable[AttributeValue]] = ()) -> AttributeValue:
        """Wrap *values*; an :class:`AttributeValueList` passed in is frozen."""
        return cls(ValueKind.LIST, values)

    @classmethod
    def of_map(
        cls,
        attributes: Union[Attributes, Mapping[str, Any], Iterable[Tuple[str, Any]], None] = None,
    ) -> AttributeValue:
        """Wrap *attributes*; an :class:`Attributes` passed in is frozen."""
        return cls(ValueKind.MAP, attributes if attributes is not None else Attributes())

    # -- inspection ----------------------------------------------------------

    @property
    def kind(self) -> ValueKind:
        return self._kind

    @property
    def payload(self) -> Any:
        return self._payload

    @property
    def is_null(self) -> bool:
        return self._kind is ValueKind.NULL

    def get(self, expected: ValueKind) -> Any:
        """Return the payload, or raise :class:`TypeMismatchError` for another kind."""
        expected = ValueKind(expected)
        if self._kind is not expected:
            raise TypeMismatchError(expected, self._kind)
        return self._payload

    def as_string(self) -> str:
        return self.get(ValueKind.STRING)

    def as_int64(self) -> int:
        return self.get(ValueKind.INT64)

    def as_int32(self) -> int:
        return self.get(ValueKind.INT32)

    def as_bool(self) -> bool:
        return self.get(ValueKind.BOOL)

    def as_double(self) -> float:
        return self.get(ValueKind.DOUBLE)

    def as_null(self) -> NullValue:
        return self.get(ValueKind.NULL)

    def as_external_reference(self) -> ExternalReference:
        return self.get(ValueKind.EXTERNAL_REFERENCE)

    def as_ontology_class(self) -> OntologyClass:
        return self.get(ValueKind.ONTOLOGY_CLASS)

    def as_experiment(self) -> Experiment:
        return self.get(ValueKind.EXPERIMENT)

    def as_analysis(self) -> Analysis:
        return self.get(ValueKind.ANALYSIS)

    def as_list(self) -> AttributeValueList:
        return self.get(ValueKind.LIST)

    def as_map(self) -> Attributes:
        return self.get(ValueKind.MAP)

    # -- protocol ------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeValue):
            return NotImplemented
        from .traversal import deep_equal

        return deep_equal(self, other)

    def __repr__(self) -> str:
        if self._kind is ValueKind.LIST:
            return f"AttributeValue(LIST, {len(self._payload)} items)"
        if self._kind is ValueKind.MAP:
            return f"AttributeValue(MAP, {len(self._payload)} keys)"
        return f"AttributeValue({self._kind.name}, {self._payload!r})"


class AttributeValueList:
    """Ordered sequence of :class:`AttributeValue`; append-only until attached."""

    __slots__ = ("_items", "_frozen")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, values: Iterable[AttributeValue] = ()):
        self._items: list[AttributeValue] = []
        self._frozen = False
        for value in values:
            self.push(value)

    @classmethod
    def of(cls, *values: AttributeValue) -> AttributeValueList:
        return cls(values)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _freeze(self) -> None:
        self._frozen = True

    def push(self, value: AttributeValue) -> None:
        if self._frozen:
            raise FrozenCollectionError("AttributeValueList")
        if not isinstance(value, AttributeValue):
            raise TypeError(f"expected AttributeValue, got {type(value).__name__}")
        self._items.append(value)

    def __getitem__(self, index: int) -> AttributeValue:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"list indices must be int, got {type(index).__name__}")
        length = len(self._items)
        if not -length <= index < length:
            raise IndexOutOfRangeError(index, length)
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[AttributeValue]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeValueList):
            return NotImplemented
        from .traversal import deep_equal

        return deep_equal(self, other)

    def __repr__(self) -> str:
        return f"AttributeValueList({self._items!r})"


class Attributes:
    """Mapping from string key to :class:`AttributeValueList`.

    ``set`` replaces whatever was stored under the key.  Iterating yields
    ``(key, values)`` pairs in insertion order.
    """

    __slots__ = ("_entries", "_frozen")
    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        entries: Union[Mapping[str, Any], Iterable[Tuple[str, Any]], None] = None,
    ):
        self._entries: dict[str, AttributeValueList] = {}
        self._frozen = False
        if entries is None:
            return
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        for key, values in pairs:
            self.set(key, values)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _freeze(self) -> None:
        self._frozen = True

    def set(self, key: str, values: Union[AttributeValueList, Iterable[AttributeValue]]) -> None:
        if self._frozen:
            raise FrozenCollectionError("Attributes")
        if not isinstance(key, str):
            raise TypeError(f"attribute keys must be str, got {type(key).__name__}")
        if not isinstance(values, AttributeValueList):
            values = AttributeValueList(values)
        values._freeze()
        self._entries[key] = values

    def get(self, key: str) -> Optional[AttributeValueList]:
        return self._entries.get(key)

    def remove(self, key: str) -> None:
        if self._frozen:
            raise FrozenCollectionError("Attributes")
        del self._entries[key]

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> Iterator[Tuple[str, AttributeValueList]]:
        return iter(self._entries.items())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[str, AttributeValueList]]:
        return self.items()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attributes):
            return NotImplemented
        from .traversal import deep_equal

        return deep_equal(self, other)

    def __repr__(self) -> str:
        return f"Attributes({dict(self._entries)!r})"


def doubles_equal(a: float, b: float) -> bool:
    """Numeric equality that treats NaN as equal to NaN."""
    return a == b or (math.isnan(a) and math.isnan(b))
