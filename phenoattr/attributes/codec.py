# phenoattr/attributes/codec.py
"""Versioned, self-describing binary codec for attribute trees.

Wire format, version 1
----------------------
::

    buffer  := version:u8 (=1) value
    value   := tag:varint payload
    varint  := unsigned LEB128, at most 10 bytes, value < 2**64

    tag  kind                payload
    1    STRING              len:varint utf8[len]
    2    INT64               i64 little-endian
    3    INT32               i32 little-endian
    4    BOOL                u8, 0x00 or 0x01
    5    DOUBLE              IEEE-754 binary64 little-endian
    6    NULL                (empty)
    7    EXTERNAL_REFERENCE  len:varint bytes[len]   (injected payload codec)
    8    ONTOLOGY_CLASS      len:varint bytes[len]
    9    EXPERIMENT          len:varint bytes[len]
    10   ANALYSIS            len:varint bytes[len]
    11   LIST                count:varint value[count]
    12   MAP                 count:varint entry[count]
         entry := keylen:varint utf8[keylen] count:varint value[count]

Every variable-size field carries an explicit length or count, so a decoder
never has to guess where a field ends.  Map keys are written in sorted order,
which makes the encoding of equal trees byte-identical.  Tag 0 is reserved.

Both directions are iterative and enforce :class:`~phenoattr.config.CodecLimits`.
"""

from __future__ import annotations

import struct
from typing import Mapping, Optional

from ..config import CodecLimits
from ..errors import (
    DepthExceededError,
    MalformedEncodingError,
    PhenoattrError,
    SizeLimitExceededError,
    TypeMismatchError,
    UnknownVariantError,
)
from ..utils.logging import get_logger, log_codec_operation, log_limit_violation
from .payloads import PayloadCodec, merge_payload_codecs
from .traversal import AttributeVisitor, TreeBuilder, walk
from .values import AttributeValue, Attributes, ValueKind

__all__ = ["WIRE_VERSION", "AttributeCodec", "encode", "decode"]

_logger = get_logger(__name__)

WIRE_VERSION = 1
_MAX_VARINT_BYTES = 10
_U64_MAX = 2**64 - 1

_I64 = struct.Struct("<q")
_I32 = struct.Struct("<i")
_F64 = struct.Struct("<d")

_TAGS = {kind.value: kind for kind in ValueKind}


def _write_varint(out: bytearray, number: int) -> None:
    while True:
        byte = number & 0x7F
        number >>= 7
        if number:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return


def _utf8(text: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise MalformedEncodingError(f"string is not encodable as UTF-8: {exc.reason}") from exc


class _Reader:
    """Bounds-checked cursor over an input buffer."""

    __slots__ = ("_view", "offset")

    def __init__(self, data: bytes):
        self._view = memoryview(data).cast("B")
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self.offset

    def take(self, size: int) -> bytes:
        if size > self.remaining:
            raise MalformedEncodingError(
                f"truncated buffer: need {size} bytes, {self.remaining} left", self.offset
            )
        start = self.offset
        self.offset += size
        return self._view[start:self.offset].tobytes()

    def read_varint(self) -> int:
        result = 0
        start = self.offset
        for shift in range(0, 7 * _MAX_VARINT_BYTES, 7):
            if not self.remaining:
                raise MalformedEncodingError("truncated varint", start)
            byte = self._view[self.offset]
            self.offset += 1
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                if result > _U64_MAX:
                    raise MalformedEncodingError("varint exceeds 64 bits", start)
                return result
        raise MalformedEncodingError("varint longer than 10 bytes", start)

    def unpack(self, fmt: struct.Struct):
        return fmt.unpack(self.take(fmt.size))[0]


class _Frame:
    """Decode state for one open list or map."""

    __slots__ = ("kind", "remaining", "pending", "key_open", "keys")

    def __init__(self, kind: ValueKind, count: int):
        self.kind = kind
        self.remaining = count  # list items, or map entries not yet started
        self.pending = 0  # items left under the current map key
        self.key_open = False
        self.keys: set[str] = set()


class _Encoder(AttributeVisitor):
    def __init__(self, codec: AttributeCodec):
        self.codec = codec
        self.out = bytearray([WIRE_VERSION])

    def _count(self, what: str, size: int) -> None:
        self.codec._check_count(what, size)
        _write_varint(self.out, size)

    def _bytes(self, what: str, raw: bytes) -> None:
        self.codec._check_payload(what, len(raw))
        _write_varint(self.out, len(raw))
        self.out += raw

    def visit_leaf(self, value, path):
        kind = value.kind
        _write_varint(self.out, kind.value)
        payload = value.payload
        if kind is ValueKind.STRING:
            self._bytes("string length", _utf8(payload))
        elif kind is ValueKind.INT64:
            self.out += _I64.pack(payload)
        elif kind is ValueKind.INT32:
            self.out += _I32.pack(payload)
        elif kind is ValueKind.BOOL:
            self.out.append(1 if payload else 0)
        elif kind is ValueKind.DOUBLE:
            self.out += _F64.pack(payload)
        elif kind.is_structured:
            raw = self.codec.payload_codecs[kind].encode(payload)
            self._bytes(f"{kind.label} payload", bytes(raw))

    def enter_list(self, values, path):
        _write_varint(self.out, ValueKind.LIST.value)
        self._count("list count", len(values))

    def enter_map(self, attributes, path):
        _write_varint(self.out, ValueKind.MAP.value)
        self._count("map count", len(attributes))

    def enter_key(self, key, values, path):
        self._bytes("key length", _utf8(key))
        self._count("list count", len(values))


class AttributeCodec:
    """Encoder/decoder bound to one set of limits and payload codecs.

    Parameters
    ----------
    limits:
        Depth, collection-size and payload-size bounds.  Defaults to the
        values in :func:`~phenoattr.config.get_config`.
    payload_codecs:
        Per-kind overrides for structured payloads; kinds not listed use the
        JSON codecs from :mod:`~phenoattr.attributes.payloads`.
    """

    def __init__(
        self,
        limits: Optional[CodecLimits] = None,
        payload_codecs: Optional[Mapping[ValueKind, PayloadCodec]] = None,
    ):
        self.limits = limits or CodecLimits.from_config()
        self.payload_codecs = merge_payload_codecs(payload_codecs)

    # -- limits --------------------------------------------------------------

    def _check_count(self, what: str, size: int) -> None:
        if size > self.limits.max_collection_size:
            raise SizeLimitExceededError(what, size, self.limits.max_collection_size)

    def _check_payload(self, what: str, size: int) -> None:
        if size > self.limits.max_payload_bytes:
            raise SizeLimitExceededError(what, size, self.limits.max_payload_bytes)

    # -- encode --------------------------------------------------------------

    def encode(self, value: AttributeValue) -> bytes:
        """Serialise *value* to wire format version 1."""
        if not isinstance(value, AttributeValue):
            raise TypeError(f"expected AttributeValue, got {type(value).__name__}")
        return self._encode_root(value, value.kind)

    def encode_attributes(self, attributes: Attributes) -> bytes:
        """Serialise a top-level map as a MAP value."""
        if not isinstance(attributes, Attributes):
            raise TypeError(f"expected Attributes, got {type(attributes).__name__}")
        return self._encode_root(attributes, ValueKind.MAP)

    def _encode_root(self, root, kind: ValueKind) -> bytes:
        encoder = _Encoder(self)
        try:
            walk(root, encoder, max_depth=self.limits.max_depth, sort_keys=True)
        except PhenoattrError as exc:
            log_limit_violation(_logger, "encode", exc)
            raise
        data = bytes(encoder.out)
        log_codec_operation(_logger, "encode", len(data), kind.name)
        return data

    # -- decode --------------------------------------------------------------

    def decode(self, data: bytes) -> AttributeValue:
        """Parse a complete buffer; any error rejects the whole buffer."""
        reader = _Reader(data)
        try:
            version = reader.unpack(struct.Struct("<B"))
            if version != WIRE_VERSION:
                raise MalformedEncodingError(f"unsupported wire version {version}", 0)
            value = self._decode_tree(reader)
            if reader.remaining:
                raise MalformedEncodingError(
                    f"{reader.remaining} trailing bytes after value", reader.offset
                )
        except PhenoattrError as exc:
            log_limit_violation(_logger, "decode", exc, reader.offset)
            raise
        log_codec_operation(_logger, "decode", len(reader._view), value.kind.name)
        return value

    def decode_attributes(self, data: bytes) -> Attributes:
        """Parse a buffer whose root must be a MAP; returns an editable map."""
        value = self.decode(data)
        if value.kind is not ValueKind.MAP:
            raise TypeMismatchError(ValueKind.MAP, value.kind)
        return Attributes(value.payload.items())

    def _read_count(self, reader: _Reader, what: str) -> int:
        offset = reader.offset
        count = reader.read_varint()
        self._check_count(what, count)
        # Every element takes at least one byte, so a count above the bytes
        # left cannot be honest.
        if count > reader.remaining:
            raise MalformedEncodingError(
                f"{what} {count} exceeds remaining {reader.remaining} bytes", offset
            )
        return count

    def _read_bytes(self, reader: _Reader, what: str) -> bytes:
        size = reader.read_varint()
        self._check_payload(what, size)
        return reader.take(size)

    def _read_text(self, reader: _Reader, what: str) -> str:
        offset = reader.offset
        raw = self._read_bytes(reader, what)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedEncodingError(f"invalid UTF-8 in {what}", offset) from exc

    def _read_leaf(self, kind: ValueKind, reader: _Reader) -> AttributeValue:
        if kind is ValueKind.STRING:
            return AttributeValue.of_string(self._read_text(reader, "string length"))
        if kind is ValueKind.INT64:
            return AttributeValue.of_int64(reader.unpack(_I64))
        if kind is ValueKind.INT32:
            return AttributeValue.of_int32(reader.unpack(_I32))
        if kind is ValueKind.BOOL:
            offset = reader.offset
            flag = reader.take(1)[0]
            if flag > 1:
                raise MalformedEncodingError(f"invalid bool byte 0x{flag:02x}", offset)
            return AttributeValue.of_bool(bool(flag))
        if kind is ValueKind.DOUBLE:
            return AttributeValue.of_double(reader.unpack(_F64))
        if kind is ValueKind.NULL:
            return AttributeValue.null()
        offset = reader.offset
        raw = self._read_bytes(reader, f"{kind.label} payload")
        try:
            return AttributeValue(kind, self.payload_codecs[kind].decode(raw))
        except PhenoattrError:
            raise
        except (ValueError, TypeError) as exc:
            raise MalformedEncodingError(f"invalid {kind.label} payload: {exc}", offset) from exc

    def _decode_tree(self, reader: _Reader) -> AttributeValue:
        builder = TreeBuilder(max_depth=self.limits.max_depth)
        frames: list[_Frame] = []
        while True:
            tag = reader.read_varint()
            kind = _TAGS.get(tag)
            if kind is None:
                raise UnknownVariantError(tag)
            if kind.is_container:
                if builder.depth + 1 > self.limits.max_depth:
                    raise DepthExceededError(self.limits.max_depth)
                if kind is ValueKind.LIST:
                    count = self._read_count(reader, "list count")
                    builder.open_list()
                else:
                    count = self._read_count(reader, "map count")
                    builder.open_map()
                frames.append(_Frame(kind, count))
            else:
                builder.leaf(self._read_leaf(kind, reader))
                self._child_done(frames)

            while frames:
                top = frames[-1]
                if top.kind is ValueKind.LIST:
                    if top.remaining:
                        break
                    builder.close_list()
                else:
                    if top.pending:
                        break
                    if top.key_open:
                        builder.close_key()
                        top.key_open = False
                    if top.remaining:
                        top.remaining -= 1
                        key_offset = reader.offset
                        key = self._read_text(reader, "key length")
                        if key in top.keys:
                            raise MalformedEncodingError(f"duplicate map key {key!r}", key_offset)
                        top.keys.add(key)
                        top.pending = self._read_count(reader, "list count")
                        builder.open_key(key)
                        top.key_open = True
                        continue
                    builder.close_map()
                frames.pop()
                self._child_done(frames)

            if not frames:
                return builder.result

    @staticmethod
    def _child_done(frames: list[_Frame]) -> None:
        if not frames:
            return
        top = frames[-1]
        if top.kind is ValueKind.LIST:
            top.remaining -= 1
        else:
            top.pending -= 1


def encode(
    value: AttributeValue,
    limits: Optional[CodecLimits] = None,
    payload_codecs: Optional[Mapping[ValueKind, PayloadCodec]] = None,
) -> bytes:
    """Shortcut for ``AttributeCodec(limits, payload_codecs).encode(value)``."""
    return AttributeCodec(limits, payload_codecs).encode(value)


def decode(
    data: bytes,
    limits: Optional[CodecLimits] = None,
    payload_codecs: Optional[Mapping[ValueKind, PayloadCodec]] = None,
) -> AttributeValue:
    """Shortcut for ``AttributeCodec(limits, payload_codecs).decode(data)``."""
    return AttributeCodec(limits, payload_codecs).decode(data)
