# phenoattr/attributes/payloads.py
"""Injected encoders/decoders for structured leaf payloads.

The wire codec never looks inside an ontology class or an experiment; it asks
a :class:`PayloadCodec` for bytes and writes them behind a length prefix.  The
default codecs serialise the pydantic record as compact JSON.  Callers with
another record encoding pass their own codecs to
:class:`~phenoattr.attributes.codec.AttributeCodec`.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ValidationError

from ..errors import MalformedEncodingError, MissingRequiredFieldError, PhenoattrError
from .values import STRUCTURED_TYPES, ValueKind


@dataclass(frozen=True)
class PayloadCodec:
    """Encode/decode pair for one structured kind."""

    kind: ValueKind
    encode: Callable[[Any], bytes]
    decode: Callable[[bytes], Any]


def validation_error_to_phenoattr(kind: ValueKind, exc: ValidationError) -> PhenoattrError:
    """Map a pydantic validation failure onto the codec's error kinds."""
    errors = exc.errors()
    for err in errors:
        if err.get("type") == "missing":
            loc = ".".join(str(part) for part in err.get("loc", ()))
            return MissingRequiredFieldError(loc or kind.label, detail=kind.label)
    first = errors[0]["msg"] if errors else str(exc)
    return MalformedEncodingError(f"invalid {kind.label} payload: {first}")


def json_payload_codec(kind: ValueKind) -> PayloadCodec:
    """Return a codec that stores the record for *kind* as compact JSON."""
    model: type[BaseModel] = STRUCTURED_TYPES[kind]

    def _encode(record: BaseModel) -> bytes:
        return record.model_dump_json(exclude_defaults=True).encode("utf-8")

    def _decode(raw: bytes) -> BaseModel:
        try:
            return model.model_validate_json(raw)
        except ValidationError as exc:
            raise validation_error_to_phenoattr(kind, exc) from exc

    return PayloadCodec(kind=kind, encode=_encode, decode=_decode)


DEFAULT_PAYLOAD_CODECS: Mapping[ValueKind, PayloadCodec] = MappingProxyType(
    {kind: json_payload_codec(kind) for kind in STRUCTURED_TYPES}
)


def merge_payload_codecs(
    overrides: Mapping[ValueKind, PayloadCodec] | None,
) -> Mapping[ValueKind, PayloadCodec]:
    """Overlay caller-supplied codecs on the defaults."""
    if not overrides:
        return DEFAULT_PAYLOAD_CODECS
    merged = dict(DEFAULT_PAYLOAD_CODECS)
    for kind, codec in overrides.items():
        kind = ValueKind(kind)
        if not kind.is_structured:
            raise ValueError(f"{kind.label} is not a structured kind")
        merged[kind] = codec
    return MappingProxyType(merged)
