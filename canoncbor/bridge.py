"""
canoncbor.bridge
================

Adapter between canonical Values and the `cbor2` object model.

- `to_native(value)` / `from_native(obj)` convert between `Value`s and the
  Python objects cbor2 produces and accepts (`int`, `bytes`, `str`, `list`,
  `dict`, `CBORTag`, `CBORSimpleValue`, `undefined`, `FrozenDict`).
- `dumps(obj)` / `loads(data)` run plain objects through *this* codec, so the
  bytes are canonical and the input is strictly validated (cbor2 itself
  accepts non-canonical input).
- `default_encoder` plugs registered records and sum types into a cbor2
  encoder:

      cbor2.dumps({"tx": Transfer(...)}, default=default_encoder)

  The hook writes the canonical bytes of the object verbatim.

Floats have no Value representation and raise `EncodeError`.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Type, TypeVar

import cbor2
from cbor2 import CBORSimpleValue, CBORTag, FrozenDict, undefined

from .errors import CborErrorCode, EncodeError
from .mapping.api import from_value, to_bytes
from .mapping.registry import registered_codec
from .reader import BytesLike, DecodeOptions, decode_exact
from .values import (
    NULL,
    UNDEFINED,
    Array,
    ByteString,
    Map,
    Negative,
    Simple,
    Tagged,
    TextString,
    Unsigned,
    Value,
    boolean,
    collect_map,
    integer,
)
from .writer import encode

T = TypeVar("T")

_SIMPLE_NATIVE = {20: False, 21: True, 22: None}


def to_native(value: Value) -> Any:
    """Value → cbor2-style Python object."""
    return _to_native(value, as_key=False)


def _to_native(value: Value, *, as_key: bool) -> Any:
    if isinstance(value, (Unsigned, Negative)):
        return value.as_int()
    if isinstance(value, ByteString):
        return value.data
    if isinstance(value, TextString):
        return value.text
    if isinstance(value, Array):
        items = [_to_native(v, as_key=as_key) for v in value.items]
        return tuple(items) if as_key else items
    if isinstance(value, Map):
        d = collect_map(
            ((_to_native(k, as_key=True), _to_native(v, as_key=as_key)) for k, v in value.entries),
            len(value.entries),
        )
        return FrozenDict(d) if as_key else d
    if isinstance(value, Tagged):
        return CBORTag(value.tag, _to_native(value.value, as_key=as_key))
    if isinstance(value, Simple):
        if value.value in _SIMPLE_NATIVE:
            return _SIMPLE_NATIVE[value.value]
        if value == UNDEFINED:
            return undefined
        return CBORSimpleValue(value.value)
    raise TypeError(f"not a Value: {type(value).__name__}")


def from_native(obj: Any) -> Value:
    """cbor2-style Python object → Value. Raises `EncodeError` for unrepresentable objects."""
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return NULL
    if obj is undefined:
        return UNDEFINED
    if isinstance(obj, bool):
        return boolean(obj)
    if isinstance(obj, int):
        try:
            return integer(obj)
        except OverflowError as e:
            raise EncodeError(
                CborErrorCode.INTEGER_OVERFLOW,
                f"integer {obj} outside the CBOR integer range",
                {"value": obj},
                cause=e,
            ) from e
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return ByteString(bytes(obj))
    if isinstance(obj, str):
        return TextString(obj)
    # CBORSimpleValue is a tuple subclass in some cbor2 releases: test it first.
    if isinstance(obj, CBORSimpleValue):
        try:
            return Simple(obj.value)
        except ValueError as e:
            raise EncodeError(CborErrorCode.UNSUPPORTED, str(e), {"simple": obj.value}, cause=e) from e
    if isinstance(obj, CBORTag):
        return Tagged(obj.tag, from_native(obj.value))
    if isinstance(obj, (list, tuple)):
        return Array(tuple(from_native(x) for x in obj))
    if isinstance(obj, Mapping):
        return Map(tuple((from_native(k), from_native(v)) for k, v in obj.items()))
    codec = registered_codec(type(obj))
    if codec is not None:
        return codec.to_value(obj)
    raise EncodeError(
        CborErrorCode.UNSUPPORTED,
        f"{type(obj).__name__} has no canonical CBOR representation",
        {"actual": type(obj).__name__},
    )


def from_native_as(tp: Type[T], obj: Any, *, allow_unknown: bool = False) -> T:
    """Convert a cbor2-decoded object straight into a registered native type."""
    return from_value(tp, from_native(obj), allow_unknown=allow_unknown)


def dumps(obj: Any) -> bytes:
    """Canonical bytes for a cbor2-style object (or a registered record/sum)."""
    return encode(from_native(obj))


def loads(data: BytesLike, options: Optional[DecodeOptions] = None) -> Any:
    """Strictly decode canonical bytes into cbor2-style objects."""
    return to_native(decode_exact(data, options))


def default_encoder(encoder: cbor2.CBOREncoder, obj: Any) -> None:
    """cbor2 `default=` hook: emit canonical bytes for Values and registered types."""
    if isinstance(obj, Value):
        encoder.write(encode(obj))
        return
    if registered_codec(type(obj)) is None:
        raise cbor2.CBOREncodeTypeError(f"cannot serialize type {type(obj).__name__}")
    encoder.write(to_bytes(obj))


__all__ = ["to_native", "from_native", "from_native_as", "dumps", "loads", "default_encoder"]
