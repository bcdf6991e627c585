"""
canoncbor.mapping.api
=====================

Typed entry points over the codec registry:

    to_value(obj)                 native → Value
    from_value(Tx, value)         Value → native (strict on unknown fields)
    to_bytes(obj)                 native → canonical bytes
    from_bytes(Tx, data)          canonical bytes → native

`from_bytes` is strict by default: trailing bytes after the item are an error.
Pass `strict=False` to ignore them (the consumed length is not reported; use
`canoncbor.decode` + `from_value` when you need it).
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from .. import logging as clog
from ..errors import DecodeError
from ..reader import BytesLike, DecodeOptions, decode, decode_exact
from ..values import Value
from ..writer import encode
from .registry import codec_for, registered_codec

T = TypeVar("T")

log = clog.get_logger(__name__)


def to_value(obj: Any, tp: Any = None) -> Value:
    """Convert `obj` to a Value, using the codec of `tp` (default: `type(obj)`)."""
    if tp is not None:
        return codec_for(tp).to_value(obj)
    codec = registered_codec(type(obj))
    if codec is None:
        codec = codec_for(Any)
    return codec.to_value(obj)


def from_value(tp: Type[T], value: Value, *, allow_unknown: bool = False) -> T:
    """Convert `value` to an instance of `tp`, or raise `DecodeError`."""
    return codec_for(tp).from_value(value, allow_unknown)


def to_bytes(obj: Any, tp: Any = None) -> bytes:
    """Canonical CBOR bytes for `obj`."""
    return encode(to_value(obj, tp))


def from_bytes(
    tp: Type[T],
    data: BytesLike,
    *,
    options: Optional[DecodeOptions] = None,
    strict: bool = True,
    allow_unknown: bool = False,
) -> T:
    """Decode canonical CBOR `data` and convert it to `tp`."""
    if strict:
        value = decode_exact(data, options)
    else:
        value, _ = decode(data, options)
    try:
        return from_value(tp, value, allow_unknown=allow_unknown)
    except DecodeError as e:
        log.debug(
            "typed decode rejected",
            extra={"target": getattr(tp, "__qualname__", repr(tp)), "code": e.code.value, "path": e.path},
        )
        raise


__all__ = ["to_value", "from_value", "to_bytes", "from_bytes"]
