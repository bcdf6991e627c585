"""
canoncbor.mapping.registry
==========================

A registry that maps native types → codecs, keyed by type identity.

- Records and sum types register themselves when decorated (`@record`,
  `@sumtype`, `@variant`), i.e. at import time.
- Built-in and generic types (`int`, `List[U32]`, `Tuple[str, bytes]`,
  `Optional[Foo]`, `Annotated[...]`) are resolved from type hints on demand
  and cached.
- `register_codec(tp, codec)` plugs in a hand-written codec for any other type.

After import-time registration the table is only ever read or extended with
derived (pure) codecs, so concurrent lookups need no coordination.
"""

from __future__ import annotations

import types
from enum import Enum
from typing import Annotated, Any, Dict, Optional, Union, get_args, get_origin

from .. import logging as clog
from ..values import Value
from .codecs import (
    BoolCodec,
    ByteLength,
    BytesCodec,
    Codec,
    DictCodec,
    DynamicCodec,
    EnumCodec,
    IntCodec,
    IntRange,
    ListCodec,
    NoneCodec,
    OptionalCodec,
    TextCodec,
    TupleCodec,
    ValueCodec,
)

log = clog.get_logger(__name__)

_NoneType = type(None)

# type identity → codec
_CODECS: Dict[Any, Codec] = {}


def register_codec(tp: Any, codec: Codec) -> None:
    """Register or replace the codec used for `tp`."""
    if not isinstance(codec, Codec):
        raise TypeError(f"codec for {tp!r} must be a Codec, got {type(codec).__name__}")
    _CODECS[tp] = codec
    log.debug("codec registered", extra={"cbor_type": getattr(tp, "__qualname__", repr(tp)), "codec": codec.type_name})


def is_registered(tp: Any) -> bool:
    return tp in _CODECS


def registered_codec(tp: Any) -> Optional[Codec]:
    """Codec explicitly registered for `tp` (records, sums, enums, custom), or None."""
    try:
        return _CODECS.get(tp)
    except TypeError:  # unhashable hint
        return None


_DYNAMIC = DynamicCodec(lambda tp: _dynamic_lookup(tp))


def _dynamic_lookup(tp: Any) -> Optional[Codec]:
    codec = registered_codec(tp)
    if codec is None and isinstance(tp, type) and issubclass(tp, Enum):
        return codec_for(tp)
    return codec


def unwrap_optional(tp: Any) -> Any:
    """`Optional[T]` → `T`; anything else unchanged."""
    if _is_union(tp):
        args = [a for a in get_args(tp) if a is not _NoneType]
        if len(args) == 1 and len(get_args(tp)) == 2:
            return args[0]
    return tp


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def codec_for(tp: Any) -> Codec:
    """Resolve (and cache) the codec for a type or type hint."""
    codec = registered_codec(tp)
    if codec is not None:
        return codec
    codec = _build(tp)
    try:
        _CODECS.setdefault(tp, codec)
    except TypeError:
        pass  # unhashable hints are rebuilt on every lookup
    return codec


def _build(tp: Any) -> Codec:
    if tp is Any or tp is object:
        return _DYNAMIC
    if tp is None or tp is _NoneType:
        return NoneCodec()
    if tp is bool:
        return BoolCodec()
    if tp is int:
        return IntCodec()
    if tp in (bytes, bytearray):
        return BytesCodec()
    if tp is str:
        return TextCodec()
    if isinstance(tp, type) and issubclass(tp, Value):
        return ValueCodec()
    if isinstance(tp, type) and issubclass(tp, Enum):
        return EnumCodec(tp)
    if tp is list:
        return ListCodec(_DYNAMIC)
    if tp is tuple:
        return ListCodec(_DYNAMIC, as_tuple=True)
    if tp is dict:
        return DictCodec(_DYNAMIC, _DYNAMIC)

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is Annotated:
        base, *meta = args
        for m in meta:
            if isinstance(m, Codec):
                return m
            if isinstance(m, IntRange):
                if base is not int:
                    raise TypeError(f"{m.name} applies to int, not {base!r}")
                return IntCodec(m)
            if isinstance(m, ByteLength):
                if base is not bytes:
                    raise TypeError(f"ByteLength applies to bytes, not {base!r}")
                return BytesCodec(m.n)
        return codec_for(base)

    if _is_union(tp):
        inner = unwrap_optional(tp)
        if inner is tp:
            raise TypeError(f"only Optional[T] unions are supported, got {tp!r}")
        return OptionalCodec(codec_for(inner))

    if origin is list:
        (inner,) = args or (Any,)
        return ListCodec(codec_for(inner))

    if origin is tuple:
        if not args:
            return ListCodec(_DYNAMIC, as_tuple=True)
        if len(args) == 2 and args[1] is Ellipsis:
            return ListCodec(codec_for(args[0]), as_tuple=True)
        if args == ((),):
            return TupleCodec(())
        return TupleCodec([codec_for(a) for a in args])

    if origin is dict:
        k, v = args or (Any, Any)
        return DictCodec(codec_for(k), codec_for(v))

    raise TypeError(f"no CBOR codec registered for {tp!r}")


__all__ = [
    "register_codec",
    "registered_codec",
    "is_registered",
    "codec_for",
    "unwrap_optional",
]
