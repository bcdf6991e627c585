"""
canoncbor.mapping.codecs
========================

Conversion pairs between native Python values and `Value`s.

A codec is a small object with two methods:

    to_value(obj) -> Value
    from_value(value, allow_unknown=False) -> native

`to_value` raises `EncodeError` when a native value has no representation
(wrong Python type, integer outside the declared width): that is a bug in
the caller, not bad input. `from_value` raises `DecodeError` for Values that
do not fit the target type; container codecs prefix the error path with the
index or key that failed.

Integer widths are declared with `typing.Annotated` aliases:

    U8 U16 U32 U64 I8 I16 I32 I64      (plain `int` spans the whole CBOR range)

and fixed-size byte strings with `FixedBytes(n)`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Sequence, Tuple, Type

from ..constants import UINT64_MAX
from ..errors import (
    CborErrorCode,
    DecodeError,
    EncodeError,
    custom,
    duplicate_map_key,
    integer_overflow,
    unexpected_type,
)
from ..values import (
    FALSE,
    NULL,
    TRUE,
    Array,
    ByteString,
    Map,
    Negative,
    TextString,
    Unsigned,
    Value,
    from_python,
    integer,
    to_python,
    to_python_key,
)


def _encode_mismatch(expected: str, obj: Any) -> EncodeError:
    return EncodeError(
        CborErrorCode.UNEXPECTED_TYPE,
        f"cannot encode {type(obj).__name__} as {expected}",
        {"expected": expected, "actual": type(obj).__name__},
    )


class Codec:
    """Base conversion pair. Subclasses override both directions."""

    type_name: str = "value"

    def to_value(self, obj: Any) -> Value:
        raise NotImplementedError

    def from_value(self, value: Value, allow_unknown: bool = False) -> Any:
        raise NotImplementedError

    def from_key(self, value: Value, allow_unknown: bool = False) -> Any:
        """Decode a map key. The result must be hashable."""
        return self.from_value(value, allow_unknown)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type_name}>"


# ---------------------------------------------------------------------------
# Width markers (used inside Annotated[...])
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IntRange:
    lo: int
    hi: int
    name: str


@dataclass(frozen=True)
class ByteLength:
    n: int


CBOR_INT = IntRange(-(UINT64_MAX + 1), UINT64_MAX, "int")

U8 = Annotated[int, IntRange(0, 2**8 - 1, "u8")]
U16 = Annotated[int, IntRange(0, 2**16 - 1, "u16")]
U32 = Annotated[int, IntRange(0, 2**32 - 1, "u32")]
U64 = Annotated[int, IntRange(0, 2**64 - 1, "u64")]
I8 = Annotated[int, IntRange(-(2**7), 2**7 - 1, "i8")]
I16 = Annotated[int, IntRange(-(2**15), 2**15 - 1, "i16")]
I32 = Annotated[int, IntRange(-(2**31), 2**31 - 1, "i32")]
I64 = Annotated[int, IntRange(-(2**63), 2**63 - 1, "i64")]


def FixedBytes(n: int) -> Any:
    """`bytes` of exactly `n` bytes, e.g. `digest: FixedBytes(32)`."""
    return Annotated[bytes, ByteLength(n)]


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


class ValueCodec(Codec):
    """Raw Values pass through untouched."""

    type_name = "Value"

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, Value):
            raise _encode_mismatch("Value", obj)
        return obj

    def from_value(self, value: Value, allow_unknown: bool = False) -> Value:
        return value


class BoolCodec(Codec):
    type_name = "bool"

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, bool):
            raise _encode_mismatch("bool", obj)
        return TRUE if obj else FALSE

    def from_value(self, value: Value, allow_unknown: bool = False) -> bool:
        if value == TRUE:
            return True
        if value == FALSE:
            return False
        raise unexpected_type("bool", value.type_name)


class NoneCodec(Codec):
    type_name = "null"

    def to_value(self, obj: Any) -> Value:
        if obj is not None:
            raise _encode_mismatch("null", obj)
        return NULL

    def from_value(self, value: Value, allow_unknown: bool = False) -> None:
        if value != NULL:
            raise unexpected_type("null", value.type_name)
        return None


class IntCodec(Codec):
    """Integers checked against a declared range in both directions."""

    def __init__(self, rng: IntRange = CBOR_INT) -> None:
        self.rng = rng
        self.type_name = rng.name

    def to_value(self, obj: Any) -> Value:
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise _encode_mismatch(self.type_name, obj)
        if not self.rng.lo <= obj <= self.rng.hi:
            raise EncodeError(
                CborErrorCode.INTEGER_OVERFLOW,
                f"{obj} does not fit in {self.type_name}",
                {"value": str(obj), "expected": self.type_name},
            )
        return integer(obj)

    def from_value(self, value: Value, allow_unknown: bool = False) -> int:
        if not isinstance(value, (Unsigned, Negative)):
            raise unexpected_type("integer", value.type_name)
        n = value.as_int()
        if not self.rng.lo <= n <= self.rng.hi:
            raise integer_overflow(n, self.rng.lo, self.rng.hi, expected=self.type_name)
        return n


class BytesCodec(Codec):
    def __init__(self, length: int | None = None) -> None:
        self.length = length
        self.type_name = "bytes" if length is None else f"bytes[{length}]"

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, (bytes, bytearray, memoryview)):
            raise _encode_mismatch(self.type_name, obj)
        data = bytes(obj)
        if self.length is not None and len(data) != self.length:
            raise EncodeError(
                CborErrorCode.UNEXPECTED_TYPE,
                f"expected {self.length} bytes, got {len(data)}",
                {"expected": self.type_name, "actual": f"bytes[{len(data)}]"},
            )
        return ByteString(data)

    def from_value(self, value: Value, allow_unknown: bool = False) -> bytes:
        if not isinstance(value, ByteString):
            raise unexpected_type("byte string", value.type_name)
        if self.length is not None and len(value.data) != self.length:
            raise unexpected_type(self.type_name, f"bytes[{len(value.data)}]")
        return value.data


class TextCodec(Codec):
    type_name = "str"

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, str):
            raise _encode_mismatch("str", obj)
        return TextString(obj)

    def from_value(self, value: Value, allow_unknown: bool = False) -> str:
        if not isinstance(value, TextString):
            raise unexpected_type("text string", value.type_name)
        return value.text


class EnumCodec(Codec):
    """`enum.Enum` members travel as their (int or str) value."""

    def __init__(self, enum_cls: Type[Enum]) -> None:
        self.enum_cls = enum_cls
        self.type_name = enum_cls.__name__
        for member in enum_cls:
            if isinstance(member.value, bool) or not isinstance(member.value, (int, str)):
                raise TypeError(f"{enum_cls.__name__}.{member.name}: enum values must be int or str")

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, self.enum_cls):
            raise _encode_mismatch(self.type_name, obj)
        v = obj.value
        return TextString(v) if isinstance(v, str) else integer(v)

    def from_value(self, value: Value, allow_unknown: bool = False) -> Enum:
        if isinstance(value, TextString):
            raw: Any = value.text
        elif isinstance(value, (Unsigned, Negative)):
            raw = value.as_int()
        else:
            raise unexpected_type(f"{self.type_name} value", value.type_name)
        try:
            return self.enum_cls(raw)
        except ValueError as e:
            raise custom(f"{raw!r} is not a valid {self.type_name}", actual=repr(raw)) from e


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


class OptionalCodec(Codec):
    """`Optional[T]`: None travels as null, anything else through `inner`."""

    def __init__(self, inner: Codec) -> None:
        self.inner = inner
        self.type_name = f"Optional[{inner.type_name}]"

    def to_value(self, obj: Any) -> Value:
        return NULL if obj is None else self.inner.to_value(obj)

    def from_value(self, value: Value, allow_unknown: bool = False) -> Any:
        if value == NULL:
            return None
        return self.inner.from_value(value, allow_unknown)


class ListCodec(Codec):
    def __init__(self, inner: Codec, *, as_tuple: bool = False) -> None:
        self.inner = inner
        self.as_tuple = as_tuple
        self.type_name = f"{'Tuple' if as_tuple else 'List'}[{inner.type_name}]"

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, (list, tuple)):
            raise _encode_mismatch(self.type_name, obj)
        items: List[Value] = []
        for i, x in enumerate(obj):
            try:
                items.append(self.inner.to_value(x))
            except EncodeError as e:
                raise e.at_path(i) from None
        return Array(tuple(items))

    def from_value(self, value: Value, allow_unknown: bool = False) -> Any:
        if not isinstance(value, Array):
            raise unexpected_type("array", value.type_name)
        out = []
        for i, item in enumerate(value.items):
            try:
                out.append(self.inner.from_value(item, allow_unknown))
            except DecodeError as e:
                raise e.at_path(i) from None
        return tuple(out) if self.as_tuple else out


class TupleCodec(Codec):
    """Fixed-arity tuples ↔ arrays of exactly that many items, in order."""

    def __init__(self, inners: Sequence[Codec]) -> None:
        self.inners = tuple(inners)
        self.type_name = "Tuple[" + ", ".join(c.type_name for c in self.inners) + "]"

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, (tuple, list)) or len(obj) != len(self.inners):
            raise _encode_mismatch(self.type_name, obj)
        items: List[Value] = []
        for i, (codec, x) in enumerate(zip(self.inners, obj)):
            try:
                items.append(codec.to_value(x))
            except EncodeError as e:
                raise e.at_path(i) from None
        return Array(tuple(items))

    def from_value(self, value: Value, allow_unknown: bool = False) -> Tuple[Any, ...]:
        if not isinstance(value, Array):
            raise unexpected_type("array", value.type_name)
        if len(value.items) != len(self.inners):
            raise unexpected_type(f"array of {len(self.inners)} items", f"array of {len(value.items)} items")
        out = []
        for i, (codec, item) in enumerate(zip(self.inners, value.items)):
            try:
                out.append(codec.from_value(item, allow_unknown))
            except DecodeError as e:
                raise e.at_path(i) from None
        return tuple(out)


class DictCodec(Codec):
    def __init__(self, key: Codec, val: Codec) -> None:
        self.key = key
        self.val = val
        self.type_name = f"Dict[{key.type_name}, {val.type_name}]"

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, dict):
            raise _encode_mismatch(self.type_name, obj)
        entries = []
        for k, v in obj.items():
            try:
                entries.append((self.key.to_value(k), self.val.to_value(v)))
            except EncodeError as e:
                raise e.at_path(str(k)) from None
        return Map(tuple(entries))

    def from_value(self, value: Value, allow_unknown: bool = False) -> Dict[Any, Any]:
        if not isinstance(value, Map):
            raise unexpected_type("map", value.type_name)
        out: Dict[Any, Any] = {}
        for k, v in value.entries:
            nk = self.key.from_key(k, allow_unknown)
            try:
                hash(nk)
            except TypeError:
                raise unexpected_type("hashable map key", k.type_name) from None
            if nk in out:
                # 1 and true (or 0 and false) collapse into one Python key
                raise duplicate_map_key(key=str(nk))
            try:
                out[nk] = self.val.from_value(v, allow_unknown)
            except DecodeError as e:
                raise e.at_path(str(nk)) from None
        return out


class DynamicCodec(Codec):
    """
    Used for `Any` and unparameterized containers: registered types go through
    their own codec, everything else through `from_python` / `to_python`.
    """

    type_name = "Any"

    def __init__(self, lookup) -> None:
        self._lookup = lookup

    def to_value(self, obj: Any) -> Value:
        codec = self._lookup(type(obj))
        if codec is not None:
            return codec.to_value(obj)
        if isinstance(obj, (list, tuple)):
            return Array(tuple(self.to_value(x) for x in obj))
        if isinstance(obj, dict):
            return Map(tuple((self.to_value(k), self.to_value(v)) for k, v in obj.items()))
        return from_python(obj)

    def from_value(self, value: Value, allow_unknown: bool = False) -> Any:
        return to_python(value)

    def from_key(self, value: Value, allow_unknown: bool = False) -> Any:
        return to_python_key(value)


__all__ = [
    "Codec",
    "IntRange",
    "ByteLength",
    "U8",
    "U16",
    "U32",
    "U64",
    "I8",
    "I16",
    "I32",
    "I64",
    "FixedBytes",
    "ValueCodec",
    "BoolCodec",
    "NoneCodec",
    "IntCodec",
    "BytesCodec",
    "TextCodec",
    "EnumCodec",
    "OptionalCodec",
    "ListCodec",
    "TupleCodec",
    "DictCodec",
    "DynamicCodec",
]
