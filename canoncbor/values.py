"""
canoncbor — values
------------------

Generic in-memory representation of any value in the canonical CBOR subset.

Every variant is an immutable, hashable dataclass. A Value carries no
behaviour beyond construction-time range checks and equality; the writer and
the reader are the only things that give it a byte form.

Variants
--------
- Unsigned(n)        major type 0, 0 <= n < 2**64
- Negative(m)        major type 1, represents the integer -1 - m
- ByteString(data)   major type 2
- TextString(text)   major type 3
- Array(items)       major type 4
- Map(entries)       major type 5, entries are (key, value) pairs
- Tagged(tag, value) major type 6
- Simple(n)          major type 7: false/true/null/undefined

Map equality ignores entry order: two Maps with the same entries are the
same logical value, and the writer is responsible for putting them in
canonical order on the wire.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Mapping, Optional, Tuple

from .constants import (
    MT_ARRAY,
    MT_BYTES,
    MT_MAP,
    MT_NEGATIVE,
    MT_SIMPLE,
    MT_TAG,
    MT_TEXT,
    MT_UNSIGNED,
    SIMPLE_FALSE,
    SIMPLE_NULL,
    SIMPLE_TRUE,
    SIMPLE_UNDEFINED,
    UINT64_MAX,
)
from .errors import CborErrorCode, EncodeError, duplicate_map_key


class Value:
    """Base class of all CBOR values."""

    __slots__ = ()

    major_type: ClassVar[int]
    type_name: ClassVar[str]

    def as_int(self) -> int:
        raise TypeError(f"{self.type_name} is not an integer")


def _check_u64(n: int, what: str) -> None:
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"{what} must be int, got {type(n).__name__}")
    if not 0 <= n <= UINT64_MAX:
        raise OverflowError(f"{what} {n} outside 0..2**64-1")


@dataclass(frozen=True)
class Unsigned(Value):
    value: int

    major_type: ClassVar[int] = MT_UNSIGNED
    type_name: ClassVar[str] = "unsigned integer"

    def __post_init__(self) -> None:
        _check_u64(self.value, "Unsigned")

    def as_int(self) -> int:
        return self.value


@dataclass(frozen=True)
class Negative(Value):
    """Negative integer; `magnitude` is -1 - n (so -1 is Negative(0))."""

    magnitude: int

    major_type: ClassVar[int] = MT_NEGATIVE
    type_name: ClassVar[str] = "negative integer"

    def __post_init__(self) -> None:
        _check_u64(self.magnitude, "Negative")

    def as_int(self) -> int:
        return -1 - self.magnitude


@dataclass(frozen=True)
class ByteString(Value):
    data: bytes

    major_type: ClassVar[int] = MT_BYTES
    type_name: ClassVar[str] = "byte string"

    def __post_init__(self) -> None:
        if isinstance(self.data, (bytearray, memoryview)):
            object.__setattr__(self, "data", bytes(self.data))
        elif not isinstance(self.data, bytes):
            raise TypeError(f"ByteString needs bytes, got {type(self.data).__name__}")


@dataclass(frozen=True)
class TextString(Value):
    text: str

    major_type: ClassVar[int] = MT_TEXT
    type_name: ClassVar[str] = "text string"

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise TypeError(f"TextString needs str, got {type(self.text).__name__}")
        # Lone surrogates have no UTF-8 form; reject them here, not in the writer.
        self.text.encode("utf-8", "strict")


@dataclass(frozen=True)
class Array(Value):
    items: Tuple[Value, ...] = ()

    major_type: ClassVar[int] = MT_ARRAY
    type_name: ClassVar[str] = "array"

    def __post_init__(self) -> None:
        items = tuple(self.items)
        for it in items:
            if not isinstance(it, Value):
                raise TypeError(f"Array items must be Value, got {type(it).__name__}")
        object.__setattr__(self, "items", items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


@dataclass(frozen=True, eq=False)
class Map(Value):
    entries: Tuple[Tuple[Value, Value], ...] = ()

    major_type: ClassVar[int] = MT_MAP
    type_name: ClassVar[str] = "map"

    def __post_init__(self) -> None:
        entries = tuple((k, v) for k, v in self.entries)
        for k, v in entries:
            if not isinstance(k, Value) or not isinstance(v, Value):
                raise TypeError("Map entries must be (Value, Value) pairs")
        object.__setattr__(self, "entries", entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Map):
            return NotImplemented
        return Counter(self.entries) == Counter(other.entries)

    def __hash__(self) -> int:
        return hash(frozenset(Counter(self.entries).items()))

    def keys(self) -> Tuple[Value, ...]:
        return tuple(k for k, _ in self.entries)

    def get(self, key: Value, default: Optional[Value] = None) -> Optional[Value]:
        for k, v in self.entries:
            if k == key:
                return v
        return default


@dataclass(frozen=True)
class Tagged(Value):
    tag: int
    value: Value

    major_type: ClassVar[int] = MT_TAG
    type_name: ClassVar[str] = "tagged item"

    def __post_init__(self) -> None:
        _check_u64(self.tag, "tag")
        if not isinstance(self.value, Value):
            raise TypeError("Tagged payload must be a Value")


@dataclass(frozen=True)
class Simple(Value):
    value: int

    major_type: ClassVar[int] = MT_SIMPLE

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("Simple value must be int")
        # 24..31 are reserved by RFC 8949 §3.3; they never appear as simple values.
        if not 0 <= self.value <= 255 or 24 <= self.value <= 31:
            raise ValueError(f"invalid simple value {self.value}")

    @property
    def type_name(self) -> str:  # type: ignore[override]
        return {
            SIMPLE_FALSE: "bool",
            SIMPLE_TRUE: "bool",
            SIMPLE_NULL: "null",
            SIMPLE_UNDEFINED: "undefined",
        }.get(self.value, "simple value")


FALSE = Simple(SIMPLE_FALSE)
TRUE = Simple(SIMPLE_TRUE)
NULL = Simple(SIMPLE_NULL)
UNDEFINED = Simple(SIMPLE_UNDEFINED)


# ---------------------------------------------------------------------------
# Construction helpers
# ---------------------------------------------------------------------------


def integer(n: int) -> Value:
    """Unsigned or Negative, whichever represents `n`. OverflowError beyond 64 bits."""
    if n >= 0:
        return Unsigned(n)
    return Negative(-1 - n)


def text(s: str) -> TextString:
    return TextString(s)


def byte_string(b: bytes) -> ByteString:
    return ByteString(bytes(b))


def array(items: Iterable[Value]) -> Array:
    return Array(tuple(items))


def cbor_map(entries: Iterable[Tuple[Value, Value]]) -> Map:
    return Map(tuple(entries))


def boolean(b: bool) -> Simple:
    return TRUE if b else FALSE


def null() -> Simple:
    return NULL


def is_null(v: Value) -> bool:
    return v == NULL


# ---------------------------------------------------------------------------
# Plain Python <-> Value
# ---------------------------------------------------------------------------


def from_python(obj: Any) -> Value:
    """
    Convert plain Python data to a Value:
      None/bool/int/bytes/str/list/tuple/dict, and Values (passed through).
    Anything else (floats included) raises EncodeError.
    """
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, bool):
        return boolean(obj)
    if isinstance(obj, int):
        try:
            return integer(obj)
        except OverflowError as e:
            raise EncodeError(
                CborErrorCode.INTEGER_OVERFLOW,
                f"integer {obj} does not fit in 64 bits",
                {"value": str(obj)},
                cause=e,
            ) from e
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return ByteString(bytes(obj))
    if isinstance(obj, str):
        return TextString(obj)
    if isinstance(obj, (list, tuple)):
        return Array(tuple(from_python(x) for x in obj))
    if isinstance(obj, Mapping):
        return Map(tuple((from_python(k), from_python(v)) for k, v in obj.items()))
    raise EncodeError(
        CborErrorCode.UNSUPPORTED,
        f"unsupported type for canonical CBOR: {type(obj).__name__}",
        {"actual": type(obj).__name__},
    )


def to_python(value: Value) -> Any:
    """
    Inverse of `from_python`. Arrays used as map keys become tuples; values with
    no natural Python form (undefined, tags) are returned as Values.
    """
    return _to_python(value, as_key=False)


def to_python_key(value: Value) -> Any:
    """`to_python` for a map key: arrays become tuples and maps stay Values."""
    return _to_python(value, as_key=True)


def collect_map(pairs: Iterable[Tuple[Any, Any]], expected: int) -> dict:
    """
    Build a dict from converted map entries. Distinct CBOR keys can collapse
    into one Python key (1 and true, 0 and false); that is reported as a
    duplicate instead of dropping an entry.
    """
    out = dict(pairs)
    if len(out) != expected:
        raise duplicate_map_key(entries=expected, distinct=len(out))
    return out


def _to_python(value: Value, *, as_key: bool) -> Any:
    if isinstance(value, (Unsigned, Negative)):
        return value.as_int()
    if isinstance(value, ByteString):
        return value.data
    if isinstance(value, TextString):
        return value.text
    if isinstance(value, Array):
        items = [_to_python(x, as_key=as_key) for x in value.items]
        return tuple(items) if as_key else items
    if isinstance(value, Map):
        if as_key:
            return value
        return collect_map(
            ((_to_python(k, as_key=True), _to_python(v, as_key=False)) for k, v in value.entries),
            len(value.entries),
        )
    if isinstance(value, Simple):
        if value == TRUE:
            return True
        if value == FALSE:
            return False
        if value == NULL:
            return None
        return value
    return value


__all__ = [
    "Value",
    "Unsigned",
    "Negative",
    "ByteString",
    "TextString",
    "Array",
    "Map",
    "Tagged",
    "Simple",
    "FALSE",
    "TRUE",
    "NULL",
    "UNDEFINED",
    "integer",
    "text",
    "byte_string",
    "array",
    "cbor_map",
    "boolean",
    "null",
    "is_null",
    "from_python",
    "to_python",
    "to_python_key",
    "collect_map",
]
