"""
canoncbor — reader
------------------

Strict canonical CBOR decoder. Parses bytes into a `Value` and rejects every
input that is not itself the unique canonical encoding of the value it
represents:

- non-minimal heads (e.g. ``0x18 0x00`` for integer 0) → NonCanonicalEncoding
- indefinite-length items / break codes                → NonCanonicalEncoding
- map keys out of canonical order                      → NonCanonicalEncoding
- repeated map keys                                    → DuplicateMapKey
- nesting deeper than ``DecodeOptions.max_depth``      → DepthExceeded
- floats, unassigned simple values, reserved AI codes,
  tags outside ``DecodeOptions.allowed_tags``          → Unsupported
- short input / invalid UTF-8                          → Truncated / InvalidUtf8

Every error carries the byte ``offset`` of the offending head.

Because only canonical sub-items are ever accepted, the raw bytes of a map
key *are* its canonical encoding, so key ordering is checked directly on the
input slice without re-encoding.

Public API:
- decode(data, options=None) -> (Value, bytes_consumed)     streaming mode
- decode_exact(data, options=None) -> Value                 strict mode
- decode_sequence(data, options=None) -> list[Value]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Tuple, Union

from . import logging as clog
from .constants import (
    AI_INDEFINITE,
    AI_MIN_VALUE,
    AI_WIDTH,
    AI_1_BYTE,
    AI_MASK,
    DEFAULT_MAX_DEPTH,
    MAJOR_TYPE_SHIFT,
    MAX_DEPTH_CEILING,
    MT_ARRAY,
    MT_BYTES,
    MT_MAP,
    MT_NEGATIVE,
    MT_SIMPLE,
    MT_TAG,
    MT_TEXT,
    MT_UNSIGNED,
    SUPPORTED_SIMPLE,
)
from .errors import (
    CborErrorCode,
    DecodeError,
    depth_exceeded,
    duplicate_map_key,
    non_canonical,
    trailing_bytes,
)
from .values import Array, ByteString, Map, Negative, Simple, Tagged, TextString, Unsigned, Value
from .writer import canonical_key

log = clog.get_logger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class DecodeOptions:
    """
    Decoder limits.

    max_depth:    deepest nesting of arrays/maps/tags accepted (top level is 0).
    allowed_tags: None accepts any tag; otherwise only the listed tag numbers.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    allowed_tags: Optional[FrozenSet[int]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.max_depth, int) or not 0 <= self.max_depth <= MAX_DEPTH_CEILING:
            raise ValueError(f"max_depth must be in 0..{MAX_DEPTH_CEILING}, got {self.max_depth!r}")
        if self.allowed_tags is not None:
            object.__setattr__(self, "allowed_tags", frozenset(int(t) for t in self.allowed_tags))

    def with_tags(self, tags: Iterable[int]) -> "DecodeOptions":
        return DecodeOptions(max_depth=self.max_depth, allowed_tags=frozenset(tags))


DEFAULT_OPTIONS = DecodeOptions()


def _malformed(code: CborErrorCode, message: str, offset: int) -> DecodeError:
    return DecodeError(code, message, {"offset": offset})


class _Buf:
    __slots__ = ("b", "i", "n")

    def __init__(self, b: BytesLike):
        self.b = memoryview(b).cast("B") if isinstance(b, memoryview) else memoryview(b)
        self.i = 0
        self.n = len(self.b)

    @property
    def remaining(self) -> int:
        return self.n - self.i

    def get(self, k: int) -> bytes:
        if k > self.n - self.i:
            raise _malformed(CborErrorCode.TRUNCATED, f"need {k} byte(s), {self.n - self.i} left", self.i)
        out = self.b[self.i:self.i + k].tobytes()
        self.i += k
        return out

    def get1(self) -> int:
        if self.i >= self.n:
            raise _malformed(CborErrorCode.TRUNCATED, "unexpected end of input", self.i)
        v = self.b[self.i]
        self.i += 1
        return int(v)


class Reader:
    """Decodes one item at a time from a buffer, tracking the offset."""

    def __init__(self, data: BytesLike, options: Optional[DecodeOptions] = None) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"expected bytes-like input, got {type(data).__name__}")
        self.buf = _Buf(data)
        self.options = options or DEFAULT_OPTIONS

    @property
    def offset(self) -> int:
        return self.buf.i

    def at_end(self) -> bool:
        return self.buf.i >= self.buf.n

    # ------------------------
    # Heads
    # ------------------------

    def _read_head(self) -> Tuple[int, int, int]:
        """Return (major, additional_info, argument) and enforce minimal width."""
        start = self.buf.i
        ib = self.buf.get1()
        major = ib >> MAJOR_TYPE_SHIFT
        ai = ib & AI_MASK
        if ai < AI_1_BYTE:
            return major, ai, ai
        if ai in AI_WIDTH:
            if major == MT_SIMPLE and ai != AI_1_BYTE:
                raise _malformed(CborErrorCode.UNSUPPORTED, "floating-point values are not supported", start)
            arg = int.from_bytes(self.buf.get(AI_WIDTH[ai]), "big")
            if major == MT_SIMPLE:
                # One-byte simple values below 32 must use the short form.
                if arg < 32:
                    raise non_canonical(f"simple value {arg} in two-byte form", offset=start)
                return major, ai, arg
            if arg < AI_MIN_VALUE[ai]:
                raise non_canonical(f"non-minimal argument {arg} in {AI_WIDTH[ai]}-byte form", offset=start)
            return major, ai, arg
        if ai == AI_INDEFINITE:
            raise non_canonical("indefinite-length items are not allowed", offset=start)
        raise _malformed(CborErrorCode.UNSUPPORTED, f"reserved additional information {ai}", start)

    # ------------------------
    # Items
    # ------------------------

    def read_item(self, depth: int = 0) -> Value:
        start = self.buf.i
        if depth > self.options.max_depth:
            raise depth_exceeded(self.options.max_depth, offset=start)
        major, _ai, arg = self._read_head()

        if major == MT_UNSIGNED:
            return Unsigned(arg)
        if major == MT_NEGATIVE:
            return Negative(arg)
        if major == MT_BYTES:
            return ByteString(self.buf.get(arg))
        if major == MT_TEXT:
            data_at = self.buf.i
            raw = self.buf.get(arg)
            try:
                return TextString(raw.decode("utf-8", "strict"))
            except UnicodeDecodeError as e:
                raise DecodeError(
                    CborErrorCode.INVALID_UTF8, f"invalid UTF-8: {e.reason}", {"offset": data_at + e.start}, cause=e
                ) from e
        if major == MT_ARRAY:
            # Every item takes at least one byte: refuse absurd counts before looping.
            if arg > self.buf.remaining:
                raise _malformed(CborErrorCode.TRUNCATED, f"array of {arg} items exceeds input", start)
            return Array(tuple(self.read_item(depth + 1) for _ in range(arg)))
        if major == MT_MAP:
            if 2 * arg > self.buf.remaining:
                raise _malformed(CborErrorCode.TRUNCATED, f"map of {arg} entries exceeds input", start)
            return self._read_map(arg, depth)
        if major == MT_TAG:
            allowed = self.options.allowed_tags
            if allowed is not None and arg not in allowed:
                raise DecodeError(CborErrorCode.UNSUPPORTED, f"tag {arg} is not allowed", {"offset": start, "tag": arg})
            return Tagged(arg, self.read_item(depth + 1))
        # MT_SIMPLE
        if arg not in SUPPORTED_SIMPLE:
            raise DecodeError(CborErrorCode.UNSUPPORTED, f"unassigned simple value {arg}", {"offset": start})
        return Simple(arg)

    def _read_map(self, count: int, depth: int) -> Map:
        entries: List[Tuple[Value, Value]] = []
        prev_key: Optional[bytes] = None
        for _ in range(count):
            key_start = self.buf.i
            key = self.read_item(depth + 1)
            key_raw = self.buf.b[key_start:self.buf.i].tobytes()
            if prev_key is not None:
                if key_raw == prev_key:
                    raise duplicate_map_key(offset=key_start)
                if canonical_key(key_raw) < canonical_key(prev_key):
                    raise non_canonical("map keys out of canonical order", offset=key_start)
            prev_key = key_raw
            entries.append((key, self.read_item(depth + 1)))
        return Map(tuple(entries))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def decode(data: BytesLike, options: Optional[DecodeOptions] = None) -> Tuple[Value, int]:
    """
    Streaming mode: decode exactly one item from the front of `data` and
    return it with the number of bytes consumed. Trailing bytes are left for
    the caller.
    """
    r = Reader(data, options)
    value = r.read_item()
    return value, r.offset


def decode_exact(data: BytesLike, options: Optional[DecodeOptions] = None) -> Value:
    """Strict mode: `data` must hold exactly one canonical item."""
    r = Reader(data, options)
    try:
        value = r.read_item()
        if not r.at_end():
            raise trailing_bytes(r.offset, r.buf.n)
    except DecodeError as e:
        log.debug("canonical decode rejected", extra={"code": e.code.value, "offset": e.offset})
        raise
    return value


def decode_sequence(data: BytesLike, options: Optional[DecodeOptions] = None) -> List[Value]:
    """Decode a concatenation of canonical items until the input is exhausted."""
    r = Reader(data, options)
    out: List[Value] = []
    while not r.at_end():
        out.append(r.read_item())
    return out


__all__ = [
    "DecodeOptions",
    "DEFAULT_OPTIONS",
    "Reader",
    "decode",
    "decode_exact",
    "decode_sequence",
]
