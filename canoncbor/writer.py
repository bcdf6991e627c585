"""
canoncbor — writer
------------------

Canonical CBOR encoder. Serializes a `Value` to the one byte sequence that
represents it under these rules:

- every integer, length and count uses the shortest head (RFC 8949 §4.2.1);
- strings, arrays and maps are definite-length, never chunked;
- map entries are written in canonical key order: shorter encoded keys first,
  equal-length keys by bytewise comparison of their encodings. The caller's
  entry order is never trusted;
- a map may not contain two keys with the same encoding, and a Value may not
  nest deeper than the decoder accepts.

The last rule is an invariant of Value construction, not a property of input
data: breaking it raises the fatal `EncodeError`.

Public API:
- encode(value, *, max_depth=DEFAULT_MAX_DEPTH) -> bytes
- encode_head(major, argument) -> bytes
- canonical_key(encoded_key) -> sort key
"""

from __future__ import annotations

from typing import List, Tuple

from .constants import (
    AI_1_BYTE,
    AI_2_BYTES,
    AI_4_BYTES,
    AI_8_BYTES,
    DEFAULT_MAX_DEPTH,
    MAJOR_TYPE_SHIFT,
    MT_ARRAY,
    MT_BYTES,
    MT_MAP,
    MT_NEGATIVE,
    MT_SIMPLE,
    MT_TAG,
    MT_TEXT,
    MT_UNSIGNED,
    UINT64_MAX,
)
from .errors import CborErrorCode, EncodeError
from .values import Array, ByteString, Map, Negative, Simple, Tagged, TextString, Unsigned, Value

# ------------------------
# Low-level helpers
# ------------------------


def encode_head(major: int, n: int) -> bytes:
    """Initial byte + minimal-width argument for major type `major`."""
    if n < 24:
        return bytes([(major << MAJOR_TYPE_SHIFT) | n])
    if n <= 0xFF:
        return bytes([(major << MAJOR_TYPE_SHIFT) | AI_1_BYTE, n])
    if n <= 0xFFFF:
        return bytes([(major << MAJOR_TYPE_SHIFT) | AI_2_BYTES]) + n.to_bytes(2, "big")
    if n <= 0xFFFFFFFF:
        return bytes([(major << MAJOR_TYPE_SHIFT) | AI_4_BYTES]) + n.to_bytes(4, "big")
    if n <= UINT64_MAX:
        return bytes([(major << MAJOR_TYPE_SHIFT) | AI_8_BYTES]) + n.to_bytes(8, "big")
    raise OverflowError("argument too large for a CBOR head")


def canonical_key(encoded_key: bytes) -> Tuple[int, bytes]:
    """Sort key for canonical map ordering: length first, then bytewise."""
    return (len(encoded_key), encoded_key)


# ------------------------
# Writer
# ------------------------


class Writer:
    """Appends canonical encodings to a bytearray."""

    __slots__ = ("out", "max_depth")

    def __init__(self, out: bytearray | None = None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.out = out if out is not None else bytearray()
        self.max_depth = max_depth

    def write(self, value: Value, depth: int = 0) -> None:
        if depth > self.max_depth:
            raise EncodeError(
                CborErrorCode.DEPTH_EXCEEDED,
                f"value nests deeper than {self.max_depth} levels",
                {"limit": self.max_depth},
            )
        out = self.out
        if isinstance(value, Unsigned):
            out += encode_head(MT_UNSIGNED, value.value)
        elif isinstance(value, Negative):
            out += encode_head(MT_NEGATIVE, value.magnitude)
        elif isinstance(value, ByteString):
            out += encode_head(MT_BYTES, len(value.data))
            out += value.data
        elif isinstance(value, TextString):
            raw = value.text.encode("utf-8", "strict")
            out += encode_head(MT_TEXT, len(raw))
            out += raw
        elif isinstance(value, Array):
            out += encode_head(MT_ARRAY, len(value.items))
            for item in value.items:
                self.write(item, depth + 1)
        elif isinstance(value, Map):
            self._write_map(value, depth)
        elif isinstance(value, Tagged):
            out += encode_head(MT_TAG, value.tag)
            self.write(value.value, depth + 1)
        elif isinstance(value, Simple):
            out += encode_head(MT_SIMPLE, value.value)
        else:
            raise EncodeError(
                CborErrorCode.UNEXPECTED_TYPE,
                f"not a CBOR value: {type(value).__name__}",
                {"actual": type(value).__name__},
            )

    def _write_map(self, value: Map, depth: int) -> None:
        # Keys are encoded up front so they can be sorted on their bytes.
        encoded: List[Tuple[bytes, Value]] = []
        for k, v in value.entries:
            kw = Writer(max_depth=self.max_depth)
            kw.write(k, depth + 1)
            encoded.append((bytes(kw.out), v))
        encoded.sort(key=lambda kv: canonical_key(kv[0]))
        for i in range(1, len(encoded)):
            if encoded[i - 1][0] == encoded[i][0]:
                raise EncodeError(
                    CborErrorCode.DUPLICATE_MAP_KEY,
                    "duplicate map key in value",
                    {"key": encoded[i][0].hex()},
                )
        self.out += encode_head(MT_MAP, len(encoded))
        for k_enc, v in encoded:
            self.out += k_enc
            self.write(v, depth + 1)


def encode(value: Value, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """
    Encode `value` to canonical CBOR bytes.

    Never fails for well-formed Values; raises EncodeError for duplicate map
    keys or nesting beyond `max_depth`.
    """
    w = Writer(max_depth=max_depth)
    w.write(value)
    return bytes(w.out)


__all__ = ["encode", "encode_head", "canonical_key", "Writer"]
