"""
RFC 8949 §8 diagnostic notation for Values.

    >>> diag(cbor_map([(text("a"), array([integer(1), byte_string(b"\\x01")]))]))
    '{"a": [1, h\\'01\\']}'

Map entries are rendered in canonical order, so `diag(decode_exact(b))` and
`diag(v)` agree for any `v` that encodes to `b`.
"""

from __future__ import annotations

import json

from .values import Array, ByteString, Map, Negative, Simple, Tagged, TextString, Unsigned, Value
from .writer import canonical_key, encode

_SIMPLE_NAMES = {20: "false", 21: "true", 22: "null", 23: "undefined"}


def diag(value: Value) -> str:
    if isinstance(value, (Unsigned, Negative)):
        return str(value.as_int())
    if isinstance(value, ByteString):
        return f"h'{value.data.hex()}'"
    if isinstance(value, TextString):
        return json.dumps(value.text, ensure_ascii=False)
    if isinstance(value, Array):
        return "[" + ", ".join(diag(v) for v in value.items) + "]"
    if isinstance(value, Map):
        ordered = sorted(value.entries, key=lambda kv: canonical_key(encode(kv[0])))
        return "{" + ", ".join(f"{diag(k)}: {diag(v)}" for k, v in ordered) + "}"
    if isinstance(value, Tagged):
        return f"{value.tag}({diag(value.value)})"
    if isinstance(value, Simple):
        return _SIMPLE_NAMES.get(value.value, f"simple({value.value})")
    raise TypeError(f"not a Value: {type(value).__name__}")


__all__ = ["diag"]
