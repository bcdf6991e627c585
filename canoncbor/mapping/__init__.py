"""
canoncbor.mapping — typed views over canonical CBOR Values.

    from dataclasses import dataclass
    from canoncbor.mapping import record, field, U64, to_bytes, from_bytes

    @record
    @dataclass(frozen=True)
    class Account:
        nonce: U64
        label: str = field(default="", skip_if_default=True)

    blob = to_bytes(Account(nonce=1))
    assert from_bytes(Account, blob) == Account(nonce=1)
"""

from .api import from_bytes, from_value, to_bytes, to_value
from .codecs import (
    I8,
    I16,
    I32,
    I64,
    U8,
    U16,
    U32,
    U64,
    ByteLength,
    Codec,
    FixedBytes,
    IntRange,
)
from .derive import RecordCodec, SumCodec, record, sumtype, variant
from .fields import field
from .registry import codec_for, is_registered, register_codec

__all__ = [
    "record",
    "sumtype",
    "variant",
    "field",
    "to_value",
    "from_value",
    "to_bytes",
    "from_bytes",
    "register_codec",
    "is_registered",
    "codec_for",
    "Codec",
    "RecordCodec",
    "SumCodec",
    "IntRange",
    "ByteLength",
    "FixedBytes",
    "U8",
    "U16",
    "U32",
    "U64",
    "I8",
    "I16",
    "I32",
    "I64",
]
