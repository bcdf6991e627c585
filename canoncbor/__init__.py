"""
canoncbor — canonical (deterministic) CBOR for Python.

Every Value has exactly one byte encoding, and the decoder accepts only that
encoding. Layers:

- values      generic Value model (Unsigned, Negative, ByteString, ...)
- writer      Value → canonical bytes
- reader      canonical bytes → Value (strict and streaming modes)
- mapping     dataclass records and sum types ↔ Values
- bridge      adapter to the cbor2 object model

Quick start
-----------
    from canoncbor import encode, decode_exact, from_python

    blob = encode(from_python({"b": 2, "a": 1}))      # keys sorted canonically
    value = decode_exact(blob)                         # rejects any other form
"""

from .errors import CborError, CborErrorCode, DecodeError, EncodeError
from .mapping import (
    I8,
    I16,
    I32,
    I64,
    U8,
    U16,
    U32,
    U64,
    FixedBytes,
    field,
    from_bytes,
    from_value,
    record,
    register_codec,
    sumtype,
    to_bytes,
    to_value,
    variant,
)
from .reader import DecodeOptions, decode, decode_exact, decode_sequence
from .values import (
    FALSE,
    NULL,
    TRUE,
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
    from_python,
    integer,
    to_python,
)
from .version import __version__
from .writer import encode

__all__ = [
    "__version__",
    # codec
    "encode",
    "decode",
    "decode_exact",
    "decode_sequence",
    "DecodeOptions",
    # values
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
    "from_python",
    "to_python",
    # errors
    "CborError",
    "CborErrorCode",
    "DecodeError",
    "EncodeError",
    # mapping
    "record",
    "sumtype",
    "variant",
    "field",
    "to_value",
    "from_value",
    "to_bytes",
    "from_bytes",
    "register_codec",
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
