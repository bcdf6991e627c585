"""
canoncbor — constants
---------------------

Major types, additional-information codes, simple values and the normative
resource limits shared by the writer and the reader (RFC 8949 §3).
"""

from __future__ import annotations

# ------------------------
# Major types (high 3 bits)
# ------------------------

MT_UNSIGNED: int = 0
MT_NEGATIVE: int = 1
MT_BYTES: int = 2
MT_TEXT: int = 3
MT_ARRAY: int = 4
MT_MAP: int = 5
MT_TAG: int = 6
MT_SIMPLE: int = 7

MAJOR_TYPE_SHIFT: int = 5
AI_MASK: int = 0x1F

# ------------------------
# Additional information (low 5 bits)
# ------------------------

AI_1_BYTE: int = 24
AI_2_BYTES: int = 25
AI_4_BYTES: int = 26
AI_8_BYTES: int = 27
AI_INDEFINITE: int = 31

# Argument width → smallest value that actually needs it.
# Anything below the threshold is a non-minimal (non-canonical) head.
AI_MIN_VALUE = {
    AI_1_BYTE: 24,
    AI_2_BYTES: 0x100,
    AI_4_BYTES: 0x1_0000,
    AI_8_BYTES: 0x1_0000_0000,
}

AI_WIDTH = {
    AI_1_BYTE: 1,
    AI_2_BYTES: 2,
    AI_4_BYTES: 4,
    AI_8_BYTES: 8,
}

# ------------------------
# Simple values (major type 7)
# ------------------------

SIMPLE_FALSE: int = 20
SIMPLE_TRUE: int = 21
SIMPLE_NULL: int = 22
SIMPLE_UNDEFINED: int = 23

# Only these simple values are part of the canonical subset.
SUPPORTED_SIMPLE = frozenset({SIMPLE_FALSE, SIMPLE_TRUE, SIMPLE_NULL, SIMPLE_UNDEFINED})

# ------------------------
# Integer range
# ------------------------

UINT64_MAX: int = 2**64 - 1

# ------------------------
# Limits
# ------------------------

# Default maximum nesting of arrays/maps/tags (matches i8::MAX in the
# reference CBOR stack the wire format comes from).
DEFAULT_MAX_DEPTH: int = 127

# Hard ceiling for configurable depth: each level costs two interpreter frames.
MAX_DEPTH_CEILING: int = 256

# Well-known tags (RFC 8949 §3.4).
TAG_POS_BIGNUM: int = 2
TAG_NEG_BIGNUM: int = 3
