"""
Common helpers for the canoncbor test-suite.

    from canoncbor.tests import h, nest_arrays
"""

from __future__ import annotations

from canoncbor.values import Array, Unsigned, Value


def h(hexstr: str) -> bytes:
    """Hex (whitespace allowed) → bytes."""
    return bytes.fromhex("".join(hexstr.split()))


def nest_arrays(levels: int, leaf: Value = Unsigned(0)) -> Value:
    """`levels` single-item arrays wrapped around `leaf`, built without recursion."""
    v = leaf
    for _ in range(levels):
        v = Array((v,))
    return v


__all__ = ["h", "nest_arrays"]
