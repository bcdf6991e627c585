"""
canoncbor — errors
------------------

One shared error vocabulary for the writer, the reader and the structural
mapping layer.

Design
------
- A root `CborError` with a machine-stable `code` (`CborErrorCode`), a human
  `message` and JSON-safe `data` (byte `offset`, field `path`, expected/actual
  type names, ...).
- `DecodeError` covers everything that can go wrong with *external* input:
  malformed or non-canonical bytes, and Values that do not fit the target
  native type. These are always recoverable.
- `EncodeError` is the fatal invariant-violation path of the writer and of
  native → Value conversion (duplicate map keys, over-deep Values, native
  values with no CBOR representation). It only fires on programming errors,
  never on untrusted input, and is deliberately *not* a `DecodeError` so that
  handlers for bad input do not swallow it.

Errors are immutable from the caller's point of view: `with_context()` and
`at_path()` return enriched copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class CborErrorCode(str, Enum):
    """Discriminated error kinds."""

    UNEXPECTED_TYPE = "UnexpectedType"
    NON_CANONICAL = "NonCanonicalEncoding"
    DUPLICATE_MAP_KEY = "DuplicateMapKey"
    UNKNOWN_FIELD = "UnknownField"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    INTEGER_OVERFLOW = "IntegerOverflow"
    DEPTH_EXCEEDED = "DepthExceeded"
    TRAILING_BYTES = "TrailingBytes"

    # Malformed input (not canonical-form violations, just broken bytes)
    TRUNCATED = "Truncated"
    INVALID_UTF8 = "InvalidUtf8"
    UNSUPPORTED = "Unsupported"  # floats, unassigned simple values, reserved AI, disallowed tags

    CUSTOM = "Custom"


PathSegment = Union[str, int]


@dataclass(eq=False)
class CborError(Exception):
    """
    Root error for canoncbor.

    Attributes
    ----------
    code: CborErrorCode
        Machine-stable error kind.
    message: str
        Human hint suitable for logs.
    data: dict
        Diagnostic context. Well-known keys: ``offset`` (byte offset into the
        input), ``path`` (dotted field path in the native structure),
        ``expected`` and ``actual``.
    cause: Optional[BaseException]
        Wrapped lower-level exception, if any.
    """

    code: CborErrorCode
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        super().__init__(f"{self.code.value}: {self.message}")

    # ---------------- Accessors ----------------

    @property
    def kind(self) -> CborErrorCode:
        return self.code

    @property
    def offset(self) -> Optional[int]:
        return self.data.get("offset")

    @property
    def path(self) -> Optional[str]:
        return self.data.get("path")

    # ---------------- Enrichment ----------------

    def with_context(self, **ctx: Any) -> "CborError":
        """Return a *new* error of the same type with extra context merged."""
        merged = dict(self.data)
        merged.update(ctx)
        return type(self)(code=self.code, message=self.message, data=merged, cause=self.cause)

    def at_path(self, segment: PathSegment) -> "CborError":
        """
        Prefix the error's field path with `segment` (a field name or an
        array index). Called while unwinding nested conversions, so the
        outermost segment is added last.
        """
        head = f"[{segment}]" if isinstance(segment, int) else str(segment)
        rest = self.path
        if not rest:
            joined = head
        elif rest.startswith("["):
            joined = head + rest
        else:
            joined = f"{head}.{rest}"
        return self.with_context(path=joined)

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs and CLI output."""
        out: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "data": dict(self.data),
        }
        if include_cause and self.cause is not None:
            out["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        return out

    def __str__(self) -> str:
        parts = [f"{self.code.value}: {self.message}"]
        if self.data:
            parts.append("[" + ", ".join(f"{k}={v!r}" for k, v in self.data.items()) + "]")
        return " ".join(parts)


class DecodeError(CborError):
    """Recoverable failure while decoding bytes or mapping a Value to a native type."""


class EncodeError(CborError):
    """Fatal invariant violation while building or writing a Value."""


# ---------------------------------------------------------------------------
# Constructors used across the package
# ---------------------------------------------------------------------------


def _ctx(extra: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in extra.items() if v is not None}


def unexpected_type(expected: str, actual: str, **ctx: Any) -> DecodeError:
    return DecodeError(
        CborErrorCode.UNEXPECTED_TYPE,
        f"expected {expected}, got {actual}",
        _ctx({"expected": expected, "actual": actual, **ctx}),
    )


def non_canonical(message: str, **ctx: Any) -> DecodeError:
    return DecodeError(CborErrorCode.NON_CANONICAL, message, _ctx(ctx))


def duplicate_map_key(**ctx: Any) -> DecodeError:
    return DecodeError(CborErrorCode.DUPLICATE_MAP_KEY, "duplicate map key", _ctx(ctx))


def unknown_field(name: Any, **ctx: Any) -> DecodeError:
    return DecodeError(CborErrorCode.UNKNOWN_FIELD, f"unknown field {name!r}", _ctx({"field": name, **ctx}))


def missing_field(name: Any, **ctx: Any) -> DecodeError:
    return DecodeError(
        CborErrorCode.MISSING_REQUIRED_FIELD,
        f"missing required field {name!r}",
        _ctx({"field": name, **ctx}),
    )


def integer_overflow(value: int, lo: int, hi: int, **ctx: Any) -> DecodeError:
    return DecodeError(
        CborErrorCode.INTEGER_OVERFLOW,
        f"integer {value} out of range [{lo}, {hi}]",
        _ctx({"value": value, "min": lo, "max": hi, **ctx}),
    )


def depth_exceeded(limit: int, **ctx: Any) -> DecodeError:
    return DecodeError(
        CborErrorCode.DEPTH_EXCEEDED,
        f"nesting deeper than {limit} levels",
        _ctx({"limit": limit, **ctx}),
    )


def trailing_bytes(consumed: int, total: int) -> DecodeError:
    return DecodeError(
        CborErrorCode.TRAILING_BYTES,
        f"{total - consumed} trailing byte(s) after top-level item",
        {"offset": consumed, "total": total},
    )


def custom(message: str, **ctx: Any) -> DecodeError:
    """Free-form decode error for user-registered codecs."""
    return DecodeError(CborErrorCode.CUSTOM, message, _ctx(ctx))


__all__ = [
    "CborErrorCode",
    "CborError",
    "DecodeError",
    "EncodeError",
    "unexpected_type",
    "non_canonical",
    "duplicate_map_key",
    "unknown_field",
    "missing_field",
    "integer_overflow",
    "depth_exceeded",
    "trailing_bytes",
    "custom",
]
