"""
canoncbor.mapping.fields
========================

Per-field mapping metadata for records.

`field()` is a drop-in for `dataclasses.field()` that also records how the
field travels on the wire:

    rename="n"          text key other than the attribute name
    key=3               integer key instead of a text key
    optional=True       omitted when None; missing key decodes to None
    skip_if_default=True omitted when equal to the declared default;
                        missing key decodes to the default
    skip=True           never encoded; always decoded as the default
    codec=MyCodec()     explicit codec instead of the one derived from the hint

A record's `FieldDescriptor`s are built from these options plus the field's
type hint the first time the record is converted.
"""

from __future__ import annotations

import dataclasses
from dataclasses import MISSING, dataclass
from typing import Any, Optional

from ..values import TextString, Value, integer
from .codecs import Codec

_META_KEY = "canoncbor"


@dataclass(frozen=True)
class FieldOptions:
    rename: Optional[str] = None
    key: Optional[int] = None
    optional: bool = False
    skip_if_default: bool = False
    skip: bool = False
    codec: Optional[Codec] = None


_PLAIN = FieldOptions()


def field(
    *,
    rename: Optional[str] = None,
    key: Optional[int] = None,
    optional: bool = False,
    skip_if_default: bool = False,
    skip: bool = False,
    codec: Optional[Codec] = None,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    **kwargs: Any,
) -> Any:
    """`dataclasses.field()` plus wire options (see module docstring)."""
    if rename is not None and key is not None:
        raise TypeError("field(): rename= and key= are mutually exclusive")
    if key is not None and (isinstance(key, bool) or not isinstance(key, int)):
        raise TypeError("field(): key= must be an int")
    if optional:
        if default_factory is not MISSING or (default is not MISSING and default is not None):
            raise TypeError("field(): optional=True fields always default to None")
        default = None
    if (skip_if_default or skip) and default is MISSING and default_factory is MISSING:
        raise TypeError("field(): skip_if_default/skip need a default or default_factory")
    opts = FieldOptions(
        rename=rename,
        key=key,
        optional=optional,
        skip_if_default=skip_if_default,
        skip=skip,
        codec=codec,
    )
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_META_KEY] = opts
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata, **kwargs)


def field_options(f: dataclasses.Field) -> FieldOptions:
    return f.metadata.get(_META_KEY, _PLAIN)


@dataclass(frozen=True)
class FieldDescriptor:
    """
    How one record field maps to one map entry (or array slot).

    Descriptors hold conversion logic only, never runtime values.
    """

    attr: str
    key: Value
    label: str
    codec: Codec
    optional: bool = False
    skip_if_default: bool = False
    skip: bool = False
    init: bool = True
    default: Any = dataclasses.field(default_factory=lambda: MISSING)
    default_factory: Any = dataclasses.field(default_factory=lambda: MISSING)

    @classmethod
    def from_field(cls, f: dataclasses.Field, codec: Codec) -> "FieldDescriptor":
        opts = field_options(f)
        if opts.key is not None:
            wire_key: Value = integer(opts.key)
            label = str(opts.key)
        else:
            label = opts.rename or f.name
            wire_key = TextString(label)
        return cls(
            attr=f.name,
            key=wire_key,
            label=label,
            codec=opts.codec or codec,
            optional=opts.optional,
            skip_if_default=opts.skip_if_default,
            skip=opts.skip,
            init=f.init,
            default=f.default,
            default_factory=f.default_factory,
        )

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not MISSING

    def default_value(self) -> Any:
        if self.default is not MISSING:
            return self.default
        if self.default_factory is not MISSING:
            return self.default_factory()
        raise LookupError(f"field {self.attr!r} has no default")

    def omitted(self, value: Any) -> bool:
        """True when `value` is left out of the encoded map."""
        if self.skip:
            return True
        if self.optional and value is None:
            return True
        if self.skip_if_default and value == self.default_value():
            return True
        return False


__all__ = ["field", "field_options", "FieldOptions", "FieldDescriptor"]
