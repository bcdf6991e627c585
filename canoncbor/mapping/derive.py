"""
canoncbor.mapping.derive
========================

Decorators that give dataclasses a fixed conversion pair, registered by type.

Records
-------
    @record
    @dataclass(frozen=True)
    class Transfer:
        to: FixedBytes(32)
        amount: U64
        memo: Optional[str] = field(optional=True)
        fee: U64 = field(default=0, skip_if_default=True)

A record is a canonical map keyed by field name (or `field(key=n)`). Entry
order on the wire is the canonical key order, never declaration order.
`as_array=True` switches to a positional array, `transparent=True` encodes a
single-field record as its inner value. Unknown keys are an error unless the
record (or the call) allows them.

Sum types
---------
    @sumtype
    class Shape: ...

    @variant(Shape, "circle")
    @dataclass
    class Circle(Shape):
        radius: U32

A variant travels as a single-entry map ``{discriminant: payload}``:

    no fields            → payload is null              {"empty": null}
    newtype=True         → payload is the one field     {"id": 7}
    otherwise            → payload is the field map     {"circle": {"radius": 2}}
                           (or array with as_array=True)

The discriminant is the variant name (text) or `key=n` (integer).
"""

from __future__ import annotations

import dataclasses
import typing
from typing import Any, Dict, Optional, Tuple, Type

from ..errors import (
    CborErrorCode,
    DecodeError,
    EncodeError,
    custom,
    missing_field,
    unexpected_type,
    unknown_field,
)
from ..values import NULL, Array, Map, Negative, TextString, Unsigned, Value, integer
from .codecs import Codec, OptionalCodec, ValueCodec, _encode_mismatch
from .fields import FieldDescriptor, field_options
from .registry import codec_for, register_codec, registered_codec, unwrap_optional

_SKIPPED = ValueCodec()


def _key_label(key: Value) -> Any:
    if isinstance(key, TextString):
        return key.text
    if isinstance(key, (Unsigned, Negative)):
        return key.as_int()
    return repr(key)


class RecordCodec(Codec):
    """Dataclass ↔ canonical map (or array / inner value)."""

    def __init__(
        self,
        cls: Type[Any],
        *,
        as_array: bool = False,
        transparent: bool = False,
        allow_unknown: bool = False,
    ) -> None:
        if as_array and transparent:
            raise TypeError(f"{cls.__qualname__}: as_array and transparent are mutually exclusive")
        self.cls = cls
        self.as_array = as_array
        self.transparent = transparent
        self.allow_unknown = allow_unknown
        self.type_name = cls.__qualname__
        self._fields: Optional[Tuple[FieldDescriptor, ...]] = None
        self._by_key: Dict[Value, FieldDescriptor] = {}

    # Built on first use so that forward references and self-referencing
    # records resolve once the whole module has been imported.
    @property
    def fields(self) -> Tuple[FieldDescriptor, ...]:
        if self._fields is None:
            fields = self._build_fields()
            self._by_key = {d.key: d for d in fields if not d.skip}
            self._fields = fields
        return self._fields

    @property
    def active(self) -> Tuple[FieldDescriptor, ...]:
        return tuple(d for d in self.fields if not d.skip)

    def _build_fields(self) -> Tuple[FieldDescriptor, ...]:
        hints = typing.get_type_hints(self.cls, include_extras=True)
        out = []
        for f in dataclasses.fields(self.cls):
            opts = field_options(f)
            if opts.skip:
                codec: Codec = _SKIPPED
            elif opts.codec is not None:
                codec = opts.codec
            else:
                hint = hints.get(f.name, Any)
                if opts.optional:
                    codec = OptionalCodec(codec_for(unwrap_optional(hint)))
                else:
                    codec = codec_for(hint)
            out.append(FieldDescriptor.from_field(f, codec))

        name = self.cls.__qualname__
        active = [d for d in out if not d.skip]
        seen: Dict[Value, str] = {}
        for d in active:
            if d.key in seen:
                raise TypeError(f"{name}: fields {seen[d.key]!r} and {d.attr!r} share wire key {d.label!r}")
            seen[d.key] = d.attr
        if self.as_array and any(d.optional or d.skip_if_default for d in active):
            raise TypeError(f"{name}: as_array records cannot omit fields (optional / skip_if_default)")
        if self.transparent and len(active) != 1:
            raise TypeError(f"{name}: transparent records need exactly one encoded field, got {len(active)}")
        return tuple(out)

    # ---------------- native → Value ----------------

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, self.cls):
            raise _encode_mismatch(self.type_name, obj)
        active = self.active
        if self.transparent:
            d = active[0]
            return self._encode_field(d, getattr(obj, d.attr))
        if self.as_array:
            return Array(tuple(self._encode_field(d, getattr(obj, d.attr)) for d in active))
        entries = []
        for d in active:
            v = getattr(obj, d.attr)
            if d.omitted(v):
                continue
            entries.append((d.key, self._encode_field(d, v)))
        return Map(tuple(entries))

    @staticmethod
    def _encode_field(d: FieldDescriptor, v: Any) -> Value:
        try:
            return d.codec.to_value(v)
        except EncodeError as e:
            raise e.at_path(d.label) from None

    # ---------------- Value → native ----------------

    def from_value(self, value: Value, allow_unknown: bool = False) -> Any:
        active = self.active
        kwargs: Dict[str, Any] = {}
        if self.transparent:
            d = active[0]
            kwargs[d.attr] = self._decode_field(d, value, allow_unknown)
        elif self.as_array:
            if not isinstance(value, Array):
                raise unexpected_type("array", value.type_name)
            if len(value.items) != len(active):
                raise unexpected_type(f"array of {len(active)} items", f"array of {len(value.items)} items")
            for d, item in zip(active, value.items):
                kwargs[d.attr] = self._decode_field(d, item, allow_unknown)
        else:
            if not isinstance(value, Map):
                raise unexpected_type("map", value.type_name)
            present = dict(value.entries)
            if not (allow_unknown or self.allow_unknown):
                for k in present:
                    if k not in self._by_key:
                        raise unknown_field(_key_label(k), record=self.type_name)
            for d in active:
                if d.key in present:
                    kwargs[d.attr] = self._decode_field(d, present[d.key], allow_unknown)
                elif d.optional:
                    kwargs[d.attr] = None
                elif d.skip_if_default:
                    kwargs[d.attr] = d.default_value()
                else:
                    raise missing_field(d.label, record=self.type_name)
        return self._construct({k: v for k, v in kwargs.items() if self._init_field(k)})

    def _init_field(self, attr: str) -> bool:
        for d in self.fields:
            if d.attr == attr:
                return d.init
        return False

    @staticmethod
    def _decode_field(d: FieldDescriptor, v: Value, allow_unknown: bool) -> Any:
        try:
            return d.codec.from_value(v, allow_unknown)
        except DecodeError as e:
            raise e.at_path(d.label) from None

    def _construct(self, kwargs: Dict[str, Any]) -> Any:
        try:
            return self.cls(**kwargs)
        except (TypeError, ValueError) as e:
            raise custom(f"cannot construct {self.type_name}: {e}", record=self.type_name) from e


# ---------------------------------------------------------------------------
# Sum types
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class VariantSpec:
    cls: type
    key: Value
    label: str
    body: RecordCodec
    unit: bool


class SumCodec(Codec):
    """Closed set of variants ↔ single-entry map {discriminant: payload}."""

    def __init__(self, base: type) -> None:
        self.base = base
        self.type_name = base.__qualname__
        self._by_cls: Dict[type, VariantSpec] = {}
        self._by_key: Dict[Value, VariantSpec] = {}

    @property
    def variants(self) -> Tuple[VariantSpec, ...]:
        return tuple(self._by_cls.values())

    def add(self, spec: VariantSpec) -> None:
        if spec.key in self._by_key:
            other = self._by_key[spec.key].cls.__qualname__
            raise TypeError(f"{self.type_name}: discriminant {spec.label!r} already used by {other}")
        self._by_cls[spec.cls] = spec
        self._by_key[spec.key] = spec

    def to_value(self, obj: Any) -> Value:
        spec = self._by_cls.get(type(obj))
        if spec is None:
            raise _encode_mismatch(f"variant of {self.type_name}", obj)
        if spec.unit:
            payload: Value = NULL
        else:
            try:
                payload = spec.body.to_value(obj)
            except EncodeError as e:
                raise e.at_path(spec.label) from None
        return Map(((spec.key, payload),))

    def from_value(self, value: Value, allow_unknown: bool = False) -> Any:
        if not isinstance(value, Map) or len(value.entries) != 1:
            actual = f"map of {len(value.entries)} entries" if isinstance(value, Map) else value.type_name
            raise unexpected_type(f"single-entry map ({self.type_name})", actual)
        key, payload = value.entries[0]
        spec = self._by_key.get(key)
        if spec is None:
            raise DecodeError(
                CborErrorCode.UNKNOWN_FIELD,
                f"unknown variant {_key_label(key)!r} of {self.type_name}",
                {"field": _key_label(key), "record": self.type_name},
            )
        if spec.unit:
            if payload != NULL:
                raise unexpected_type("null", payload.type_name).at_path(spec.label)
            return spec.body._construct({})
        try:
            return spec.body.from_value(payload, allow_unknown)
        except DecodeError as e:
            raise e.at_path(spec.label) from None


class VariantCodec(Codec):
    """Codec registered for a single variant class: encodes/decodes the whole sum shape."""

    def __init__(self, sum_codec: SumCodec, cls: type) -> None:
        self.sum_codec = sum_codec
        self.cls = cls
        self.type_name = cls.__qualname__

    def to_value(self, obj: Any) -> Value:
        if not isinstance(obj, self.cls):
            raise _encode_mismatch(self.type_name, obj)
        return self.sum_codec.to_value(obj)

    def from_value(self, value: Value, allow_unknown: bool = False) -> Any:
        out = self.sum_codec.from_value(value, allow_unknown)
        if not isinstance(out, self.cls):
            raise unexpected_type(self.type_name, type(out).__qualname__)
        return out


# ---------------------------------------------------------------------------
# Decorators
# ---------------------------------------------------------------------------


def record(
    cls: Optional[type] = None,
    *,
    as_array: bool = False,
    transparent: bool = False,
    allow_unknown: bool = False,
):
    """Register a dataclass as a record. Apply on top of `@dataclass`."""

    def wrap(c: type) -> type:
        if not dataclasses.is_dataclass(c):
            raise TypeError(f"@record needs a dataclass, got {c.__qualname__} (apply it above @dataclass)")
        register_codec(c, RecordCodec(c, as_array=as_array, transparent=transparent, allow_unknown=allow_unknown))
        return c

    return wrap if cls is None else wrap(cls)


def sumtype(cls: Optional[type] = None):
    """Register `cls` as the base of a sum type; add variants with `@variant(cls, ...)`."""

    def wrap(c: type) -> type:
        register_codec(c, SumCodec(c))
        return c

    return wrap if cls is None else wrap(cls)


def variant(
    base: type,
    name: Optional[str] = None,
    *,
    key: Optional[int] = None,
    newtype: bool = False,
    as_array: bool = False,
):
    """Register a dataclass subclass of a `@sumtype` base as one of its variants."""

    def wrap(c: type) -> type:
        sum_codec = registered_codec(base)
        if not isinstance(sum_codec, SumCodec):
            raise TypeError(f"{getattr(base, '__qualname__', base)!r} is not a @sumtype")
        if not (isinstance(c, type) and issubclass(c, base)):
            raise TypeError(f"variant {c!r} must subclass {base.__qualname__}")
        if not dataclasses.is_dataclass(c):
            raise TypeError(f"@variant needs a dataclass, got {c.__qualname__} (apply it above @dataclass)")
        if name is not None and key is not None:
            raise TypeError("@variant: name and key are mutually exclusive")
        if key is not None:
            disc: Value = integer(key)
            label = str(key)
        else:
            label = name or c.__name__
            disc = TextString(label)
        encoded = [f for f in dataclasses.fields(c) if not field_options(f).skip]
        if newtype and len(encoded) != 1:
            raise TypeError(f"{c.__qualname__}: newtype variants need exactly one field")
        body = RecordCodec(c, transparent=newtype, as_array=as_array)
        sum_codec.add(VariantSpec(cls=c, key=disc, label=label, body=body, unit=not encoded))
        register_codec(c, VariantCodec(sum_codec, c))
        return c

    return wrap


__all__ = ["record", "sumtype", "variant", "RecordCodec", "SumCodec", "VariantCodec", "VariantSpec"]
