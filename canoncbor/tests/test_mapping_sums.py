from dataclasses import dataclass
from typing import List, Optional

import pytest

from canoncbor.errors import CborErrorCode, DecodeError, EncodeError
from canoncbor.mapping import U32, field, from_bytes, from_value, record, sumtype, to_bytes, to_value, variant
from canoncbor.tests import h
from canoncbor.values import NULL, Array, Map, integer, text


@sumtype
class Shape:
    pass


@variant(Shape, "empty")
@dataclass(frozen=True)
class Empty(Shape):
    pass


@variant(Shape, "circle")
@dataclass(frozen=True)
class Circle(Shape):
    radius: U32


@variant(Shape, "rect", as_array=True)
@dataclass(frozen=True)
class Rect(Shape):
    w: U32
    h: U32


@variant(Shape, "id", newtype=True)
@dataclass(frozen=True)
class ShapeId(Shape):
    value: str


@sumtype
class Op:
    pass


@variant(Op, key=0)
@dataclass(frozen=True)
class Nop(Op):
    pass


@variant(Op, key=1)
@dataclass(frozen=True)
class Push(Op):
    arg: int


@record
@dataclass(frozen=True)
class Drawing:
    shapes: List[Shape]
    focus: Optional[Shape] = field(optional=True)


@pytest.mark.parametrize(
    "obj, hexstr",
    [
        (Empty(), "a1 65656d707479 f6"),
        (Circle(2), "a1 66636972636c65 a1 66726164697573 02"),
        (Rect(3, 4), "a1 6472656374 82 03 04"),
        (ShapeId("s1"), "a1 626964 627331"),
        (Nop(), "a1 00 f6"),
        (Push(-5), "a1 01 a1 63617267 24"),
    ],
)
def test_variant_wire_shapes(obj, hexstr):
    blob = to_bytes(obj)
    assert blob == h(hexstr)
    assert from_bytes(type(obj).__mro__[1], blob) == obj


def test_variant_class_decodes_through_the_sum():
    assert from_bytes(Circle, to_bytes(Circle(1))) == Circle(1)
    with pytest.raises(DecodeError) as ei:
        from_bytes(Circle, to_bytes(Empty()))
    assert ei.value.code is CborErrorCode.UNEXPECTED_TYPE


def test_sums_nested_in_records():
    d = Drawing(shapes=[Circle(1), Empty(), Rect(1, 2)], focus=ShapeId("c"))
    assert from_bytes(Drawing, to_bytes(d)) == d


def test_unknown_variant():
    with pytest.raises(DecodeError) as ei:
        from_value(Shape, Map(((text("triangle"), NULL),)))
    assert ei.value.code is CborErrorCode.UNKNOWN_FIELD
    assert ei.value.data["field"] == "triangle"


def test_sum_requires_single_entry_map():
    with pytest.raises(DecodeError) as ei:
        from_value(Shape, Map(()))
    assert ei.value.code is CborErrorCode.UNEXPECTED_TYPE
    with pytest.raises(DecodeError):
        from_value(Shape, Map(((text("empty"), NULL), (text("circle"), NULL))))
    with pytest.raises(DecodeError):
        from_value(Shape, text("empty"))


def test_unit_variant_payload_must_be_null():
    with pytest.raises(DecodeError) as ei:
        from_value(Shape, Map(((text("empty"), integer(0)),)))
    assert ei.value.code is CborErrorCode.UNEXPECTED_TYPE
    assert ei.value.path == "empty"


def test_payload_errors_are_prefixed_with_variant_name():
    v = Map(((text("circle"), Map(((text("radius"), integer(2**32)),))),))
    with pytest.raises(DecodeError) as ei:
        from_value(Shape, v)
    assert ei.value.code is CborErrorCode.INTEGER_OVERFLOW
    assert ei.value.path == "circle.radius"


def test_variant_payload_is_strict_about_unknown_fields():
    v = Map(((text("circle"), Map(((text("radius"), integer(2)), (text("x"), integer(0))))),))
    with pytest.raises(DecodeError) as ei:
        from_value(Shape, v)
    assert ei.value.code is CborErrorCode.UNKNOWN_FIELD
    assert from_value(Shape, v, allow_unknown=True) == Circle(2)


def test_encoding_a_non_variant_is_an_encode_error():
    with pytest.raises(EncodeError):
        to_value(object(), Shape)


def test_discriminants_must_be_unique():
    with pytest.raises(TypeError):

        @variant(Shape, "circle")
        @dataclass
        class Circle2(Shape):
            r: int


def test_variant_definition_errors():
    class Plain:
        pass

    with pytest.raises(TypeError):
        variant(Plain, "x")(dataclass(type("X", (Plain,), {})))

    with pytest.raises(TypeError):

        @variant(Op, key=9)
        @dataclass
        class NotAnOp:
            pass

    with pytest.raises(TypeError):

        @variant(Op, key=10, newtype=True)
        @dataclass
        class TwoFields(Op):
            a: int
            b: int


def test_sum_values_are_plain_maps():
    assert to_value(Rect(1, 2)) == Map(((text("rect"), Array((integer(1), integer(2)))),))
