from __future__ import annotations

import pytest

from canoncbor.constants import UINT64_MAX
from canoncbor.errors import CborErrorCode, DecodeError, EncodeError
from canoncbor.values import (
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
    array,
    boolean,
    byte_string,
    cbor_map,
    from_python,
    integer,
    is_null,
    null,
    text,
    to_python,
    to_python_key,
)


@pytest.mark.parametrize(
    "n, expected",
    [
        (0, Unsigned(0)),
        (UINT64_MAX, Unsigned(UINT64_MAX)),
        (-1, Negative(0)),
        (-(UINT64_MAX + 1), Negative(UINT64_MAX)),
    ],
)
def test_integer_picks_variant(n, expected):
    v = integer(n)
    assert v == expected
    assert v.as_int() == n


@pytest.mark.parametrize("n", [UINT64_MAX + 1, -(UINT64_MAX + 2)])
def test_integer_out_of_range(n):
    with pytest.raises(OverflowError):
        integer(n)


def test_construction_validates():
    with pytest.raises(TypeError):
        Unsigned(True)
    with pytest.raises(TypeError):
        ByteString("abc")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        TextString(b"abc")  # type: ignore[arg-type]
    with pytest.raises(UnicodeEncodeError):
        TextString("\ud800")
    with pytest.raises(TypeError):
        Array((1, 2))  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        Map(((text("a"), 1),))  # type: ignore[arg-type]
    with pytest.raises(OverflowError):
        Tagged(UINT64_MAX + 1, NULL)
    for bad in (24, 31, 256, -1):
        with pytest.raises(ValueError):
            Simple(bad)


def test_bytes_like_are_normalized():
    assert ByteString(bytearray(b"ab")) == ByteString(b"ab")
    assert byte_string(memoryview(b"ab")).data == b"ab"


def test_map_equality_ignores_entry_order():
    a = cbor_map([(text("x"), integer(1)), (text("y"), integer(2))])
    b = cbor_map([(text("y"), integer(2)), (text("x"), integer(1))])
    assert a == b
    assert hash(a) == hash(b)
    assert a.get(text("y")) == integer(2)
    assert a.get(text("z")) is None


def test_variants_with_equal_payloads_differ():
    assert Unsigned(0) != Negative(0)
    assert ByteString(b"a") != TextString("a")
    assert Simple(22) == NULL


def test_type_names():
    assert integer(1).type_name == "unsigned integer"
    assert integer(-1).type_name == "negative integer"
    assert NULL.type_name == "null"
    assert TRUE.type_name == "bool"
    assert UNDEFINED.type_name == "undefined"
    assert array([]).type_name == "array"


def test_as_int_on_non_integer():
    with pytest.raises(TypeError):
        text("a").as_int()


def test_helpers():
    assert boolean(True) is TRUE
    assert boolean(False) is FALSE
    assert null() is NULL
    assert is_null(NULL)
    assert not is_null(FALSE)
    assert len(array([integer(1), integer(2)])) == 2


def test_from_python():
    v = from_python({"a": [1, -2, b"\x00", None, True], "b": "x"})
    assert v == Map(
        (
            (text("a"), Array((integer(1), integer(-2), ByteString(b"\x00"), NULL, TRUE))),
            (text("b"), text("x")),
        )
    )


def test_from_python_rejects_unrepresentable():
    with pytest.raises(EncodeError) as ei:
        from_python(1.5)
    assert ei.value.code is CborErrorCode.UNSUPPORTED
    with pytest.raises(EncodeError) as ei:
        from_python(2**64)
    assert ei.value.code is CborErrorCode.INTEGER_OVERFLOW


def test_to_python():
    v = Map(
        (
            (Array((integer(1), integer(2))), TRUE),
            (text("t"), Tagged(1, integer(0))),
            (text("u"), UNDEFINED),
        )
    )
    out = to_python(v)
    assert out[(1, 2)] is True
    assert out["t"] == Tagged(1, integer(0))
    assert out["u"] is UNDEFINED


def test_to_python_key_form():
    assert to_python_key(Array((integer(1), Array((integer(2),))))) == (1, (2,))
    m = Map(((integer(0), NULL),))
    assert to_python_key(m) is m


@pytest.mark.parametrize("int_key, bool_key", [(integer(1), TRUE), (integer(0), FALSE)])
def test_to_python_refuses_to_merge_int_and_bool_keys(int_key, bool_key):
    v = Map(((int_key, integer(0)), (bool_key, integer(1))))
    with pytest.raises(DecodeError) as ei:
        to_python(v)
    assert ei.value.code is CborErrorCode.DUPLICATE_MAP_KEY
    with pytest.raises(DecodeError):
        to_python(Map(((Array((int_key,)), NULL), (Array((bool_key,)), NULL))))
