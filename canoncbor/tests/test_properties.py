"""
Property tests for the canonical codec:

- decode(encode(v)) == v for every Value
- encoding is idempotent through a decode round
- map entry order never reaches the wire
- any accepted byte string is the unique encoding of what it decodes to
"""

from __future__ import annotations

import pytest

pytest.importorskip("hypothesis")
from hypothesis import given, settings
from hypothesis import strategies as st

from canoncbor.constants import UINT64_MAX
from canoncbor.errors import DecodeError
from canoncbor.reader import decode, decode_exact
from canoncbor.values import (
    FALSE,
    NULL,
    TRUE,
    UNDEFINED,
    Array,
    ByteString,
    Map,
    Negative,
    Tagged,
    TextString,
    Unsigned,
    from_python,
    to_python,
)
from canoncbor.writer import encode

u64 = st.integers(min_value=0, max_value=UINT64_MAX)

scalars = st.one_of(
    u64.map(Unsigned),
    u64.map(Negative),
    st.binary(max_size=40).map(ByteString),
    st.text(max_size=20).map(TextString),
    st.sampled_from([FALSE, TRUE, NULL, UNDEFINED]),
)


def _containers(children):
    return st.one_of(
        st.lists(children, max_size=5).map(lambda xs: Array(tuple(xs))),
        st.dictionaries(children, children, max_size=5).map(lambda d: Map(tuple(d.items()))),
        st.tuples(u64, children).map(lambda t: Tagged(t[0], t[1])),
    )


values = st.recursive(scalars, _containers, max_leaves=30)


@given(values)
def test_roundtrip(v):
    assert decode_exact(encode(v)) == v


@given(values)
def test_encoding_is_idempotent(v):
    once = encode(v)
    assert encode(decode_exact(once)) == once


@given(st.dictionaries(scalars, values, max_size=8), st.randoms())
def test_map_entry_order_does_not_matter(d, rnd):
    entries = list(d.items())
    shuffled = entries[:]
    rnd.shuffle(shuffled)
    assert encode(Map(tuple(entries))) == encode(Map(tuple(shuffled)))


@given(values, st.binary(max_size=16))
def test_streaming_decode_stops_after_one_item(v, tail):
    blob = encode(v)
    got, used = decode(blob + tail)
    assert got == v
    assert used == len(blob)


@settings(max_examples=300)
@given(st.binary(max_size=64))
def test_accepted_bytes_are_the_unique_encoding(data):
    try:
        v = decode_exact(data)
    except DecodeError:
        return
    assert encode(v) == data


json_like = st.recursive(
    st.one_of(
        st.none(),
        st.booleans(),
        st.integers(min_value=-(UINT64_MAX + 1), max_value=UINT64_MAX),
        st.text(max_size=10),
        st.binary(max_size=10),
    ),
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.text(max_size=6), children, max_size=4),
    ),
    max_leaves=20,
)


@given(json_like)
def test_python_conversion_roundtrip(obj):
    assert to_python(decode_exact(encode(from_python(obj)))) == obj
