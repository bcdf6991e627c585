from __future__ import annotations

import pytest

from canoncbor.diagnostic import diag
from canoncbor.reader import decode_exact
from canoncbor.tests import h
from canoncbor.values import (
    FALSE,
    NULL,
    TRUE,
    UNDEFINED,
    Array,
    ByteString,
    Map,
    Simple,
    Tagged,
    integer,
    text,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (integer(0), "0"),
        (integer(-1000), "-1000"),
        (ByteString(h("01020304")), "h'01020304'"),
        (text("a\"b"), '"a\\"b"'),
        (text("水"), '"水"'),
        (Array((integer(1), Array(()))), "[1, []]"),
        (Tagged(1, integer(1363896240)), "1(1363896240)"),
        (FALSE, "false"),
        (TRUE, "true"),
        (NULL, "null"),
        (UNDEFINED, "undefined"),
        (Simple(16), "simple(16)"),
    ],
)
def test_diag(value, expected):
    assert diag(value) == expected


def test_map_entries_in_canonical_order():
    m = Map(((integer(1000), NULL), (text("a"), integer(1)), (integer(1), integer(2))))
    assert diag(m) == '{1: 2, "a": 1, 1000: null}'


def test_diag_of_decoded_bytes():
    assert diag(decode_exact(h("a26161016162820203"))) == '{"a": 1, "b": [2, 3]}'


def test_diag_rejects_non_values():
    with pytest.raises(TypeError):
        diag(1)  # type: ignore[arg-type]
