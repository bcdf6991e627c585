from __future__ import annotations

import io
import json
import logging

import pytest

from canoncbor import logging as clog
from canoncbor.errors import DecodeError
from canoncbor.reader import decode_exact


@pytest.fixture
def stream():
    return io.StringIO()


def test_json_lines_carry_context_and_extras(stream):
    clog.configure(json=True, level="DEBUG", stream=stream)
    clog.bind(command="check", input=b"\x01")
    clog.get_logger("canoncbor.test").info("hello", extra={"offset": 3})
    rec = json.loads(stream.getvalue().strip())
    assert rec["msg"] == "hello"
    assert rec["level"] == "INFO"
    assert rec["logger"] == "canoncbor.test"
    assert rec["command"] == "check"
    assert rec["input"] == "01"
    assert rec["offset"] == 3


def test_text_format(stream):
    clog.configure(json=False, level="INFO", stream=stream)
    clog.get_logger("canoncbor.test").warning("careful", extra={"code": "X"})
    line = stream.getvalue().strip()
    assert "| canoncbor.test |" in line
    assert "code=X" in line
    assert line.endswith("| careful")


def test_level_filtering(stream):
    clog.configure(json=True, level="WARNING", stream=stream)
    clog.get_logger("canoncbor.test").debug("hidden")
    assert stream.getvalue() == ""


def test_unknown_level_falls_back_to_warning(stream):
    clog.configure(json=True, level="chatty", stream=stream)
    assert logging.getLogger("canoncbor").level == logging.WARNING


def test_strict_decode_rejections_are_logged_at_debug(stream):
    clog.configure(json=True, level="DEBUG", stream=stream)
    with pytest.raises(DecodeError):
        decode_exact(b"\x01\x02")
    rec = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert rec["msg"] == "canonical decode rejected"
    assert rec["code"] == "TrailingBytes"
    assert rec["offset"] == 1


def test_with_fields_adapter(stream):
    clog.configure(json=True, level="INFO", stream=stream)
    log = clog.with_fields(clog.get_logger("canoncbor.test"), job="j1")
    log.info("step", extra={"n": 2})
    rec = json.loads(stream.getvalue().strip())
    assert rec["job"] == "j1"
    assert rec["n"] == 2


def test_bind_and_unbind():
    clog.clear_context()
    clog.bind(a=1, b=2)
    clog.unbind("a")
    assert clog.context() == {"b": 2}
    clog.clear_context()
    assert clog.context() == {}
