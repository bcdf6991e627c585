from __future__ import annotations

import json

import pytest

pytest.importorskip("typer")
from typer.testing import CliRunner

from canoncbor.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("CANONCBOR_MAX_DEPTH", "CANONCBOR_ALLOWED_TAGS", "CANONCBOR_LOG_FORMAT", "CANONCBOR_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_encode_sorts_keys():
    r = runner.invoke(app, ["encode", '{"b": [1, 2], "a": "x"}'])
    assert r.exit_code == 0, r.output
    assert r.stdout.strip() == "a2616161786162820102"


def test_encode_rejects_floats():
    r = runner.invoke(app, ["encode", "[1.5]"])
    assert r.exit_code == 1
    assert "Unsupported" in r.output


def test_encode_rejects_bad_json():
    r = runner.invoke(app, ["encode", "{"])
    assert r.exit_code == 2


def test_encode_reads_stdin():
    r = runner.invoke(app, ["encode", "-"], input="[true, null]")
    assert r.exit_code == 0, r.output
    assert r.stdout.strip() == "82f5f6"


def test_decode_prints_diagnostic_notation():
    r = runner.invoke(app, ["decode", "0xa2616161786162820102"])
    assert r.exit_code == 0, r.output
    assert r.stdout.strip() == '{"a": "x", "b": [1, 2]}'


def test_decode_json():
    r = runner.invoke(app, ["decode", "--json", "a2 6161 4101 6162 f5"])
    assert r.exit_code == 0, r.output
    assert json.loads(r.stdout) == {"a": "0x01", "b": True}


def test_decode_json_reports_errors():
    r = runner.invoke(app, ["decode", "--json", "1800"])
    assert r.exit_code == 1
    out = json.loads(r.stdout)
    assert out["ok"] is False
    assert out["error"]["code"] == "NonCanonicalEncoding"


def test_check_accepts_canonical_input():
    r = runner.invoke(app, ["check", "83010203"])
    assert r.exit_code == 0, r.output
    assert r.stdout.startswith("ok array")


@pytest.mark.parametrize(
    "hexstr, code",
    [
        ("1800", "NonCanonicalEncoding"),
        ("a2616201616102", "NonCanonicalEncoding"),
        ("a2616101616102", "DuplicateMapKey"),
        ("0102", "TrailingBytes"),
        ("9f01ff", "NonCanonicalEncoding"),
        ("81" * 200 + "00", "DepthExceeded"),
    ],
)
def test_check_reports_error_code(hexstr, code):
    r = runner.invoke(app, ["check", hexstr])
    assert r.exit_code == 1
    assert code in r.stdout


def test_max_depth_option_and_environment(monkeypatch):
    deep = "81" * 10 + "00"
    assert runner.invoke(app, ["check", deep]).exit_code == 0
    assert runner.invoke(app, ["--max-depth", "5", "check", deep]).exit_code == 1
    monkeypatch.setenv("CANONCBOR_MAX_DEPTH", "5")
    r = runner.invoke(app, ["check", deep])
    assert r.exit_code == 1
    assert "DepthExceeded" in r.stdout


def test_tag_whitelist_from_environment(monkeypatch):
    monkeypatch.setenv("CANONCBOR_ALLOWED_TAGS", "2")
    assert runner.invoke(app, ["check", "c24100"]).exit_code == 0
    r = runner.invoke(app, ["check", "c100"])
    assert r.exit_code == 1
    assert "Unsupported" in r.stdout


def test_invalid_hex():
    r = runner.invoke(app, ["check", "zz"])
    assert r.exit_code == 2


def test_bad_config_exits_2(monkeypatch):
    monkeypatch.setenv("CANONCBOR_MAX_DEPTH", "lots")
    r = runner.invoke(app, ["check", "00"])
    assert r.exit_code == 2


def test_version():
    r = runner.invoke(app, ["--version"])
    assert r.exit_code == 0
    assert r.stdout.startswith("canoncbor ")
