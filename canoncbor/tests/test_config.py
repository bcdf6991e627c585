from __future__ import annotations

import pytest

from canoncbor import config
from canoncbor.constants import DEFAULT_MAX_DEPTH
from canoncbor.reader import DecodeOptions


def test_defaults_without_environment():
    cfg = config.load(env={})
    assert cfg.max_depth == DEFAULT_MAX_DEPTH
    assert cfg.allowed_tags is None
    assert cfg.allow_unknown is False
    assert cfg.log_level == "WARNING"
    assert cfg.log_format is None
    assert cfg.decode_options() == DecodeOptions()


def test_environment_layer():
    env = {
        "CANONCBOR_MAX_DEPTH": "16",
        "CANONCBOR_ALLOWED_TAGS": "2, 3,0x20",
        "CANONCBOR_ALLOW_UNKNOWN": "yes",
        "CANONCBOR_LOG_LEVEL": "debug",
        "CANONCBOR_LOG_FORMAT": "JSON",
    }
    cfg = config.load(env=env)
    assert cfg.max_depth == 16
    assert cfg.allowed_tags == frozenset({2, 3, 32})
    assert cfg.allow_unknown is True
    assert cfg.log_level == "DEBUG"
    assert cfg.log_format == "json"
    assert cfg.decode_options() == DecodeOptions(max_depth=16, allowed_tags=frozenset({2, 3, 32}))


def test_empty_tag_list_means_no_tags():
    cfg = config.load(env={"CANONCBOR_ALLOWED_TAGS": ""})
    assert cfg.allowed_tags == frozenset()


def test_overrides_beat_environment():
    cfg = config.load(env={"CANONCBOR_MAX_DEPTH": "16"}, max_depth=8, allowed_tags=[1])
    assert cfg.max_depth == 8
    assert cfg.allowed_tags == frozenset({1})


def test_reads_process_environment_by_default(monkeypatch):
    monkeypatch.setenv("CANONCBOR_MAX_DEPTH", "5")
    assert config.load().max_depth == 5


@pytest.mark.parametrize(
    "env",
    [
        {"CANONCBOR_MAX_DEPTH": "deep"},
        {"CANONCBOR_MAX_DEPTH": "300"},
        {"CANONCBOR_ALLOWED_TAGS": "a,b"},
        {"CANONCBOR_LOG_LEVEL": "LOUD"},
        {"CANONCBOR_LOG_FORMAT": "xml"},
    ],
)
def test_invalid_environment(env):
    with pytest.raises(ValueError):
        config.load(env=env)


def test_unknown_override_key():
    with pytest.raises(TypeError):
        config.load(env={}, depth=3)


def test_to_dict():
    d = config.load(env={}, allowed_tags=[3, 1]).to_dict()
    assert d["allowed_tags"] == [1, 3]
    assert d["max_depth"] == DEFAULT_MAX_DEPTH
