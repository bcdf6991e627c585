"""
canoncbor configuration loader.

Layered, with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (CANONCBOR_*)
    3) Built-in defaults (lowest)

Only applications call `load()` (the CLI does); the codec functions never
read the environment and always take their options explicitly.

Environment
-----------
    CANONCBOR_MAX_DEPTH       nesting limit for decoding (0..256, default 127)
    CANONCBOR_ALLOWED_TAGS    comma list of accepted tags ("" = no tags;
                              unset = any tag)
    CANONCBOR_ALLOW_UNKNOWN   accept unknown record fields (1/true/yes/on)
    CANONCBOR_LOG_LEVEL       DEBUG | INFO | WARNING | ERROR (default WARNING)
    CANONCBOR_LOG_FORMAT      json | text (default: text on a TTY, else json)
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from .constants import DEFAULT_MAX_DEPTH, MAX_DEPTH_CEILING, UINT64_MAX
from .reader import DecodeOptions

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _split_list(v: str) -> List[str]:
    return [s.strip() for s in v.split(",") if s.strip()]


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    v = env.get(name)
    if v is None or v == "":
        return default
    try:
        return int(v, 0)
    except ValueError as e:
        raise ValueError(f"{name} must be int, got {v!r}") from e


def _parse_tags(name: str, raw: str) -> FrozenSet[int]:
    tags = set()
    for item in _split_list(raw):
        try:
            tags.add(int(item, 0))
        except ValueError as e:
            raise ValueError(f"{name} must be a comma list of ints, got {raw!r}") from e
    return frozenset(tags)


@dataclass(frozen=True)
class Config:
    max_depth: int = DEFAULT_MAX_DEPTH
    allowed_tags: Optional[FrozenSet[int]] = None
    allow_unknown: bool = False
    log_level: str = "WARNING"
    log_format: Optional[str] = None  # "json" | "text" | None (auto)

    def decode_options(self) -> DecodeOptions:
        return DecodeOptions(max_depth=self.max_depth, allowed_tags=self.allowed_tags)

    def validate(self) -> None:
        if not 0 <= self.max_depth <= MAX_DEPTH_CEILING:
            raise ValueError(f"max_depth must be in 0..{MAX_DEPTH_CEILING}, got {self.max_depth}")
        if self.allowed_tags is not None:
            bad = [t for t in self.allowed_tags if not 0 <= t <= UINT64_MAX]
            if bad:
                raise ValueError(f"allowed_tags out of range: {sorted(bad)}")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got {self.log_level!r}")
        if self.log_format not in (None, "json", "text"):
            raise ValueError(f"log_format must be 'json' or 'text', got {self.log_format!r}")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if self.allowed_tags is not None:
            d["allowed_tags"] = sorted(self.allowed_tags)
        return d


def load(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> Config:
    """
    Build a Config. Precedence: overrides > env > defaults.

    Parameters
    ----------
    env : Mapping | None
        Environment to read (default: `os.environ`).
    overrides : Any
        Field overrides, e.g. load(max_depth=32, allowed_tags=[2, 3]).
    """
    env = os.environ if env is None else env
    base: Dict[str, Any] = asdict(Config())

    if "CANONCBOR_MAX_DEPTH" in env:
        base["max_depth"] = _env_int(env, "CANONCBOR_MAX_DEPTH", DEFAULT_MAX_DEPTH)
    if "CANONCBOR_ALLOWED_TAGS" in env:
        base["allowed_tags"] = _parse_tags("CANONCBOR_ALLOWED_TAGS", env["CANONCBOR_ALLOWED_TAGS"])
    if "CANONCBOR_ALLOW_UNKNOWN" in env:
        base["allow_unknown"] = _parse_bool(env["CANONCBOR_ALLOW_UNKNOWN"])
    if env.get("CANONCBOR_LOG_LEVEL"):
        base["log_level"] = env["CANONCBOR_LOG_LEVEL"].strip().upper()
    if env.get("CANONCBOR_LOG_FORMAT"):
        base["log_format"] = env["CANONCBOR_LOG_FORMAT"].strip().lower()

    unknown = set(overrides) - set(base)
    if unknown:
        raise TypeError(f"unknown config keys: {sorted(unknown)}")
    base.update(overrides)

    tags = base["allowed_tags"]
    cfg = Config(
        max_depth=int(base["max_depth"]),
        allowed_tags=None if tags is None else frozenset(int(t) for t in tags),
        allow_unknown=bool(base["allow_unknown"]),
        log_level=str(base["log_level"]).upper(),
        log_format=base["log_format"],
    )
    cfg.validate()
    return cfg


__all__ = ["Config", "load"]
