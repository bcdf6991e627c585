"""
Version helpers for canoncbor.

- Exposes __version__.
- Reads the installed distribution metadata; falls back to DEFAULT_VERSION
  when running from a source tree that was never installed.
"""

from __future__ import annotations

from importlib import metadata

DEFAULT_VERSION = "0.1.0"
DIST_NAME = "canoncbor"


def resolve_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return DEFAULT_VERSION


__version__ = resolve_version()

__all__ = ["__version__", "resolve_version", "DEFAULT_VERSION"]
