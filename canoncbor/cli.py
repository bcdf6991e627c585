"""
canoncbor.cli
=============

Command line for inspecting and producing canonical CBOR.

    canoncbor encode '{"a": [1, 2], "b": "x"}'       → a2616182010261626178
    canoncbor decode a2616182010261626178            → {"a": [1, 2], "b": "x"}
    canoncbor decode --json a2616182010261626178
    canoncbor check 1800                             → NonCanonicalEncoding (exit 1)

Hex input may carry a 0x prefix and whitespace; "-" reads it from stdin.
Decode limits and logging come from CANONCBOR_* environment variables (see
canoncbor.config).
"""

from __future__ import annotations

import json
import sys
from typing import Any, Optional

import typer

from . import config as cconfig
from . import logging as clog
from .diagnostic import diag
from .errors import CborError
from .reader import decode_exact
from .values import Map, Simple, Tagged, Value, from_python, to_python
from .version import __version__
from .writer import encode

log = clog.get_logger(__name__)


def _die(msg: str, code: int = 2) -> None:
    typer.echo(msg.rstrip(), err=True)
    raise typer.Exit(code)


def _read_arg(arg: str) -> str:
    return sys.stdin.read() if arg == "-" else arg


def _parse_hex(arg: str) -> bytes:
    s = "".join(_read_arg(arg).split())
    if s[:2].lower() == "0x":
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        typer.echo(f"invalid hex input: {arg[:32]!r}", err=True)
        raise typer.Exit(2) from e


def _jsonable(x: Any) -> Any:
    if isinstance(x, bytes):
        return "0x" + x.hex()
    if isinstance(x, (list, tuple)):
        return [_jsonable(v) for v in x]
    if isinstance(x, dict):
        return {k if isinstance(k, str) else json.dumps(_jsonable(k)): _jsonable(v) for k, v in x.items()}
    if isinstance(x, Tagged):
        return {"tag": x.tag, "value": _jsonable(to_python(x.value))}
    if isinstance(x, Simple):
        return diag(x)
    if isinstance(x, Map):
        return diag(x)
    return x


def _fail(err: CborError, json_out: bool = False) -> None:
    log.debug("cli rejected input", extra={"code": err.code.value, "offset": err.offset})
    if json_out:
        typer.echo(json.dumps({"ok": False, "error": err.to_dict()}, sort_keys=True))
    else:
        typer.echo(err.code.value)
        typer.echo(str(err), err=True)
    raise typer.Exit(1)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"canoncbor {__version__}")
        raise typer.Exit(0)


def build_app() -> typer.Typer:
    app = typer.Typer(
        name="canoncbor",
        help="Encode, decode and check canonical CBOR",
        no_args_is_help=True,
        add_completion=False,
    )

    @app.callback()
    def _meta(
        ctx: typer.Context,
        version: bool = typer.Option(
            False, "--version", "-V", help="Print version and exit", callback=_print_version, is_eager=True
        ),
        max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Nesting limit (overrides CANONCBOR_MAX_DEPTH)"),
    ) -> None:
        overrides = {} if max_depth is None else {"max_depth": max_depth}
        try:
            cfg = cconfig.load(**overrides)
        except (ValueError, TypeError) as e:
            _die(f"config error: {e}")
            return
        json_logs = None if cfg.log_format is None else cfg.log_format == "json"
        clog.configure(json=json_logs, level=cfg.log_level, stream=sys.stderr)
        clog.bind(command=ctx.invoked_subcommand)
        ctx.obj = cfg

    @app.command("encode")
    def encode_cmd(
        document: str = typer.Argument(..., help="JSON document (or - for stdin)"),
    ) -> None:
        """Print the canonical encoding of a JSON document as hex."""
        try:
            obj = json.loads(_read_arg(document))
        except json.JSONDecodeError as e:
            _die(f"invalid JSON: {e}")
            return
        try:
            blob = encode(from_python(obj))
        except CborError as e:
            _fail(e)
            return
        typer.echo(blob.hex())

    @app.command("decode")
    def decode_cmd(
        ctx: typer.Context,
        data: str = typer.Argument(..., help="Hex-encoded CBOR (or - for stdin)"),
        json_out: bool = typer.Option(False, "--json", help="Print JSON instead of diagnostic notation"),
    ) -> None:
        """Strictly decode one item and print it."""
        raw = _parse_hex(data)
        try:
            value = decode_exact(raw, ctx.obj.decode_options())
        except CborError as e:
            _fail(e, json_out)
            return
        if json_out:
            typer.echo(json.dumps(_jsonable(to_python(value)), sort_keys=True))
        else:
            typer.echo(diag(value))

    @app.command("check")
    def check_cmd(
        ctx: typer.Context,
        data: str = typer.Argument(..., help="Hex-encoded CBOR (or - for stdin)"),
    ) -> None:
        """Exit 0 iff the input is the canonical encoding of exactly one item."""
        raw = _parse_hex(data)
        try:
            value: Value = decode_exact(raw, ctx.obj.decode_options())
        except CborError as e:
            _fail(e)
            return
        typer.echo(f"ok {value.type_name} ({len(raw)} bytes)")

    return app


app = build_app()


def main(argv: Optional[list[str]] = None) -> int:
    app(args=argv, prog_name="canoncbor")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
