"""
joinsplit.cli
-------------
Command-line entrypoints for the join-split verifier:

- verify        : Verify a proof file against a trusted setup
- decode-output : Decode a canonical output record

Usage:
  joinsplit --help
  python -m joinsplit.cli verify -h
"""
from __future__ import annotations

import importlib
from typing import Optional

import click
import typer

from ..version import __version__, runtime_banner  # re-exported

__all__ = ["build_app", "main", "__version__"]

_COMMANDS = (
    ("joinsplit.cli.verify", "verify"),
    ("joinsplit.cli.decode_output", "decode-output"),
)


def _attach_command(app: typer.Typer, mod_name: str, name: str) -> None:
    mod = importlib.import_module(mod_name)
    main = getattr(mod, "main", None)
    if not callable(main):
        raise RuntimeError(f"CLI module '{mod_name}' does not define main()")
    app.command(name=name)(main)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(runtime_banner())
        raise typer.Exit(0)


def build_app() -> typer.Typer:
    """
    Build and return the root Typer app.
    """
    app = typer.Typer(
        name="joinsplit",
        help="Verify confidential join-split proofs",
        no_args_is_help=True,
        add_completion=False,
    )

    @app.callback()
    def _meta(
        version: bool = typer.Option(
            False,
            "--version",
            "-V",
            help="Print version and exit",
            callback=_print_version,
            is_eager=True,
        ),
    ) -> None:
        pass

    for mod_name, name in _COMMANDS:
        _attach_command(app, mod_name, name)
    return app


def main(argv: Optional[list[str]] = None) -> int:
    """
    Entrypoint for the `joinsplit` console script. Returns process exit code.
    """
    app = build_app()
    try:
        rv = app(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.exceptions.Abort:
        typer.echo("Aborted!", err=True)
        return 1
    return rv if isinstance(rv, int) else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
