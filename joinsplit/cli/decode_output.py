"""
joinsplit.cli.decode_output
===========================

Decode a canonical output record (as printed by `joinsplit verify --json`
under "record") back into notes, owners and the public value.
"""
from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from ..errors import MalformedProofData
from ..serialization import decode_output
from .common import EXIT_REJECTED, configure_logging, notes_table, read_payload


def main(
    record: Path = typer.Argument(..., help="Output record file (raw bytes or hex text)"),
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """
    Decode an output record.
    """
    configure_logging(verbose)
    data = read_payload(record)
    try:
        output = decode_output(data)
    except MalformedProofData as e:
        if json_out:
            typer.echo(json.dumps({"ok": False, "file": str(record), "error": e.to_dict()}))
        else:
            typer.echo(f"[decode-output] {record}: {e}", err=True)
        raise typer.Exit(EXIT_REJECTED)

    if json_out:
        typer.echo(json.dumps({"ok": True, "output": output.to_dict()}, indent=2, sort_keys=True))
        return

    typer.echo(f"inputs: {len(output.input_notes)}  outputs: {len(output.output_notes)}")
    typer.echo(f"public owner: {output.public_owner}")
    typer.echo(f"public value: {output.public_value}")
    Console().print(notes_table(output))
