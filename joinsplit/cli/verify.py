#!/usr/bin/env python3
"""
joinsplit.cli.verify
====================

Verify a join-split proof file against a trusted setup and print the
resulting output record.

By default prints a human report; use --json for machine-readable output.
Exit code 0 means accepted, 1 rejected, 2 a usage problem (unreadable file,
bad address, missing or invalid trusted setup).

Examples:
  joinsplit verify proof.hex --sender 0x1234... --crs crs.json
  joinsplit verify proof.bin --sender 0x1234... --chain-id 5 --json
  JOINSPLIT_CRS_PATH=crs.json joinsplit verify proof.hex -s 0x1234...
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from ..config import get_config, load_crs
from ..errors import JoinSplitError
from ..serialization import bytes_to_hex, decode_output
from ..types import normalize_address
from ..validator import JoinSplitValidator
from .common import EXIT_REJECTED, configure_logging, die, notes_table, read_payload


def main(
    proof: Path = typer.Argument(..., help="Proof file (raw bytes or hex text)"),
    sender: str = typer.Option(..., "--sender", "-s", help="Address submitting the proof"),
    crs: Optional[Path] = typer.Option(
        None, "--crs", help="Trusted setup JSON (defaults to JOINSPLIT_CRS_PATH)"
    ),
    chain_id: Optional[int] = typer.Option(None, "--chain-id", help="EIP-712 chain id override"),
    verifier: Optional[str] = typer.Option(
        None, "--verifier", help="EIP-712 verifying contract override"
    ),
    owner: Optional[List[str]] = typer.Option(
        None, "--owner", help="Expected owner of each input note, in order (repeatable)"
    ),
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON result"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline stages"),
) -> None:
    """
    Verify a join-split proof and print its output record.
    """
    try:
        cfg = get_config()
    except ValueError as e:
        die(f"[verify] invalid configuration: {e}")
    configure_logging(verbose, cfg)

    try:
        sender_addr = normalize_address(sender)
        identity = cfg.identity.with_overrides(chain_id=chain_id, verifying_contract=verifier)
        identity.validate()
    except ValueError as e:
        die(f"[verify] {e}")

    crs_path = crs if crs is not None else cfg.crs_path
    if crs_path is None:
        die("[verify] no trusted setup: pass --crs or set JOINSPLIT_CRS_PATH")
    try:
        setup = load_crs(crs_path)
    except (ValueError, JoinSplitError) as e:
        die(f"[verify] {crs_path}: {e}")

    data = read_payload(proof)
    validator = JoinSplitValidator(identity, setup, max_notes=cfg.max_notes)
    result = validator.verify(data, sender_addr, input_owners=owner or None)

    if not result.ok:
        err = result.error
        if json_out:
            typer.echo(json.dumps({"ok": False, "file": str(proof), "error": err.to_dict() if err else None}))
        else:
            typer.echo(f"REJECTED {proof}: {err}")
        raise typer.Exit(EXIT_REJECTED)

    record = result.output or b""
    output = decode_output(record)
    if json_out:
        out = {
            "ok": True,
            "file": str(proof),
            "record": bytes_to_hex(record),
            "output": output.to_dict(),
        }
        typer.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    typer.echo(f"ACCEPTED {proof}")
    typer.echo(f"public owner: {output.public_owner}")
    typer.echo(f"public value: {output.public_value}")
    Console().print(notes_table(output))


if __name__ == "__main__":  # pragma: no cover
    typer.run(main)
