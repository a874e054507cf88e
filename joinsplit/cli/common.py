"""
Shared helpers for the joinsplit CLI commands.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich import box
from rich.table import Table

from ..config import ValidatorConfig, format_config
from ..serialization import hex_to_bytes, is_hex_str
from ..types import ProofOutput

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_USAGE = 2

log = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def die(msg: str, code: int = EXIT_USAGE) -> NoReturn:
    typer.echo(msg.rstrip(), err=True)
    raise typer.Exit(code)


def configure_logging(verbose: bool, cfg: Optional[ValidatorConfig] = None) -> None:
    if verbose:
        level = logging.DEBUG
    elif cfg is not None:
        level = cfg.log_level_value
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)
    if cfg is not None:
        log.debug("effective configuration:\n%s", format_config(cfg))


def read_payload(path: Path) -> bytes:
    """
    Read a proof or output record from disk.

    Files holding hex text (optionally 0x-prefixed, surrounding whitespace
    ignored) are decoded; anything else is taken as raw bytes.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        die(f"cannot read {path}: {e}")
    try:
        text = data.decode("ascii").strip()
    except UnicodeDecodeError:
        return data
    if text and is_hex_str(text):
        return hex_to_bytes(text)
    return data


def notes_table(output: ProofOutput) -> Table:
    t = Table(title="Notes", box=box.SIMPLE)
    t.add_column("#", justify="right")
    t.add_column("Side")
    t.add_column("Note hash")
    t.add_column("Owner")
    for i, note in enumerate(output.notes):
        side = "input" if i < output.m else "output"
        t.add_row(str(i), side, "0x" + note.note_hash.hex(), note.owner)
    return t
