"""
joinsplit.tests helpers

Lightweight utilities and environment defaults shared by joinsplit tests.

Exports:
- word_hex(x) -> "0x..." 64-nibble word
- split_words(data) -> tuple of word ints
- env_flag(name, default=False) -> bool
- configure_test_logging() -> None

Environment toggles:
- JOINSPLIT_TEST_LOG=1    → enable DEBUG logging for joinsplit.*
"""

from __future__ import annotations

import logging
import os


def word_hex(x: int) -> str:
    """A 32-byte word as 0x-prefixed lower-case hex."""
    return "0x" + int(x).to_bytes(32, "big").hex()


def split_words(data: bytes) -> tuple:
    """A word-aligned buffer as a tuple of ints."""
    assert len(data) % 32 == 0, "buffer is not word aligned"
    return tuple(int.from_bytes(data[i : i + 32], "big") for i in range(0, len(data), 32))


# --- Env & logging -------------------------------------------------------------


def env_flag(name: str, default: bool = False) -> bool:
    """
    Read an environment flag in a truthy/falsey way: "1", "true", "yes" → True.
    """
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def configure_test_logging(level: int | None = None) -> None:
    """
    Configure basic logging for joinsplit.* loggers when JOINSPLIT_TEST_LOG is set.
    """
    if level is None:
        level = logging.DEBUG
    if env_flag("JOINSPLIT_TEST_LOG", False):
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logging.getLogger("joinsplit").setLevel(level)


# Enable logging if requested
configure_test_logging()

__all__ = [
    "word_hex",
    "split_words",
    "env_flag",
    "configure_test_logging",
]
