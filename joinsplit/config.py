"""
Join-split verifier configuration.

This module defines the configuration surface of the verifier:
- The EIP-712 verifier identity (chain id, verifying contract, domain)
- Decode bounds (maximum note count per proof)
- Where to find the trusted setup (CRS) file
- Log level for the CLI

All fields have sensible defaults and can be overridden via environment
variables. Nothing here touches curve arithmetic until a CRS is loaded.

Environment variables (all optional):

  # Identity (EIP-712 domain)
  JOINSPLIT_CHAIN_ID=1
  JOINSPLIT_VERIFIER_ADDRESS=0x0000000000000000000000000000000000000000
  JOINSPLIT_DOMAIN_NAME=AZTEC_CRYPTOGRAPHY_ENGINE
  JOINSPLIT_DOMAIN_VERSION=1

  # Limits
  JOINSPLIT_MAX_NOTES=64                # notes per proof, inputs + outputs

  # Trusted setup
  JOINSPLIT_CRS_PATH=./crs.json         # {"h": [...], "t2": [[...], [...]]}

  # Logging
  JOINSPLIT_LOG_LEVEL=WARNING

"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

from .types import ZERO_ADDRESS, TrustedSetup, normalize_address

DEFAULT_DOMAIN_NAME = "AZTEC_CRYPTOGRAPHY_ENGINE"
DEFAULT_DOMAIN_VERSION = "1"
DEFAULT_MAX_NOTES = 64
# Hard ceiling; the decoder refuses to size work beyond it whatever the env says.
MAX_NOTES_CEILING = 4096

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


# ------------------------------- helpers ------------------------------------


def _getenv(key: str, default: str | None = None) -> str | None:
    v = os.environ.get(key)
    return v if v is not None and v.strip() != "" else default


def _getenv_int(key: str, default: int) -> int:
    v = _getenv(key)
    if v is None:
        return default
    base = 10
    vv = v.strip().lower()
    if vv.startswith("0x"):
        base = 16
    try:
        return int(v.strip(), base)
    except ValueError as e:
        raise ValueError(f"Invalid int for {key}: {v!r}") from e


# ------------------------------- config -------------------------------------


@dataclass(frozen=True)
class VerifierIdentity:
    """
    EIP-712 domain of the verifier.

    Signatures are bound to this domain, so a note signature produced for
    one chain or verifying contract does not verify against another.
    """
    chain_id: int = 1
    verifying_contract: str = ZERO_ADDRESS
    name: str = DEFAULT_DOMAIN_NAME
    version: str = DEFAULT_DOMAIN_VERSION

    def validate(self) -> None:
        if not (0 <= self.chain_id < (1 << 256)):
            raise ValueError("chain_id must fit in uint256")
        normalize_address(self.verifying_contract)
        if not self.name:
            raise ValueError("domain name must be non-empty")
        if not self.version:
            raise ValueError("domain version must be non-empty")

    def with_overrides(
        self, *, chain_id: Optional[int] = None, verifying_contract: Optional[str] = None
    ) -> "VerifierIdentity":
        return VerifierIdentity(
            chain_id=self.chain_id if chain_id is None else int(chain_id),
            verifying_contract=(
                self.verifying_contract
                if verifying_contract is None
                else normalize_address(verifying_contract)
            ),
            name=self.name,
            version=self.version,
        )


@dataclass(frozen=True)
class ValidatorConfig:
    """
    Top-level verifier configuration.

    - identity: EIP-712 domain used for note signatures
    - max_notes: upper bound on n accepted by the decoder
    - crs_path: optional JSON file holding the trusted setup
    - log_level: level name for `logging.basicConfig` in the CLI
    """
    identity: VerifierIdentity = field(default_factory=VerifierIdentity)
    max_notes: int = DEFAULT_MAX_NOTES
    crs_path: Optional[Path] = None
    log_level: str = "WARNING"

    def validate(self) -> None:
        self.identity.validate()
        if not (1 <= self.max_notes <= MAX_NOTES_CEILING):
            raise ValueError(f"max_notes must be in 1..{MAX_NOTES_CEILING}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper())

    def load_crs(self) -> Optional[TrustedSetup]:
        return None if self.crs_path is None else load_crs(self.crs_path)

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["crs_path"] = None if self.crs_path is None else str(self.crs_path)
        return d


def load_crs(path: Union[str, Path]) -> TrustedSetup:
    """Read a trusted setup JSON file; raises ValueError or CurvePointInvalid."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"cannot read trusted setup {p}: {e}") from e
    return TrustedSetup.from_json(text)


# ------------------------------- loader -------------------------------------


def _load_from_env() -> ValidatorConfig:
    # Identity
    identity = VerifierIdentity(
        chain_id=_getenv_int("JOINSPLIT_CHAIN_ID", 1),
        verifying_contract=normalize_address(_getenv("JOINSPLIT_VERIFIER_ADDRESS", ZERO_ADDRESS) or ZERO_ADDRESS),
        name=_getenv("JOINSPLIT_DOMAIN_NAME", DEFAULT_DOMAIN_NAME) or DEFAULT_DOMAIN_NAME,
        version=_getenv("JOINSPLIT_DOMAIN_VERSION", DEFAULT_DOMAIN_VERSION) or DEFAULT_DOMAIN_VERSION,
    )

    crs_raw = _getenv("JOINSPLIT_CRS_PATH")
    cfg = ValidatorConfig(
        identity=identity,
        max_notes=_getenv_int("JOINSPLIT_MAX_NOTES", DEFAULT_MAX_NOTES),
        crs_path=Path(crs_raw).expanduser() if crs_raw else None,
        log_level=(_getenv("JOINSPLIT_LOG_LEVEL", "WARNING") or "WARNING").upper(),
    )
    cfg.validate()
    return cfg


@lru_cache(maxsize=1)
def get_config() -> ValidatorConfig:
    """
    Load and validate configuration (cached). Clear the cache in tests
    via `get_config.cache_clear()` to observe env changes.
    """
    return _load_from_env()


# Pretty-print helper (useful in CLIs)
def format_config(cfg: ValidatorConfig | None = None) -> str:
    cfg = cfg or get_config()
    lines: List[str] = [
        f"identity.chain_id: {cfg.identity.chain_id}",
        f"identity.verifying_contract: {cfg.identity.verifying_contract}",
        f"identity.name: {cfg.identity.name}",
        f"identity.version: {cfg.identity.version}",
        f"max_notes: {cfg.max_notes}",
        f"crs_path: {cfg.crs_path if cfg.crs_path is not None else '-'}",
        f"log_level: {cfg.log_level}",
    ]
    return "\n".join(lines)


__all__ = [
    "DEFAULT_DOMAIN_NAME",
    "DEFAULT_DOMAIN_VERSION",
    "DEFAULT_MAX_NOTES",
    "MAX_NOTES_CEILING",
    "VerifierIdentity",
    "ValidatorConfig",
    "load_crs",
    "get_config",
    "format_config",
]
