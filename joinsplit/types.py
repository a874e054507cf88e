"""
joinsplit.types
===============

Immutable data model for join-split proofs and their output records.

Everything here is built once (from proof bytes, a CRS file, or a test
builder) and consumed read-only by the verification pipeline, so the
dataclasses are frozen and safe to share across threads.

Conventions
-----------
- Field elements and curve coordinates are plain Python ints.
- Addresses are lowercase "0x"-prefixed 20-byte hex strings.
- The public value is a signed int. On the wire it is `v mod r`; words
  above `r // 2` decode to negative values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from . import curve_bn254 as bn
from .errors import JoinSplitError
from .hashing import keccak_words

Affine = Tuple[int, int]
AffineG2 = Tuple[Tuple[int, int], Tuple[int, int]]

ADDRESS_BYTES = 20
ZERO_ADDRESS = "0x" + "00" * ADDRESS_BYTES
_ADDRESS_MAX = 1 << (8 * ADDRESS_BYTES)


# ---------------------------
# Addresses & signed values
# ---------------------------

def normalize_address(addr: Union[str, bytes, int]) -> str:
    """Return `addr` as a lowercase 0x-prefixed 40-nibble string."""
    if isinstance(addr, int):
        if not (0 <= addr < _ADDRESS_MAX):
            raise ValueError("address integer out of range")
        return "0x" + addr.to_bytes(ADDRESS_BYTES, "big").hex()
    if isinstance(addr, (bytes, bytearray)):
        if len(addr) != ADDRESS_BYTES:
            raise ValueError(f"address must be {ADDRESS_BYTES} bytes, got {len(addr)}")
        return "0x" + bytes(addr).hex()
    if not isinstance(addr, str):
        raise TypeError(f"unsupported address type {type(addr).__name__}")
    s = addr.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    if len(s) != 2 * ADDRESS_BYTES:
        raise ValueError(f"address must have {2 * ADDRESS_BYTES} hex digits: {addr!r}")
    try:
        bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"address is not hex: {addr!r}") from e
    return "0x" + s.lower()


def address_to_int(addr: Union[str, bytes, int]) -> int:
    return int(normalize_address(addr), 16)


def encode_public_value(v: int) -> int:
    """Signed public value -> field word (`v mod r`)."""
    return int(v) % bn.GROUP_ORDER


def decode_public_value(word: int) -> int:
    """Field word -> signed public value; words above r // 2 are negative."""
    w = int(word) % bn.GROUP_ORDER
    return w - bn.GROUP_ORDER if w > bn.GROUP_ORDER // 2 else w


# ---------------------------
# Notes
# ---------------------------

@dataclass(frozen=True)
class NoteTuple:
    """One note as it appears in a proof: two responses plus gamma and sigma."""

    k_bar: int
    a_bar: int
    gamma_x: int
    gamma_y: int
    sigma_x: int
    sigma_y: int

    @property
    def gamma(self) -> Affine:
        return (self.gamma_x, self.gamma_y)

    @property
    def sigma(self) -> Affine:
        return (self.sigma_x, self.sigma_y)

    def commitment_words(self) -> Tuple[int, int, int, int]:
        return (self.gamma_x, self.gamma_y, self.sigma_x, self.sigma_y)

    def as_words(self) -> Tuple[int, int, int, int, int, int]:
        """Wire order."""
        return (self.k_bar, self.a_bar, self.gamma_x, self.gamma_y, self.sigma_x, self.sigma_y)

    @property
    def note_hash(self) -> bytes:
        return note_hash(self.commitment_words())


def note_hash(commitment: Sequence[int]) -> bytes:
    """keccak256(gamma_x || gamma_y || sigma_x || sigma_y)."""
    if len(commitment) != 4:
        raise ValueError("a note commitment has exactly four coordinates")
    return keccak_words(commitment)


@dataclass(frozen=True)
class NoteSignature:
    """Recoverable secp256k1 signature; v is 27 or 28 on valid input."""

    v: int
    r: int
    s: int

    def as_words(self) -> Tuple[int, int, int]:
        return (self.v, self.r, self.s)


@dataclass(frozen=True)
class Note:
    """A note as reported in the output record."""

    gamma: Affine
    sigma: Affine
    note_hash: bytes
    owner: str

    @classmethod
    def from_tuple(cls, t: NoteTuple, owner: str) -> "Note":
        return cls(gamma=t.gamma, sigma=t.sigma, note_hash=t.note_hash, owner=normalize_address(owner))

    def commitment_words(self) -> Tuple[int, int, int, int]:
        return (self.gamma[0], self.gamma[1], self.sigma[0], self.sigma[1])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gamma": [hex(self.gamma[0]), hex(self.gamma[1])],
            "sigma": [hex(self.sigma[0]), hex(self.sigma[1])],
            "noteHash": "0x" + self.note_hash.hex(),
            "owner": self.owner,
        }


# ---------------------------
# Proof bundle
# ---------------------------

@dataclass(frozen=True)
class ProofBundle:
    """
    A decoded join-split proof.

    `notes` holds the m input notes followed by the n - m output notes.
    There is one signature per input note and one owner per output note.
    """

    m: int
    notes: Tuple[NoteTuple, ...]
    challenge: int
    public_value: int
    public_owner: str
    signatures: Tuple[NoteSignature, ...] = ()
    output_owners: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        n = len(self.notes)
        if n < 1:
            raise ValueError("a proof needs at least one note")
        if not (0 <= self.m <= n):
            raise ValueError(f"input count m={self.m} outside 0..{n}")
        if len(self.signatures) != self.m:
            raise ValueError(f"expected {self.m} signatures, got {len(self.signatures)}")
        if len(self.output_owners) != n - self.m:
            raise ValueError(f"expected {n - self.m} output owners, got {len(self.output_owners)}")

    @property
    def n(self) -> int:
        return len(self.notes)

    @property
    def inputs(self) -> Tuple[NoteTuple, ...]:
        return self.notes[: self.m]

    @property
    def outputs(self) -> Tuple[NoteTuple, ...]:
        return self.notes[self.m :]


# ---------------------------
# Trusted setup
# ---------------------------

def _parse_int(v: Any) -> int:
    if isinstance(v, bool):
        raise TypeError("booleans are not field elements")
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        s = v.strip()
        return int(s, 16) if s.lower().startswith("0x") else int(s, 10)
    raise TypeError(f"cannot read an integer from {type(v).__name__}")


@dataclass(frozen=True)
class TrustedSetup:
    """
    Common reference string: `h` in G1 and `t2 = y * g2` in G2.

    Coordinates are validated on construction; CurvePointInvalid is raised
    for anything that is not a finite point of the right group.
    """

    h: Affine
    t2: AffineG2

    def __post_init__(self) -> None:
        self.h_point()
        self.t2_point()

    def h_point(self) -> bn.G1Point:
        return bn.g1_from_coords(self.h[0], self.h[1], label="h")

    def t2_point(self) -> bn.G2Point:
        return bn.g2_from_coords(self.t2[0], self.t2[1])

    @classmethod
    def from_ints(cls, hx: int, hy: int, t2_x: Sequence[int], t2_y: Sequence[int]) -> "TrustedSetup":
        return cls(
            h=(int(hx), int(hy)),
            t2=((int(t2_x[0]), int(t2_x[1])), (int(t2_y[0]), int(t2_y[1]))),
        )

    @classmethod
    def from_points(cls, h: bn.G1Point, t2: bn.G2Point) -> "TrustedSetup":
        h_aff = bn.to_affine(h)
        t2_aff = bn.to_affine_g2(t2)
        if h_aff is None or t2_aff is None:
            raise ValueError("trusted setup points must be finite")
        return cls(h=h_aff, t2=t2_aff)

    @classmethod
    def from_mapping(cls, d: Mapping[str, Any]) -> "TrustedSetup":
        """Accept {"h": [hx, hy], "t2": [[x_c0, x_c1], [y_c0, y_c1]]}."""
        try:
            h = d["h"]
            t2 = d["t2"]
            return cls.from_ints(
                _parse_int(h[0]),
                _parse_int(h[1]),
                [_parse_int(t2[0][0]), _parse_int(t2[0][1])],
                [_parse_int(t2[1][0]), _parse_int(t2[1][1])],
            )
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"malformed trusted setup: {e}") from e

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "TrustedSetup":
        return cls.from_mapping(json.loads(text))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "h": [hex(self.h[0]), hex(self.h[1])],
            "t2": [[hex(c) for c in self.t2[0]], [hex(c) for c in self.t2[1]]],
        }


# ---------------------------
# Output record & results
# ---------------------------

@dataclass(frozen=True)
class ProofOutput:
    """Canonical description of an accepted proof."""

    input_notes: Tuple[Note, ...]
    output_notes: Tuple[Note, ...]
    public_owner: str
    public_value: int

    @property
    def m(self) -> int:
        return len(self.input_notes)

    @property
    def notes(self) -> Tuple[Note, ...]:
        return self.input_notes + self.output_notes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputNotes": [nt.to_dict() for nt in self.input_notes],
            "outputNotes": [nt.to_dict() for nt in self.output_notes],
            "publicOwner": self.public_owner,
            "publicValue": self.public_value,
        }


@dataclass(slots=True, frozen=True)
class VerificationResult:
    """Tagged result: the output record on acceptance, the error otherwise."""

    ok: bool
    output: Optional[bytes] = None
    error: Optional[JoinSplitError] = field(default=None, compare=False)

    def __bool__(self) -> bool:  # allows: if result: ...
        return self.ok

    @property
    def message(self) -> Optional[str]:
        return None if self.error is None else self.error.msg

    @property
    def code(self) -> Optional[str]:
        return None if self.error is None else self.error.to_dict()["code"]


__all__ = [
    "ADDRESS_BYTES",
    "ZERO_ADDRESS",
    "normalize_address",
    "address_to_int",
    "encode_public_value",
    "decode_public_value",
    "NoteTuple",
    "NoteSignature",
    "Note",
    "note_hash",
    "ProofBundle",
    "TrustedSetup",
    "ProofOutput",
    "VerificationResult",
]
