"""
joinsplit.transcript
====================

Fiat-Shamir transcript for join-split proofs.

The challenge must reproduce, bit for bit, the Keccak-256 hash an EVM
verifier computes, so this transcript is deliberately plain: it absorbs
32-byte big-endian words in order and squeezes `keccak256(words) mod r`.
There are no labels or length tags; the fixed word order of the proof
format is the only domain separation.

Challenge word order
--------------------
    sender (address, left-padded)
    public value (mod r)
    m
    gamma_x, gamma_y, sigma_x, sigma_y          for each note
    B_x, B_y                                    for each note

where B_i is the note's reconstructed blinding point. A blinding point at
infinity is absorbed as (0, 0).

Public API
----------
- Transcript()
- t.append_word(x) / t.append_scalar(x) / t.append_address(a) / t.append_g1(P)
- t.digest() -> bytes, t.challenge_scalar() -> int
- recompute_challenge(sender, public_value, m, notes, blinding_points) -> int
- commitment_digest(notes) -> bytes
- pairing_weights(notes) -> list[int]
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Union

from . import curve_bn254 as bn
from .hashing import int_to_word, keccak_256, keccak_int
from .types import NoteTuple, address_to_int

_FR = bn.GROUP_ORDER


class Transcript:
    """
    Keccak word transcript.

    Example:
        t = Transcript()
        t.append_address(sender)
        t.append_scalar(public_value)
        t.append_g1(B)
        c = t.challenge_scalar()
    """

    def __init__(self) -> None:
        self._words: List[bytes] = []

    def __len__(self) -> int:
        return len(self._words)

    # --- append methods ---

    def append_word(self, x: int) -> None:
        """Append an unsigned integer that fits in 256 bits."""
        self._words.append(int_to_word(x))

    def append_scalar(self, x: int) -> None:
        """Append a scalar reduced modulo r (negative values wrap)."""
        self._words.append(int_to_word(int(x) % _FR))

    def append_address(self, addr: Union[str, bytes, int]) -> None:
        self._words.append(int_to_word(address_to_int(addr)))

    def append_g1(self, P: Any) -> None:
        """Append affine coordinates of a G1 point; infinity becomes (0, 0)."""
        aff = P if isinstance(P, tuple) and len(P) == 2 else bn.to_affine(P)
        x, y = (0, 0) if aff is None else aff
        self._words.append(int_to_word(x))
        self._words.append(int_to_word(y))

    # --- output ---

    def digest(self) -> bytes:
        return keccak_256(b"".join(self._words))

    def challenge_scalar(self) -> int:
        return int.from_bytes(self.digest(), "big") % _FR


def recompute_challenge(
    sender: Union[str, bytes, int],
    public_value: int,
    m: int,
    notes: Sequence[NoteTuple],
    blinding_points: Sequence[Optional[Any]],
) -> int:
    """Hash the public transcript of a proof into its challenge scalar."""
    if len(blinding_points) != len(notes):
        raise ValueError("one blinding point per note is required")
    t = Transcript()
    t.append_address(sender)
    t.append_scalar(public_value)
    t.append_word(m)
    for note in notes:
        for w in note.commitment_words():
            t.append_word(w)
    for B in blinding_points:
        t.append_g1(B)
    return t.challenge_scalar()


def commitment_digest(notes: Sequence[NoteTuple]) -> bytes:
    """keccak256 over every note's (gamma_x, gamma_y, sigma_x, sigma_y)."""
    t = Transcript()
    for note in notes:
        for w in note.commitment_words():
            t.append_word(w)
    return t.digest()


def pairing_weights(notes: Sequence[NoteTuple]) -> List[int]:
    """
    Per-note weights for batching the trusted-setup relation.

    x_0 = keccak(all commitment coordinates) mod r and
    x_{i+1} = keccak(x_i) mod r. Every weight depends on every commitment.
    """
    out: List[int] = []
    x = int.from_bytes(commitment_digest(notes), "big") % _FR
    for _ in notes:
        out.append(x)
        x = keccak_int(int_to_word(x)) % _FR
    return out


__all__ = [
    "Transcript",
    "recompute_challenge",
    "commitment_digest",
    "pairing_weights",
]
