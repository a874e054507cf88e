"""
joinsplit.hashing
=================

Keccak-256 (pre-standard SHA-3, as used by the EVM) and 32-byte word helpers.

Every digest in the join-split protocol (challenge, note hash, EIP-712
structs, signer addresses) is Keccak-256 over concatenated 32-byte
big-endian words, so the word encoders live next to the hash.

The provider is pycryptodome (`Crypto.Hash.keccak`). Note that
`hashlib.sha3_256` is *not* a substitute: FIPS-202 SHA3 uses different
padding and yields different digests.
"""

from __future__ import annotations

from typing import Iterable

from Crypto.Hash import keccak as _keccak

WORD_BYTES = 32
_WORD_MAX = 1 << (8 * WORD_BYTES)


def keccak_256(data: bytes | bytearray | memoryview) -> bytes:
    """Keccak-256 digest of `data`."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("keccak_256 expects bytes-like input")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def int_to_word(x: int) -> bytes:
    """Encode a non-negative integer as a 32-byte big-endian word."""
    x = int(x)
    if not (0 <= x < _WORD_MAX):
        raise ValueError("value does not fit in a 32-byte word")
    return x.to_bytes(WORD_BYTES, "big")


def word_to_int(b: bytes) -> int:
    if len(b) != WORD_BYTES:
        raise ValueError(f"expected {WORD_BYTES} bytes, got {len(b)}")
    return int.from_bytes(b, "big")


def keccak_words(words: Iterable[int]) -> bytes:
    """Keccak-256 over the concatenation of integers encoded as words."""
    return keccak_256(b"".join(int_to_word(w) for w in words))


def keccak_int(data: bytes) -> int:
    return int.from_bytes(keccak_256(data), "big")


__all__ = [
    "WORD_BYTES",
    "keccak_256",
    "keccak_words",
    "keccak_int",
    "int_to_word",
    "word_to_int",
]
