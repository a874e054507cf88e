"""
signatures.py: EIP-712 authorization of input notes.

Each input note carries a recoverable secp256k1 signature by its owner over
typed data binding the note commitment to this proof's challenge and
sender. The recovered signer becomes the note's owner in the output record.

Typed data
----------
    EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)
    AZTEC_NOTE_SIGNATURE(bytes32[4] note,uint256 challenge,address sender)

with note = (gamma_x, gamma_y, sigma_x, sigma_y). Per EIP-712 the fixed
array is encoded as keccak256 of its concatenated words, and the digest
that is signed is

    keccak256(0x19 0x01 || domainSeparator || hashStruct(message))

Public API
----------
- domain_separator(identity) -> bytes
- note_struct_hash(note, challenge, sender) -> bytes
- note_signature_digest(note, challenge, sender, identity) -> bytes
- recover_note_signer(note, challenge, sender, identity, signature) -> str
- verify(note, challenge, sender, identity, signature, expected_owner=None) -> bool

Notes
-----
- v must be 27 or 28; r and s must lie in [1, N) for the secp256k1 order N.
- Recovery uses py_ecc; addresses are keccak256(x || y)[12:] of the public key.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple, Union

from py_ecc.secp256k1.secp256k1 import N as SECP256K1_N
from py_ecc.secp256k1.secp256k1 import ecdsa_raw_recover

from .config import VerifierIdentity
from .errors import SignatureInvalid
from .hashing import int_to_word, keccak_256, keccak_words
from .types import NoteSignature, NoteTuple, address_to_int, normalize_address

log = logging.getLogger(__name__)

EIP712_DOMAIN_TYPE = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
NOTE_SIGNATURE_TYPE = "AZTEC_NOTE_SIGNATURE(bytes32[4] note,uint256 challenge,address sender)"

EIP712_DOMAIN_TYPEHASH = keccak_256(EIP712_DOMAIN_TYPE.encode("ascii"))
NOTE_SIGNATURE_TYPEHASH = keccak_256(NOTE_SIGNATURE_TYPE.encode("ascii"))

NoteLike = Union[NoteTuple, Sequence[int]]
SignatureLike = Union[NoteSignature, Tuple[int, int, int]]


def _commitment(note: NoteLike) -> Tuple[int, int, int, int]:
    if isinstance(note, NoteTuple):
        return note.commitment_words()
    words = tuple(int(w) for w in note)
    if len(words) != 4:
        raise ValueError("a note commitment has exactly four coordinates")
    return words  # type: ignore[return-value]


def domain_separator(identity: VerifierIdentity) -> bytes:
    """hashStruct(EIP712Domain) for the verifier identity."""
    return keccak_256(
        EIP712_DOMAIN_TYPEHASH
        + keccak_256(identity.name.encode("utf-8"))
        + keccak_256(identity.version.encode("utf-8"))
        + int_to_word(identity.chain_id)
        + int_to_word(address_to_int(identity.verifying_contract))
    )


def note_struct_hash(note: NoteLike, challenge: int, sender: Union[str, bytes, int]) -> bytes:
    """hashStruct(AZTEC_NOTE_SIGNATURE) for one note."""
    return keccak_256(
        NOTE_SIGNATURE_TYPEHASH
        + keccak_words(_commitment(note))
        + int_to_word(challenge)
        + int_to_word(address_to_int(sender))
    )


def note_signature_digest(
    note: NoteLike,
    challenge: int,
    sender: Union[str, bytes, int],
    identity: VerifierIdentity,
) -> bytes:
    """The 32-byte EIP-712 digest an input note's owner signs."""
    return keccak_256(
        b"\x19\x01" + domain_separator(identity) + note_struct_hash(note, challenge, sender)
    )


def public_key_to_address(pub: Tuple[int, int]) -> str:
    x, y = pub
    return normalize_address(keccak_256(int_to_word(x) + int_to_word(y))[12:])


def recover_note_signer(
    note: NoteLike,
    challenge: int,
    sender: Union[str, bytes, int],
    identity: VerifierIdentity,
    signature: SignatureLike,
    *,
    note_index: Optional[int] = None,
) -> str:
    """
    Recover the address that signed `note` for this challenge and sender.

    Raises SignatureInvalid when v is not 27/28, r or s is outside [1, N),
    or no public key can be recovered.
    """
    v, r, s = signature.as_words() if isinstance(signature, NoteSignature) else signature
    if v not in (27, 28):
        raise SignatureInvalid("recovery id must be 27 or 28", note_index=note_index, reason="bad_v")
    if not (1 <= r < SECP256K1_N) or not (1 <= s < SECP256K1_N):
        raise SignatureInvalid("r or s outside [1, N)", note_index=note_index, reason="bad_rs")

    digest = note_signature_digest(note, challenge, sender, identity)
    try:
        pub = ecdsa_raw_recover(digest, (v, r, s))
    except (ValueError, ZeroDivisionError) as e:
        raise SignatureInvalid("public key recovery failed", note_index=note_index, reason="recover", cause=e) from e
    if not pub or tuple(pub) == (0, 0):
        raise SignatureInvalid("public key recovery failed", note_index=note_index, reason="recover")

    signer = public_key_to_address((int(pub[0]), int(pub[1])))
    log.debug("note %s signed by %s", note_index, signer)
    return signer


def verify(
    note: NoteLike,
    challenge: int,
    sender: Union[str, bytes, int],
    identity: VerifierIdentity,
    signature: SignatureLike,
    expected_owner: Optional[Union[str, bytes, int]] = None,
) -> bool:
    """
    True if the signature recovers to a signer (and to `expected_owner`
    when one is given). Never raises for invalid signatures.
    """
    try:
        signer = recover_note_signer(note, challenge, sender, identity, signature)
    except SignatureInvalid:
        return False
    if expected_owner is None:
        return True
    return signer == normalize_address(expected_owner)


__all__ = [
    "EIP712_DOMAIN_TYPE",
    "NOTE_SIGNATURE_TYPE",
    "domain_separator",
    "note_struct_hash",
    "note_signature_digest",
    "public_key_to_address",
    "recover_note_signer",
    "verify",
]
