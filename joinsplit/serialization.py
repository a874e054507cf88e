"""
joinsplit.serialization
=======================

Proof codec and hex/bytes helpers.

Proof layout (32-byte big-endian words)
---------------------------------------
    word 0          n, total note count
    word 1          m, input note count
    word 2          public value (mod r)
    word 3          challenge
    4 .. 4+6n       note tuples (k_bar, a_bar, gamma_x, gamma_y, sigma_x, sigma_y)
    next            public owner
    next 3m         input note signatures (v, r, s)
    next n-m        output note owners

The total length is therefore 32 * (5 + 7n + 2m). Addresses occupy the low
20 bytes of their word; the upper 12 bytes must be zero.

Output record layout
--------------------
    word 0          m
    6 words/note    gamma_x, gamma_y, sigma_x, sigma_y, note_hash, owner
    next            public owner
    next            public value (mod r)

Decoding is purely structural: no curve or signature checks happen here.
Counts are bounded and the byte length is checked before any per-note
parsing, so the work done is proportional to the declared note count.

Public API
----------
- is_hex_str(s, require_prefix=False, even=True) -> bool
- bytes_to_hex(b, prefix=True, lower=True) -> str
- hex_to_bytes(s, allow_0x=True, pad_odd_nibbles=False) -> bytes
- to_bytes(obj) -> bytes
- proof_length(n, m) -> int
- decode_proof(data, *, max_notes=64) -> ProofBundle
- encode_proof(bundle) -> bytes
- encode_output(output) -> bytes
- decode_output(data) -> ProofOutput
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Sequence, Union, overload

from . import curve_bn254 as bn
from .config import DEFAULT_MAX_NOTES
from .errors import MalformedProofData
from .hashing import WORD_BYTES, int_to_word
from .types import (
    ADDRESS_BYTES,
    Note,
    NoteSignature,
    NoteTuple,
    ProofBundle,
    ProofOutput,
    address_to_int,
    decode_public_value,
    encode_public_value,
    note_hash,
)

_HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]*$")

_HEADER_WORDS = 4
_NOTE_WORDS = 6
_SIG_WORDS = 3
_OUTPUT_NOTE_WORDS = 6
_ADDRESS_PAD = WORD_BYTES - ADDRESS_BYTES


# ---------------------------
# Hex helpers
# ---------------------------

def is_hex_str(s: str, *, require_prefix: bool = False, even: bool = True) -> bool:
    """
    Return True if `s` looks like a (possibly 0x-prefixed) hex string.

    This performs only lexical checks; it does not parse into bytes.
    """
    if not isinstance(s, str):
        return False
    if not _HEX_RE.match(s):
        return False
    has_prefix = s.startswith(("0x", "0X"))
    if require_prefix and not has_prefix:
        return False
    hex_part = s[2:] if has_prefix else s
    if even and (len(hex_part) % 2 != 0):
        return False
    return True


def bytes_to_hex(
    b: Union[bytes, bytearray, memoryview], *, prefix: bool = True, lower: bool = True
) -> str:
    """Encode bytes-like into lowercase hex with a '0x' prefix by default."""
    if isinstance(b, memoryview):
        b = b.tobytes()
    if not isinstance(b, (bytes, bytearray)):
        raise TypeError(f"bytes_to_hex: expected bytes-like, got {type(b).__name__}")
    h = b.hex()
    if not lower:
        h = h.upper()
    return ("0x" + h) if prefix else h


def hex_to_bytes(
    s: str,
    *,
    allow_0x: bool = True,
    pad_odd_nibbles: bool = False,
) -> bytes:
    """
    Decode a hex string into bytes.

    Raises
    ------
    ValueError if input is not valid hex per the constraints.
    """
    if not isinstance(s, str):
        raise TypeError(f"hex_to_bytes: expected str, got {type(s).__name__}")
    s = s.strip()
    if not _HEX_RE.match(s):
        raise ValueError("hex_to_bytes: non-hex characters present")
    has_prefix = s.startswith(("0x", "0X"))
    if has_prefix and not allow_0x:
        raise ValueError("hex_to_bytes: '0x' prefix not allowed")
    hex_part = s[2:] if has_prefix else s
    if len(hex_part) % 2 != 0:
        if pad_odd_nibbles:
            hex_part = "0" + hex_part
        else:
            raise ValueError("hex_to_bytes: odd number of hex nibbles")
    return bytes.fromhex(hex_part)


@overload
def to_bytes(obj: bytes | bytearray | memoryview) -> bytes: ...
@overload
def to_bytes(obj: str) -> bytes: ...
@overload
def to_bytes(obj: Iterable[int]) -> bytes: ...


def to_bytes(obj: Any) -> bytes:
    """
    Convert common byte-like inputs into raw bytes.

    Accepts bytes / bytearray / memoryview, hex strings (with or without
    '0x', even number of nibbles) and iterables of ints (0..255).
    """
    if isinstance(obj, bytes):
        return obj
    if isinstance(obj, bytearray):
        return bytes(obj)
    if isinstance(obj, memoryview):
        return obj.tobytes()
    if isinstance(obj, str):
        if not is_hex_str(obj.strip(), require_prefix=False, even=True):
            raise ValueError("to_bytes: string input must be hex (even-length)")
        return hex_to_bytes(obj)
    try:
        return bytes(obj)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise TypeError(f"to_bytes: unsupported input type {type(obj).__name__}") from e


# ---------------------------
# Word reader
# ---------------------------

class _Words:
    """Sequential 32-byte word reader over an already length-checked buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read(self) -> int:
        w = self._data[self._pos : self._pos + WORD_BYTES]
        self._pos += WORD_BYTES
        return int.from_bytes(w, "big")

    def read_address(self, what: str) -> str:
        start = self._pos
        w = self._data[start : start + WORD_BYTES]
        self._pos += WORD_BYTES
        if any(w[:_ADDRESS_PAD]):
            raise MalformedProofData(
                f"{what} has non-zero padding",
                ctx={"offset": start},
            )
        return "0x" + w[_ADDRESS_PAD:].hex()


def _as_bytes(data: Any) -> bytes:
    try:
        return to_bytes(data)
    except (TypeError, ValueError) as e:
        raise MalformedProofData("proof data is not bytes or hex", cause=e) from e


def proof_length(n: int, m: int) -> int:
    """Exact byte length of a proof with n notes of which m are inputs."""
    return WORD_BYTES * (_HEADER_WORDS + 1 + _NOTE_WORDS * n + _SIG_WORDS * m + (n - m))


# ---------------------------
# Proof codec
# ---------------------------

def decode_proof(data: Any, *, max_notes: int = DEFAULT_MAX_NOTES) -> ProofBundle:
    """
    Parse proof bytes into a ProofBundle.

    Raises MalformedProofData on any structural problem: length not a
    multiple of 32, missing header, n outside 1..max_notes, m > n, a length
    that disagrees with the counts, dirty address padding, or a public value
    word outside the scalar field.
    """
    raw = _as_bytes(data)
    if len(raw) % WORD_BYTES != 0:
        raise MalformedProofData("proof length is not a multiple of 32", ctx={"length": len(raw)})
    if len(raw) < _HEADER_WORDS * WORD_BYTES:
        raise MalformedProofData("proof shorter than its header", ctx={"length": len(raw)})

    words = _Words(raw)
    n = words.read()
    m = words.read()
    if not (1 <= n <= max_notes):
        raise MalformedProofData(
            "note count out of range",
            ctx={"n": n, "max_notes": max_notes},
        )
    if m > n:
        raise MalformedProofData("input count exceeds note count", ctx={"n": n, "m": m})
    expected = proof_length(n, m)
    if len(raw) != expected:
        raise MalformedProofData(
            "proof length does not match note counts",
            ctx={"n": n, "m": m, "length": len(raw), "expected": expected},
        )

    public_word = words.read()
    if public_word >= bn.GROUP_ORDER:
        raise MalformedProofData("public value is not reduced modulo the group order")
    challenge = words.read()

    notes: List[NoteTuple] = []
    for _ in range(n):
        notes.append(NoteTuple(*(words.read() for _ in range(_NOTE_WORDS))))

    public_owner = words.read_address("public owner")
    signatures = tuple(NoteSignature(words.read(), words.read(), words.read()) for _ in range(m))
    output_owners = tuple(words.read_address(f"owner of output note {m + j}") for j in range(n - m))

    return ProofBundle(
        m=m,
        notes=tuple(notes),
        challenge=challenge,
        public_value=decode_public_value(public_word),
        public_owner=public_owner,
        signatures=signatures,
        output_owners=output_owners,
    )


def encode_proof(bundle: ProofBundle) -> bytes:
    """Serialize a ProofBundle; the inverse of decode_proof."""
    out: List[bytes] = [
        int_to_word(bundle.n),
        int_to_word(bundle.m),
        int_to_word(encode_public_value(bundle.public_value)),
        int_to_word(bundle.challenge),
    ]
    for note in bundle.notes:
        out.extend(int_to_word(w) for w in note.as_words())
    out.append(int_to_word(address_to_int(bundle.public_owner)))
    for sig in bundle.signatures:
        out.extend(int_to_word(w) for w in sig.as_words())
    out.extend(int_to_word(address_to_int(o)) for o in bundle.output_owners)
    return b"".join(out)


# ---------------------------
# Output record
# ---------------------------

def _note_words(note: Note) -> Sequence[int]:
    return (*note.commitment_words(), int.from_bytes(note.note_hash, "big"), address_to_int(note.owner))


def encode_output(output: ProofOutput) -> bytes:
    """Serialize the canonical output record for an accepted proof."""
    out: List[bytes] = [int_to_word(output.m)]
    for note in output.notes:
        out.extend(int_to_word(w) for w in _note_words(note))
    out.append(int_to_word(address_to_int(output.public_owner)))
    out.append(int_to_word(encode_public_value(output.public_value)))
    return b"".join(out)


def decode_output(data: Any) -> ProofOutput:
    """
    Parse an output record. n is derived from the record length; each
    embedded note hash must match its commitment coordinates.
    """
    raw = _as_bytes(data)
    if len(raw) % WORD_BYTES != 0:
        raise MalformedProofData("record length is not a multiple of 32", ctx={"length": len(raw)})
    total = len(raw) // WORD_BYTES
    if total < 3 or (total - 3) % _OUTPUT_NOTE_WORDS != 0:
        raise MalformedProofData("record length does not describe whole notes", ctx={"words": total})
    n = (total - 3) // _OUTPUT_NOTE_WORDS

    words = _Words(raw)
    m = words.read()
    if m > n:
        raise MalformedProofData("input count exceeds note count", ctx={"n": n})

    notes: List[Note] = []
    for i in range(n):
        gx, gy, sx, sy = (words.read() for _ in range(4))
        h = int_to_word(words.read())
        if h != note_hash((gx, gy, sx, sy)):
            raise MalformedProofData("note hash does not match commitment", ctx={"note_index": i})
        owner = words.read_address(f"owner of note {i}")
        notes.append(Note(gamma=(gx, gy), sigma=(sx, sy), note_hash=h, owner=owner))

    public_owner = words.read_address("public owner")
    public_word = words.read()
    if public_word >= bn.GROUP_ORDER:
        raise MalformedProofData("public value is not reduced modulo the group order")

    return ProofOutput(
        input_notes=tuple(notes[:m]),
        output_notes=tuple(notes[m:]),
        public_owner=public_owner,
        public_value=decode_public_value(public_word),
    )


__all__ = [
    "is_hex_str",
    "bytes_to_hex",
    "hex_to_bytes",
    "to_bytes",
    "proof_length",
    "decode_proof",
    "encode_proof",
    "encode_output",
    "decode_output",
]
