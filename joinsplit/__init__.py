"""
joinsplit: confidential join-split proof verifier

Verifies that a bundle of BN254 note commitments balances

    sum(input values) == sum(output values) + public value

without learning any value, that every input note is authorized by an
EIP-712 signature of its owner, and that every note was built against the
supplied trusted setup. Accepted proofs yield a canonical output record.

Usage
-----
>>> from joinsplit import JoinSplitValidator, TrustedSetup, VerifierIdentity
>>> crs = TrustedSetup.from_json(open("crs.json").read())
>>> v = JoinSplitValidator(VerifierIdentity(chain_id=1), crs)
>>> res = v.verify(proof_bytes, sender)
>>> res.ok
True

Or the raising form:
>>> record = v.validate_join_split(proof_bytes, sender)
"""

from __future__ import annotations

from .config import ValidatorConfig, VerifierIdentity, get_config, load_crs
from .errors import (
    BalancingRelationFailed,
    ChallengeMismatch,
    CurvePointInvalid,
    JoinSplitError,
    JoinSplitErrorCode,
    MalformedProofData,
    SignatureInvalid,
    TrustedSetupMismatch,
)
from .serialization import decode_output, decode_proof, encode_output, encode_proof
from .types import (
    Note,
    NoteSignature,
    NoteTuple,
    ProofBundle,
    ProofOutput,
    TrustedSetup,
    VerificationResult,
)
from .validator import JoinSplitValidator, validate_join_split
from .version import __version__

__all__ = [
    "__version__",
    # validation
    "JoinSplitValidator",
    "validate_join_split",
    "VerificationResult",
    # config
    "VerifierIdentity",
    "ValidatorConfig",
    "get_config",
    "load_crs",
    # data model
    "TrustedSetup",
    "NoteTuple",
    "NoteSignature",
    "Note",
    "ProofBundle",
    "ProofOutput",
    # codec
    "decode_proof",
    "encode_proof",
    "encode_output",
    "decode_output",
    # errors
    "JoinSplitErrorCode",
    "JoinSplitError",
    "MalformedProofData",
    "CurvePointInvalid",
    "ChallengeMismatch",
    "SignatureInvalid",
    "BalancingRelationFailed",
    "TrustedSetupMismatch",
]
