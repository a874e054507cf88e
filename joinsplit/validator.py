"""
Join-split validator.

A single linear pipeline; the first failing stage rejects the proof:

    decode -> curve points -> blinding points & challenge
           -> input note signatures -> trusted-setup pairing -> output record

When the recomputed challenge differs from the embedded one, the pairing
is evaluated before reporting: commitments that do not satisfy the
caller's trusted setup reject with TrustedSetupMismatch
(BalancingRelationFailed), everything else with ChallengeMismatch.

Behavior
--------
- `validate_join_split(...)` returns the canonical output record (bytes) on
  acceptance and raises exactly one JoinSplitError subclass otherwise.
- `verify(...)` is the tagged-result form: it never raises for validation
  failures and returns a VerificationResult.
- Nothing is retried and nothing is cached between calls: identical inputs
  always give identical verdicts.
- The validator holds only frozen configuration, so one instance may be
  shared across threads.

Known limitation
----------------
The public owner is bound by neither the challenge nor the input
signatures. It is copied into the output record as decoded, so anyone
relaying a valid proof can rewrite it. Callers that move public value
must authorize the public owner themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union

from .balance import PointPair, blinding_points, check_balance, commitment_points
from .config import DEFAULT_MAX_NOTES, MAX_NOTES_CEILING, ValidatorConfig, VerifierIdentity
from .errors import ChallengeMismatch, JoinSplitError, SignatureInvalid, TrustedSetupMismatch
from .serialization import decode_proof, encode_output
from .signatures import recover_note_signer
from .transcript import pairing_weights, recompute_challenge
from .types import Note, ProofBundle, ProofOutput, TrustedSetup, VerificationResult, normalize_address

log = logging.getLogger(__name__)

AddressLike = Union[str, bytes, int]


class JoinSplitValidator:
    """
    Verifies join-split proofs for one verifier identity.

    Example:
        v = JoinSplitValidator(VerifierIdentity(chain_id=1), crs)
        record = v.validate_join_split(proof_bytes, sender)
    """

    def __init__(
        self,
        identity: Optional[VerifierIdentity] = None,
        crs: Optional[TrustedSetup] = None,
        *,
        max_notes: int = DEFAULT_MAX_NOTES,
    ) -> None:
        self.identity = identity if identity is not None else VerifierIdentity()
        self.identity.validate()
        if not (1 <= max_notes <= MAX_NOTES_CEILING):
            raise ValueError(f"max_notes must be in 1..{MAX_NOTES_CEILING}")
        self.crs = crs
        self.max_notes = max_notes

    @classmethod
    def from_config(cls, cfg: ValidatorConfig) -> "JoinSplitValidator":
        return cls(cfg.identity, cfg.load_crs(), max_notes=cfg.max_notes)

    def _resolve_crs(self, crs: Optional[TrustedSetup]) -> TrustedSetup:
        if crs is not None:
            return crs
        if self.crs is None:
            raise ValueError("no trusted setup supplied or configured")
        return self.crs

    @staticmethod
    def _check_setup(bundle: ProofBundle, setup: TrustedSetup, points: Sequence[PointPair]) -> None:
        weights = pairing_weights(bundle.notes)
        if not check_balance(bundle.inputs, bundle.outputs, setup, weights=weights, points=points):
            raise TrustedSetupMismatch(ctx={"n": bundle.n, "m": bundle.m})

    # --- pipeline ---

    def _run(
        self,
        proof: Any,
        sender: AddressLike,
        crs: Optional[TrustedSetup],
        input_owners: Optional[Sequence[AddressLike]],
    ) -> ProofOutput:
        setup = self._resolve_crs(crs)
        sender_addr = normalize_address(sender)

        bundle = decode_proof(proof, max_notes=self.max_notes)
        log.debug("decoded proof: n=%d m=%d public_value=%d", bundle.n, bundle.m, bundle.public_value)

        points = commitment_points(bundle.notes)
        log.debug("all %d commitment points on curve", len(points))

        blinding = blinding_points(
            bundle.notes, bundle.m, bundle.challenge, bundle.public_value, setup, points=points
        )
        challenge = recompute_challenge(sender_addr, bundle.public_value, bundle.m, bundle.notes, blinding)
        if challenge != bundle.challenge:
            # h enters every blinding point, so a foreign setup also breaks the
            # challenge; the pairing tells the two apart.
            self._check_setup(bundle, setup, points)
            raise ChallengeMismatch(expected=bundle.challenge, actual=challenge)
        log.debug("challenge matches")

        if input_owners is not None and len(input_owners) != bundle.m:
            raise SignatureInvalid(
                f"expected {bundle.m} input owners, got {len(input_owners)}",
                reason="owner_count",
            )
        owners = []
        for i, (note, sig) in enumerate(zip(bundle.inputs, bundle.signatures)):
            signer = recover_note_signer(
                note, bundle.challenge, sender_addr, self.identity, sig, note_index=i
            )
            if input_owners is not None and signer != normalize_address(input_owners[i]):
                raise SignatureInvalid(
                    "signer is not the note owner",
                    note_index=i,
                    reason="owner_mismatch",
                    ctx={"signer": signer, "owner": normalize_address(input_owners[i])},
                )
            owners.append(signer)
        log.debug("%d input signatures verified", len(owners))

        self._check_setup(bundle, setup, points)

        return ProofOutput(
            input_notes=tuple(Note.from_tuple(t, o) for t, o in zip(bundle.inputs, owners)),
            output_notes=tuple(Note.from_tuple(t, o) for t, o in zip(bundle.outputs, bundle.output_owners)),
            public_owner=bundle.public_owner,
            public_value=bundle.public_value,
        )

    # --- public API ---

    def validate_join_split(
        self,
        proof: Any,
        sender: AddressLike,
        crs: Optional[TrustedSetup] = None,
        *,
        input_owners: Optional[Sequence[AddressLike]] = None,
    ) -> bytes:
        """
        Verify a proof and return its canonical output record.

        Raises MalformedProofData, CurvePointInvalid, ChallengeMismatch,
        SignatureInvalid or BalancingRelationFailed.
        """
        try:
            output = self._run(proof, sender, crs, input_owners)
        except JoinSplitError as e:
            log.info("join-split proof rejected: %s", e.to_dict()["code"])
            raise
        log.info(
            "join-split proof accepted: %d inputs, %d outputs",
            len(output.input_notes),
            len(output.output_notes),
        )
        return encode_output(output)

    def decode_verified(
        self,
        proof: Any,
        sender: AddressLike,
        crs: Optional[TrustedSetup] = None,
        *,
        input_owners: Optional[Sequence[AddressLike]] = None,
    ) -> ProofOutput:
        """Like validate_join_split, but return the structured ProofOutput."""
        return self._run(proof, sender, crs, input_owners)

    def verify(
        self,
        proof: Any,
        sender: AddressLike,
        crs: Optional[TrustedSetup] = None,
        *,
        input_owners: Optional[Sequence[AddressLike]] = None,
    ) -> VerificationResult:
        try:
            record = self.validate_join_split(proof, sender, crs, input_owners=input_owners)
        except JoinSplitError as e:
            return VerificationResult(ok=False, error=e)
        return VerificationResult(ok=True, output=record)


def validate_join_split(
    proof: Any,
    sender: AddressLike,
    crs: TrustedSetup,
    identity: Optional[VerifierIdentity] = None,
    *,
    max_notes: int = DEFAULT_MAX_NOTES,
) -> bytes:
    """Module-level convenience wrapper around JoinSplitValidator."""
    return JoinSplitValidator(identity, crs, max_notes=max_notes).validate_join_split(proof, sender)


__all__ = [
    "JoinSplitValidator",
    "validate_join_split",
]
