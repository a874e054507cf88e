"""
Typed exceptions for join-split verification.

Design goals
- Structured: machine-readable code + human message + contextual fields.
- Terminal: every failure aborts the single verification call; nothing is
  retried and no partial output is produced.
- Stable across processes: to_dict()/from_dict() round-trip.

The specific subtypes exported here are:
  - JoinSplitError (base)
  - MalformedProofData
  - CurvePointInvalid
  - ChallengeMismatch
  - SignatureInvalid
  - BalancingRelationFailed (TrustedSetupMismatch is an alias)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type


class JoinSplitErrorCode(str, Enum):
    """Canonical error codes for join-split decoding & verification."""

    UNKNOWN = "UNKNOWN"

    # Syntactic
    MALFORMED_PROOF_DATA = "MALFORMED_PROOF_DATA"  # bad length / offset / count

    # Semantic
    CURVE_POINT_INVALID = "CURVE_POINT_INVALID"  # commitment point not on BN254
    CHALLENGE_MISMATCH = "CHALLENGE_MISMATCH"  # Fiat-Shamir challenge differs
    SIGNATURE_INVALID = "SIGNATURE_INVALID"  # input note authorization bad
    BALANCING_RELATION_FAILED = "BALANCING_RELATION_FAILED"  # pairing check failed


@dataclass
class JoinSplitError(Exception):
    """
    Base structured error for joinsplit/.

    Fields:
      code:  stable machine code (JoinSplitErrorCode | str)
      msg:   human-readable summary
      ctx:   small dict of contextual fields (note index, hex words, counts)
      cause: optional underlying exception (not serialized)
    """

    code: JoinSplitErrorCode | str = JoinSplitErrorCode.UNKNOWN
    msg: str = "join-split verification failed"
    ctx: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if not isinstance(self.ctx, dict):
            self.ctx = {"_ctx_type_error": str(type(self.ctx)), "repr": repr(self.ctx)}

    def __str__(self) -> str:
        parts = [f"[{self.code.value if isinstance(self.code, Enum) else self.code}] {self.msg}"]
        if self.ctx:
            parts.append(f"ctx={self.ctx}")
        if self.cause:
            parts.append(f"cause={self.cause!r}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value if isinstance(self.code, Enum) else str(self.code),
            "msg": self.msg,
            "ctx": self.ctx,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "JoinSplitError":
        """Rebuild the most specific error type for a serialized error."""
        code_raw = d.get("code", JoinSplitErrorCode.UNKNOWN)
        try:
            code = JoinSplitErrorCode(code_raw)  # type: ignore[arg-type]
        except ValueError:
            return JoinSplitError(code=str(code_raw), msg=str(d.get("msg", "")), ctx=dict(d.get("ctx", {})))
        sub = _BY_CODE.get(code)
        msg = str(d.get("msg", "join-split verification failed"))
        ctx = dict(d.get("ctx", {}))
        if sub is None:
            return JoinSplitError(code=code, msg=msg, ctx=ctx)
        return sub(msg, ctx=ctx)


class MalformedProofData(JoinSplitError):
    """Structural decode failure: bad length, offset, count or padding."""

    def __init__(
        self,
        msg: str = "malformed proof data",
        *,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(code=JoinSplitErrorCode.MALFORMED_PROOF_DATA, msg=msg, ctx=dict(ctx or {}), cause=cause)


class CurvePointInvalid(JoinSplitError):
    """A commitment point is outside the field, off the curve, or the identity."""

    def __init__(
        self,
        msg: str = "point is not on the BN254 curve",
        *,
        note_index: Optional[int] = None,
        point: Optional[str] = None,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        base_ctx: Dict[str, Any] = {}
        if note_index is not None:
            base_ctx["note_index"] = note_index
        if point is not None:
            base_ctx["point"] = point
        if ctx:
            base_ctx.update(ctx)
        super().__init__(code=JoinSplitErrorCode.CURVE_POINT_INVALID, msg=msg, ctx=base_ctx, cause=cause)


class ChallengeMismatch(JoinSplitError):
    """The recomputed Fiat-Shamir challenge disagrees with the embedded one."""

    def __init__(
        self,
        msg: str = "challenge mismatch",
        *,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        base_ctx: Dict[str, Any] = {}
        if expected is not None:
            base_ctx["expected"] = hex(expected)
        if actual is not None:
            base_ctx["actual"] = hex(actual)
        if ctx:
            base_ctx.update(ctx)
        super().__init__(code=JoinSplitErrorCode.CHALLENGE_MISMATCH, msg=msg, ctx=base_ctx, cause=cause)


class SignatureInvalid(JoinSplitError):
    """An input note's authorization signature does not verify."""

    def __init__(
        self,
        msg: str = "input note signature invalid",
        *,
        note_index: Optional[int] = None,
        reason: Optional[str] = None,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        base_ctx: Dict[str, Any] = {}
        if note_index is not None:
            base_ctx["note_index"] = note_index
        if reason is not None:
            base_ctx["reason"] = reason
        if ctx:
            base_ctx.update(ctx)
        super().__init__(code=JoinSplitErrorCode.SIGNATURE_INVALID, msg=msg, ctx=base_ctx, cause=cause)


class BalancingRelationFailed(JoinSplitError):
    """
    The pairing-based relation over all commitments does not collapse to one.

    A trusted setup that differs from the one the notes were built against
    fails here too; the two cases cannot be told apart.
    """

    def __init__(
        self,
        msg: str = "balancing relation failed",
        *,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(code=JoinSplitErrorCode.BALANCING_RELATION_FAILED, msg=msg, ctx=dict(ctx or {}), cause=cause)


TrustedSetupMismatch = BalancingRelationFailed


_BY_CODE: Dict[JoinSplitErrorCode, Type[JoinSplitError]] = {
    JoinSplitErrorCode.MALFORMED_PROOF_DATA: MalformedProofData,
    JoinSplitErrorCode.CURVE_POINT_INVALID: CurvePointInvalid,
    JoinSplitErrorCode.CHALLENGE_MISMATCH: ChallengeMismatch,
    JoinSplitErrorCode.SIGNATURE_INVALID: SignatureInvalid,
    JoinSplitErrorCode.BALANCING_RELATION_FAILED: BalancingRelationFailed,
}


__all__ = [
    "JoinSplitErrorCode",
    "JoinSplitError",
    "MalformedProofData",
    "CurvePointInvalid",
    "ChallengeMismatch",
    "SignatureInvalid",
    "BalancingRelationFailed",
    "TrustedSetupMismatch",
]
