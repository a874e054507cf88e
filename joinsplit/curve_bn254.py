"""
joinsplit.curve_bn254
=====================

BN254 (altbn128) curve arithmetic for join-split verification.

- Backend: `py_ecc.optimized_bn128` (projective coordinates).
- G1: y^2 = x^3 + 3 over Fp. G2: the sextic twist over Fp2.
- Commitments arrive as affine integer coordinates; `g1_from_coords`
  is the only way such coordinates become backend points, and it rejects
  anything outside the field, off the curve, or equal to the identity.

Public API
----------
- is_on_curve(P) / is_on_curve_g2(Q)
- g1_from_coords(x, y) / g2_from_coords((x_c0, x_c1), (y_c0, y_c1))
- to_affine(P) / to_affine_g2(Q)
- add(P, Q), neg(P), scalar_multiply(P, k), linear_combination(points, scalars)
- pair(P, Q), product_of_pairings(pairs), pairing_check(points_g1, points_g2)
- g1_generator(), g2_generator(), GROUP_ORDER, FIELD_MODULUS

Notes
-----
- Point ordering follows e(P, Q) with P in G1, Q in G2. The underlying
  `py_ecc` pairing call expects (Q, P); this wrapper handles it.
- Scalars are reduced modulo the group order before use.
- `scalar_multiply` is a Montgomery ladder: one add and one double per bit
  of the group order regardless of the scalar, so the operation sequence
  does not depend on the scalar. Pure Python gives no timing guarantees
  beyond that.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Tuple

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    FQ12,
    G1 as _G1,
    G2 as _G2,
    add as _add,
    b as _B,
    b2 as _B2,
    curve_order as _R,
    double as _double,
    field_modulus as _P,
    is_on_curve as _is_on_curve,
    neg as _neg,
    normalize as _normalize,
    pairing as _pairing,
)

from .errors import CurvePointInvalid

# Opaque projective tuples understood by py_ecc.
G1Point = Any
G2Point = Any
GTElement = FQ12

GROUP_ORDER: int = int(_R)
FIELD_MODULUS: int = int(_P)
CURVE_B: int = 3

_LADDER_BITS = GROUP_ORDER.bit_length()

__all__ = [
    "G1Point",
    "G2Point",
    "GROUP_ORDER",
    "FIELD_MODULUS",
    "curve_order",
    "field_modulus",
    "g1_generator",
    "g2_generator",
    "g1_infinity",
    "is_infinity",
    "is_on_curve",
    "is_on_curve_g2",
    "g1_from_coords",
    "g2_from_coords",
    "to_affine",
    "to_affine_g2",
    "points_equal",
    "add",
    "neg",
    "scalar_multiply",
    "linear_combination",
    "pair",
    "product_of_pairings",
    "pairing_check",
]


def curve_order() -> int:
    """Return the BN254 subgroup order r."""
    return GROUP_ORDER


def field_modulus() -> int:
    """Return the base field modulus p."""
    return FIELD_MODULUS


def g1_generator() -> G1Point:
    return _G1


def g2_generator() -> G2Point:
    return _G2


def g1_infinity() -> G1Point:
    return (FQ.one(), FQ.one(), FQ.zero())


def _infinity_like(P: Any) -> Any:
    return (P[0].one(), P[0].one(), P[0].zero())


def is_infinity(P: Any) -> bool:
    """True for `None` or a projective point with z == 0."""
    if P is None:
        return True
    return P[2] == P[2].zero()


# -------------------------
# Validation & conversion
# -------------------------

def _in_field(v: int) -> bool:
    return 0 <= v < FIELD_MODULUS


def is_on_curve(P: Any) -> bool:
    """
    Return True if P is a finite point on G1.

    P may be an affine `(x, y)` pair of ints or a backend point. The
    identity is *not* accepted: no commitment may be the point at infinity.
    """
    if isinstance(P, tuple) and len(P) == 2:
        x, y = int(P[0]), int(P[1])
        if not (_in_field(x) and _in_field(y)):
            return False
        return (y * y - x * x * x - CURVE_B) % FIELD_MODULUS == 0
    if is_infinity(P):
        return False
    return bool(_is_on_curve(P, _B))


def is_on_curve_g2(Q: G2Point) -> bool:
    """Return True if Q is a finite point on the G2 twist."""
    if is_infinity(Q):
        return False
    return bool(_is_on_curve(Q, _B2))


def g1_from_coords(
    x: int, y: int, *, note_index: Optional[int] = None, label: Optional[str] = None
) -> G1Point:
    """Build a G1 point from affine coordinates, or raise CurvePointInvalid."""
    if not is_on_curve((x, y)):
        raise CurvePointInvalid(
            "coordinates do not describe a finite BN254 G1 point",
            note_index=note_index,
            point=label,
            ctx={"x": hex(int(x)), "y": hex(int(y))},
        )
    return (FQ(x), FQ(y), FQ.one())


def g2_from_coords(xx: Sequence[int], yy: Sequence[int]) -> G2Point:
    """
    Build a G2 point from Fp2 coordinates `[c0, c1]` (value = c0 + c1 * i),
    or raise CurvePointInvalid.
    """
    limbs = [int(xx[0]), int(xx[1]), int(yy[0]), int(yy[1])]
    if not all(_in_field(v) for v in limbs):
        raise CurvePointInvalid("G2 coordinate outside the base field", point="t2")
    Q = (FQ2([limbs[0], limbs[1]]), FQ2([limbs[2], limbs[3]]), FQ2.one())
    if not is_on_curve_g2(Q):
        raise CurvePointInvalid("coordinates do not describe a BN254 G2 point", point="t2")
    return Q


def to_affine(P: G1Point) -> Optional[Tuple[int, int]]:
    """Normalize a G1 point to affine integers; None for the identity."""
    if is_infinity(P):
        return None
    ax, ay = _normalize(P)
    return int(ax.n), int(ay.n)


def _limb(c: Any) -> int:
    # optimized FQ2 keeps raw ints as coefficients; the reference backend keeps FQ
    return int(c.n) if hasattr(c, "n") else int(c)


def to_affine_g2(Q: G2Point) -> Optional[Tuple[Tuple[int, int], Tuple[int, int]]]:
    if is_infinity(Q):
        return None
    ax, ay = _normalize(Q)
    return (
        (_limb(ax.coeffs[0]), _limb(ax.coeffs[1])),
        (_limb(ay.coeffs[0]), _limb(ay.coeffs[1])),
    )


def points_equal(P: Any, Q: Any) -> bool:
    if is_infinity(P) or is_infinity(Q):
        return is_infinity(P) and is_infinity(Q)
    return _normalize(P) == _normalize(Q)


# -------------------------
# Group operations
# -------------------------

def add(P: Any, Q: Any) -> Any:
    return _add(P, Q)


def neg(P: Any) -> Any:
    return _neg(P)


def scalar_multiply(P: Any, k: int) -> Any:
    """k * P with k reduced modulo the group order (works for G1 and G2)."""
    k = int(k) % GROUP_ORDER
    r0 = _infinity_like(P)
    r1 = P
    for i in reversed(range(_LADDER_BITS)):
        if (k >> i) & 1:
            r0 = _add(r0, r1)
            r1 = _double(r1)
        else:
            r1 = _add(r0, r1)
            r0 = _double(r0)
    return r0


def linear_combination(points: Sequence[Any], scalars: Sequence[int]) -> G1Point:
    """sum_i scalars[i] * points[i]; the empty sum is the identity."""
    if len(points) != len(scalars):
        raise ValueError(f"{len(points)} points but {len(scalars)} scalars")
    acc = g1_infinity() if not points else _infinity_like(points[0])
    for P, s in zip(points, scalars):
        acc = _add(acc, scalar_multiply(P, s))
    return acc


# -------------------------
# Pairing
# -------------------------

def pair(P: G1Point, Q: G2Point) -> GTElement:
    """
    Compute the optimal Ate pairing e(P, Q).

    Pairings involving the identity return one in GT. Finite inputs must be
    on their curves; callers validate before pairing.
    """
    if is_infinity(P) or is_infinity(Q):
        return FQ12.one()
    if not bool(_is_on_curve(P, _B)):
        raise ValueError("G1 point is not on curve")
    if not bool(_is_on_curve(Q, _B2)):
        raise ValueError("G2 point is not on curve")
    # py_ecc pairing expects (Q, P)
    return _pairing(Q, P)


def product_of_pairings(pairs: Iterable[Tuple[G1Point, G2Point]]) -> GTElement:
    """Compute prod e(P_i, Q_i) over an iterable of (P_i, Q_i)."""
    acc = FQ12.one()
    for P, Q in pairs:
        acc *= pair(P, Q)
    return acc


def pairing_check(points_g1: Sequence[G1Point], points_g2: Sequence[G2Point]) -> bool:
    """Return True iff prod_i e(points_g1[i], points_g2[i]) == 1 in GT."""
    if len(points_g1) != len(points_g2):
        raise ValueError("pairing_check needs the same number of G1 and G2 points")
    return product_of_pairings(zip(points_g1, points_g2)) == FQ12.one()


if __name__ == "__main__":  # pragma: no cover
    P = g1_generator()
    Q = g2_generator()
    gt = pair(P, Q)
    print("order check:", (gt ** GROUP_ORDER) == FQ12.one())
    print("bilinear   :", pair(scalar_multiply(P, 2), Q) == gt * gt)
    print("product=1  :", pairing_check([P, neg(P)], [Q, Q]))
