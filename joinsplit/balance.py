"""
joinsplit.balance
=================

Balancing relation for join-split proofs.

Each note commits to a value k and a viewing key a as a pair of G1 points

    gamma = h * (a / (y - k)),   sigma = k * gamma + a * h = y * gamma

for the trusted-setup secret y. A proof carries, per note, Schnorr-style
responses (k_bar, a_bar) to the Fiat-Shamir challenge c. The verifier
reconstructs each note's blinding point

    B_i = k_bar_i * gamma_i + a_bar_i * h - c * sigma_i

and the challenge is recomputed over those points.

Value conservation is enforced by not trusting the last note's k_bar. With
s_i = +1 for inputs and -1 for outputs, the verifier derives

    kn = sum(s_i * k_bar_i for i < n-1) - c * public_value
    k_bar_{n-1} = -s_{n-1} * kn

which is the only response consistent with sum(s_i * k_i) == public_value.
If the committed values do not balance, B_{n-1} comes out wrong and the
recomputed challenge differs from the embedded one.

The trusted-setup relation e(gamma_i, t2) == e(sigma_i, g2) ties every note
to y. All n relations are checked with one pairing product using random
weights w_i derived from the commitments (see transcript.pairing_weights):

    e(sum w_i * gamma_i, t2) * e(-sum w_i * sigma_i, g2) == 1
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from . import curve_bn254 as bn
from .types import NoteTuple, TrustedSetup

log = logging.getLogger(__name__)

_R = bn.GROUP_ORDER

PointPair = Tuple[bn.G1Point, bn.G1Point]


def note_signs(n: int, m: int) -> List[int]:
    """+1 for each of the m inputs, -1 for each of the n - m outputs."""
    return [1] * m + [-1] * (n - m)


def commitment_points(notes: Sequence[NoteTuple], *, offset: int = 0) -> List[PointPair]:
    """
    Validate every note's gamma and sigma and return them as G1 points.

    Raises CurvePointInvalid naming the first offending note.
    """
    out: List[PointPair] = []
    for i, note in enumerate(notes):
        idx = offset + i
        gamma = bn.g1_from_coords(note.gamma_x, note.gamma_y, note_index=idx, label="gamma")
        sigma = bn.g1_from_coords(note.sigma_x, note.sigma_y, note_index=idx, label="sigma")
        out.append((gamma, sigma))
    return out


def conservation_scalar(
    notes: Sequence[NoteTuple], m: int, challenge: int, public_value: int
) -> int:
    """kn = sum(s_i * k_bar_i for all but the last note) - challenge * public_value (mod r)."""
    if not notes:
        raise ValueError("at least one note is required")
    signs = note_signs(len(notes), m)
    acc = 0
    for s, note in zip(signs[:-1], notes[:-1]):
        acc += s * note.k_bar
    return (acc - challenge * public_value) % _R


def effective_k_bars(
    notes: Sequence[NoteTuple], m: int, challenge: int, public_value: int
) -> List[int]:
    """The k_bar responses actually used, with the last one derived from kn."""
    k = [note.k_bar % _R for note in notes]
    kn = conservation_scalar(notes, m, challenge, public_value)
    s_last = note_signs(len(notes), m)[-1]
    k[-1] = (-s_last * kn) % _R
    return k


def blinding_points(
    notes: Sequence[NoteTuple],
    m: int,
    challenge: int,
    public_value: int,
    crs: TrustedSetup,
    *,
    points: Optional[Sequence[PointPair]] = None,
) -> List[bn.G1Point]:
    """
    B_i = k_bar_i * gamma_i + a_bar_i * h - challenge * sigma_i for every note.

    `points` may carry already-validated commitment points; otherwise they
    are validated here.
    """
    if points is None:
        points = commitment_points(notes)
    if len(points) != len(notes):
        raise ValueError("one (gamma, sigma) pair per note is required")
    h = crs.h_point()
    k_bars = effective_k_bars(notes, m, challenge, public_value)
    c_neg = (-challenge) % _R

    out: List[bn.G1Point] = []
    for note, k_bar, (gamma, sigma) in zip(notes, k_bars, points):
        out.append(bn.linear_combination([gamma, h, sigma], [k_bar, note.a_bar, c_neg]))
    return out


def check_balance(
    input_notes: Sequence[NoteTuple],
    output_notes: Sequence[NoteTuple],
    crs: TrustedSetup,
    *,
    weights: Sequence[int],
    points: Optional[Sequence[PointPair]] = None,
) -> bool:
    """
    Batched trusted-setup check over all notes, inputs first.

    Returns True iff e(sum w_i gamma_i, t2) * e(-sum w_i sigma_i, g2) == 1.
    An empty side contributes the identity.
    """
    notes = list(input_notes) + list(output_notes)
    if len(weights) != len(notes):
        raise ValueError(f"{len(notes)} notes but {len(weights)} weights")
    if points is None:
        points = commitment_points(notes)

    gammas = [g for g, _ in points]
    sigmas = [s for _, s in points]
    gamma_acc = bn.linear_combination(gammas, weights)
    sigma_acc = bn.linear_combination(sigmas, weights)

    ok = bn.pairing_check(
        [gamma_acc, bn.neg(sigma_acc)],
        [crs.t2_point(), bn.g2_generator()],
    )
    log.debug("pairing product over %d notes: %s", len(notes), "one" if ok else "not one")
    return ok


__all__ = [
    "note_signs",
    "commitment_points",
    "conservation_scalar",
    "effective_k_bars",
    "blinding_points",
    "check_balance",
]
