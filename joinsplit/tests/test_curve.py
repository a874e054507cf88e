from __future__ import annotations

import pytest

from joinsplit import curve_bn254 as bn
from joinsplit.errors import CurvePointInvalid
from joinsplit.tests import configure_test_logging

from .builder import off_curve_point

configure_test_logging()

"""
BN254 arithmetic wrapper: point validation, the Montgomery ladder and the
pairing product check.
"""


def test_generator_is_on_curve():
    assert bn.is_on_curve((1, 2))
    assert bn.is_on_curve(bn.g1_generator())
    assert bn.is_on_curve_g2(bn.g2_generator())


@pytest.mark.parametrize(
    "x,y",
    [
        (0, 0),
        (1, 3),
        (1, 2 + bn.FIELD_MODULUS),
        (bn.FIELD_MODULUS + 1, 2),
        (-1, 2),
    ],
)
def test_rejects_invalid_coordinates(x, y):
    assert not bn.is_on_curve((x, y))
    with pytest.raises(CurvePointInvalid):
        bn.g1_from_coords(x, y)


def test_identity_is_not_a_valid_commitment():
    assert not bn.is_on_curve(bn.g1_infinity())


def test_curve_error_carries_note_index():
    x, y = off_curve_point(7)
    with pytest.raises(CurvePointInvalid) as ei:
        bn.g1_from_coords(x, y, note_index=3, label="sigma")
    assert ei.value.ctx["note_index"] == 3
    assert ei.value.ctx["point"] == "sigma"


def test_scalar_multiply_matches_repeated_addition():
    G = bn.g1_generator()
    acc = bn.g1_infinity()
    for k in range(1, 9):
        acc = bn.add(acc, G)
        assert bn.points_equal(bn.scalar_multiply(G, k), acc)


def test_scalar_multiply_reduces_modulo_group_order():
    G = bn.g1_generator()
    assert bn.is_infinity(bn.scalar_multiply(G, 0))
    assert bn.is_infinity(bn.scalar_multiply(G, bn.GROUP_ORDER))
    assert bn.points_equal(bn.scalar_multiply(G, bn.GROUP_ORDER + 5), bn.scalar_multiply(G, 5))
    assert bn.points_equal(bn.scalar_multiply(G, -1), bn.neg(G))


def test_scalar_multiply_works_on_g2():
    Q = bn.g2_generator()
    assert bn.points_equal(bn.scalar_multiply(Q, 3), bn.add(bn.add(Q, Q), Q))


def test_linear_combination():
    G = bn.g1_generator()
    P = bn.scalar_multiply(G, 11)
    out = bn.linear_combination([G, P], [2, 3])
    assert bn.points_equal(out, bn.scalar_multiply(G, 35))
    assert bn.is_infinity(bn.linear_combination([], []))
    with pytest.raises(ValueError):
        bn.linear_combination([G], [1, 2])


def test_affine_round_trip():
    P = bn.scalar_multiply(bn.g1_generator(), 12345)
    x, y = bn.to_affine(P)
    assert bn.points_equal(bn.g1_from_coords(x, y), P)
    assert bn.to_affine(bn.g1_infinity()) is None

    Q = bn.scalar_multiply(bn.g2_generator(), 99)
    xx, yy = bn.to_affine_g2(Q)
    assert bn.points_equal(bn.g2_from_coords(xx, yy), Q)


def test_g2_rejects_off_curve():
    (x0, x1), (y0, y1) = bn.to_affine_g2(bn.g2_generator())
    with pytest.raises(CurvePointInvalid):
        bn.g2_from_coords((x0, x1), (y0, (y1 + 1) % bn.FIELD_MODULUS))
    with pytest.raises(CurvePointInvalid):
        bn.g2_from_coords((x0, x1 + bn.FIELD_MODULUS), (y0, y1))


@pytest.mark.slow
def test_pairing_check_bilinearity():
    G1, G2 = bn.g1_generator(), bn.g2_generator()
    a, b = 6, 7
    aG1 = bn.scalar_multiply(G1, a)
    bG2 = bn.scalar_multiply(G2, b)
    abG1 = bn.scalar_multiply(G1, a * b)
    # e(aP, bQ) * e(-abP, Q) == 1
    assert bn.pairing_check([aG1, bn.neg(abG1)], [bG2, G2])
    assert not bn.pairing_check([aG1, bn.neg(abG1)], [G2, G2])


def test_pairing_check_with_identity_terms():
    assert bn.pairing_check([bn.g1_infinity()], [bn.g2_generator()])
    with pytest.raises(ValueError):
        bn.pairing_check([bn.g1_generator()], [])
