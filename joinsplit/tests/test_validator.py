"""
End-to-end join-split validation.

Honest proofs are built with the test prover against a setup whose secret
is known, then verified; adversarial proofs are honest ones with one thing
changed. Each rejection must surface as the error of the first failing
pipeline stage.
"""

from __future__ import annotations

import dataclasses
import random

import pytest

from joinsplit import curve_bn254 as bn
from joinsplit import validate_join_split
from joinsplit.errors import (
    BalancingRelationFailed,
    ChallengeMismatch,
    CurvePointInvalid,
    JoinSplitErrorCode,
    MalformedProofData,
    SignatureInvalid,
    TrustedSetupMismatch,
)
from joinsplit.serialization import decode_output, encode_proof
from joinsplit.tests import configure_test_logging
from joinsplit.transcript import recompute_challenge
from joinsplit.types import NoteSignature, NoteTuple, ProofBundle, ProofOutput, TrustedSetup
from joinsplit.validator import JoinSplitValidator

from .builder import (
    IDENTITY,
    PUBLIC_OWNER,
    R,
    SENDER,
    build_proof,
    make_account,
    make_setup,
    off_curve_point,
    replace_note,
    sign_note,
)

configure_test_logging()


def _check_output(record: bytes, built, public_value: int) -> ProofOutput:
    out = decode_output(record)
    assert len(out.input_notes) == len(built.inputs)
    assert len(out.output_notes) == len(built.outputs)
    assert [nt.owner for nt in out.input_notes] == [s.owner.address for s in built.inputs]
    assert [nt.owner for nt in out.output_notes] == [s.owner.address for s in built.outputs]
    assert [nt.note_hash for nt in out.notes] == [t.note_hash for t in built.bundle.notes]
    assert out.public_owner == PUBLIC_OWNER.address
    assert out.public_value == public_value
    return out


# --- honest proofs ---------------------------------------------------------------

SUCCESS_CASES = [
    pytest.param([80, 60], [50, 50], 40, id="public-plus-40"),
    pytest.param([100, 30], [50], 80, id="public-plus-80"),
    pytest.param([20, 30], [40, 50], -40, id="public-minus-40"),
    pytest.param([], [100, 200, 150], -450, id="no-inputs"),
    pytest.param([100, 200, 150], [], 450, id="no-outputs"),
    pytest.param([0, 0], [0, 10], -10, id="zero-value-inputs"),
    pytest.param([0, 10], [0, 0], 10, id="zero-value-outputs"),
    pytest.param([7], [], 7, id="single-note"),
]


@pytest.mark.slow
@pytest.mark.parametrize("k_in,k_out,public_value", SUCCESS_CASES)
def test_valid_join_split(validator, known_setup, k_in, k_out, public_value):
    built = build_proof(k_in, k_out, public_value, setup=known_setup)
    record = validator.validate_join_split(built.proof, SENDER.address)
    _check_output(record, built, public_value)


@pytest.mark.slow
def test_ten_inputs_ten_outputs(validator, known_setup):
    k_in = [10 * (i + 1) for i in range(10)]  # 550
    k_out = [50] * 10  # 500
    built = build_proof(k_in, k_out, 50, setup=known_setup, seed=10)
    record = validator.validate_join_split(built.proof, SENDER.address)
    _check_output(record, built, 50)


@pytest.mark.slow
def test_input_owners_are_checked(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    owners = [s.owner.address for s in built.inputs]
    validator.validate_join_split(built.proof, SENDER.address, input_owners=owners)

    with pytest.raises(SignatureInvalid) as ei:
        validator.validate_join_split(
            built.proof, SENDER.address, input_owners=[owners[0], make_account("thief").address]
        )
    assert ei.value.ctx["note_index"] == 1
    assert ei.value.ctx["reason"] == "owner_mismatch"

    with pytest.raises(SignatureInvalid):
        validator.validate_join_split(built.proof, SENDER.address, input_owners=owners[:1])


@pytest.mark.slow
def test_verification_is_deterministic(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    first = validator.validate_join_split(built.proof, SENDER.address)
    second = validator.validate_join_split(bytes(built.proof), SENDER.address)
    assert first == second


@pytest.mark.slow
def test_tagged_result(validator, known_setup):
    built = build_proof([10], [10], 0, setup=known_setup)
    res = validator.verify(built.proof, SENDER.address)
    assert res and res.ok and res.error is None
    assert decode_output(res.output).public_value == 0

    bad = validator.verify(built.proof[:-1], SENDER.address)
    assert not bad
    assert bad.output is None
    assert isinstance(bad.error, MalformedProofData)
    assert bad.code == JoinSplitErrorCode.MALFORMED_PROOF_DATA.value


@pytest.mark.slow
def test_decode_verified_and_module_wrapper(known_setup):
    built = build_proof([30], [10, 20], 0, setup=known_setup)
    v = JoinSplitValidator(IDENTITY, known_setup.crs)
    out = v.decode_verified(built.proof, SENDER.address)
    assert isinstance(out, ProofOutput)
    record = validate_join_split(built.proof, SENDER.address, known_setup.crs, IDENTITY)
    assert decode_output(record) == out


@pytest.mark.slow
def test_crs_passed_per_call(known_setup):
    built = build_proof([10], [10], 0, setup=known_setup)
    v = JoinSplitValidator(IDENTITY)
    v.validate_join_split(built.proof, SENDER.address, known_setup.crs)
    with pytest.raises(ValueError):
        v.validate_join_split(built.proof, SENDER.address)


# --- rejections ------------------------------------------------------------------


@pytest.mark.slow
def test_fake_challenge(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    forged = dataclasses.replace(built.bundle, challenge=random.Random(5).randrange(1, 2**253))
    with pytest.raises(ChallengeMismatch) as ei:
        validator.validate_join_split(encode_proof(forged), SENDER.address)
    assert ei.value.ctx["expected"] == hex(forged.challenge)


def test_random_proof_data(validator):
    rng = random.Random(42)
    data = bytes(rng.randrange(256) for _ in range(32 * 40))
    with pytest.raises(MalformedProofData):
        validator.validate_join_split(data, SENDER.address)


def test_random_commitments(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    b = built.bundle
    for i in range(b.n):
        x, y = off_curve_point(i)
        b = replace_note(b, i, gamma_x=x, gamma_y=y)
    with pytest.raises(CurvePointInvalid) as ei:
        validator.validate_join_split(encode_proof(b), SENDER.address)
    assert ei.value.ctx["note_index"] == 0


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_forged_note_tuples(validator, known_setup, seed):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    rng = random.Random(seed)
    forged = tuple(
        NoteTuple(*(rng.randrange(bn.FIELD_MODULUS) for _ in range(6))) for _ in built.bundle.notes
    )
    b = dataclasses.replace(built.bundle, notes=forged)
    with pytest.raises((CurvePointInvalid, BalancingRelationFailed)):
        validator.validate_join_split(encode_proof(b), SENDER.address)


@pytest.mark.parametrize(
    "gamma",
    [pytest.param((0, 0), id="all-zero"), pytest.param(off_curve_point(3), id="off-curve")],
)
def test_single_note_off_curve_with_consistent_challenge(validator, gamma):
    # one input note, k_bar = 132, remaining words zero or off-curve
    note = NoteTuple(132, 0, gamma[0], gamma[1], 0, 0)
    challenge = recompute_challenge(SENDER.address, 0, 1, [note], [bn.g1_infinity()])
    owner = make_account("in-0")
    bundle = ProofBundle(
        m=1,
        notes=(note,),
        challenge=challenge,
        public_value=0,
        public_owner=PUBLIC_OWNER.address,
        signatures=(sign_note(note, challenge, SENDER.address, IDENTITY, owner),),
        output_owners=(),
    )
    with pytest.raises(CurvePointInvalid) as ei:
        validator.validate_join_split(encode_proof(bundle), SENDER.address, input_owners=[owner.address])
    assert ei.value.ctx["note_index"] == 0


@pytest.mark.slow
@pytest.mark.parametrize(
    "k_in,k_out",
    [
        pytest.param([0, 0], [0, 10], id="zero-inputs-nonzero-output"),
        pytest.param([0, 10], [0, 0], id="nonzero-input-zero-outputs"),
    ],
)
def test_unbalanced_zero_value_notes(validator, known_setup, k_in, k_out):
    built = build_proof(k_in, k_out, 0, setup=known_setup)
    with pytest.raises(ChallengeMismatch):
        validator.validate_join_split(built.proof, SENDER.address)


@pytest.mark.slow
def test_unbalanced_values(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 41, setup=known_setup)
    with pytest.raises(ChallengeMismatch):
        validator.validate_join_split(built.proof, SENDER.address)


@pytest.mark.slow
def test_forged_last_k_bar_is_ignored_but_other_responses_are_not(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    b = built.bundle
    forged = replace_note(b, 0, k_bar=(b.notes[0].k_bar + 1))
    with pytest.raises(ChallengeMismatch):
        validator.validate_join_split(encode_proof(forged), SENDER.address)


@pytest.mark.slow
def test_fake_trusted_setup(known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    fake = make_setup(y=known_setup.y + 1, h_scalar=known_setup.h_scalar)
    v = JoinSplitValidator(IDENTITY, fake.crs)
    with pytest.raises(TrustedSetupMismatch) as ei:
        v.validate_join_split(built.proof, SENDER.address)
    assert isinstance(ei.value, BalancingRelationFailed)


@pytest.mark.slow
def test_unrelated_trusted_setup(known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    other = make_setup(y=known_setup.y + 7, h_scalar=known_setup.h_scalar + 7)
    v = JoinSplitValidator(IDENTITY, other.crs)
    with pytest.raises(TrustedSetupMismatch) as ei:
        v.validate_join_split(built.proof, SENDER.address)
    assert ei.value.code is JoinSplitErrorCode.BALANCING_RELATION_FAILED


@pytest.mark.slow
def test_tampered_challenge_under_the_right_setup_is_not_a_setup_mismatch(validator, known_setup):
    built = build_proof([10], [10], 0, setup=known_setup)
    bad = dataclasses.replace(built.bundle, challenge=(built.bundle.challenge + 1) % R)
    with pytest.raises(ChallengeMismatch):
        validator.validate_join_split(encode_proof(bad), SENDER.address)


@pytest.mark.parametrize("which", ["gamma", "sigma", "identity"])
def test_points_not_on_curve(validator, known_setup, which):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    if which == "identity":
        bad = replace_note(built.bundle, 2, gamma_x=0, gamma_y=0)
    else:
        x, y = off_curve_point(9)
        bad = replace_note(built.bundle, 2, **{f"{which}_x": x, f"{which}_y": y})
    with pytest.raises(CurvePointInvalid) as ei:
        validator.validate_join_split(encode_proof(bad), SENDER.address)
    assert ei.value.ctx["note_index"] == 2


@pytest.mark.slow
def test_wrong_sender(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    with pytest.raises(ChallengeMismatch):
        validator.validate_join_split(built.proof, make_account("front-runner").address)


def test_bad_recovery_id(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    sigs = list(built.bundle.signatures)
    sigs[1] = NoteSignature(30, sigs[1].r, sigs[1].s)
    bad = dataclasses.replace(built.bundle, signatures=tuple(sigs))
    with pytest.raises(SignatureInvalid) as ei:
        validator.validate_join_split(encode_proof(bad), SENDER.address)
    assert ei.value.ctx["note_index"] == 1


def test_tampered_signature_with_known_owners(validator, known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    sigs = list(built.bundle.signatures)
    sigs[0] = NoteSignature(sigs[0].v, sigs[0].r, sigs[0].s - 1)
    bad = dataclasses.replace(built.bundle, signatures=tuple(sigs))
    owners = [s.owner.address for s in built.inputs]
    with pytest.raises(SignatureInvalid):
        validator.validate_join_split(encode_proof(bad), SENDER.address, input_owners=owners)


def test_other_verifier_identity_rejects_signatures(known_setup):
    built = build_proof([80, 60], [50, 50], 40, setup=known_setup)
    owners = [s.owner.address for s in built.inputs]
    v = JoinSplitValidator(IDENTITY.with_overrides(chain_id=5), known_setup.crs)
    with pytest.raises(SignatureInvalid):
        v.validate_join_split(built.proof, SENDER.address, input_owners=owners)


def test_stage_order_malformed_before_curve(validator, known_setup):
    built = build_proof([10], [10], 0, setup=known_setup)
    bad = replace_note(built.bundle, 0, gamma_x=0, gamma_y=0)
    with pytest.raises(MalformedProofData):
        validator.validate_join_split(encode_proof(bad) + bytes(32), SENDER.address)


def test_stage_order_curve_before_challenge(validator, known_setup):
    built = build_proof([10], [10], 0, setup=known_setup)
    bad = dataclasses.replace(replace_note(built.bundle, 1, sigma_x=0, sigma_y=0), challenge=1)
    with pytest.raises(CurvePointInvalid):
        validator.validate_join_split(encode_proof(bad), SENDER.address)


def test_max_notes(known_setup):
    built = build_proof([10, 10], [20], 0, setup=known_setup)
    v = JoinSplitValidator(IDENTITY, known_setup.crs, max_notes=2)
    with pytest.raises(MalformedProofData):
        v.validate_join_split(built.proof, SENDER.address)
    with pytest.raises(ValueError):
        JoinSplitValidator(IDENTITY, known_setup.crs, max_notes=0)


def test_trusted_setup_validation():
    with pytest.raises(CurvePointInvalid):
        TrustedSetup.from_ints(1, 3, (1, 2), (3, 4))
