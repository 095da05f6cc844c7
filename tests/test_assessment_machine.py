"""
Test Assessment State Machine - traversal, selection, scoring

Covers the pure apply(state, event) transitions. Command handling and
rejection are covered in test_command_handling.py.

Run with: pytest tests/test_assessment_machine.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from joint_assessment.commands import Advance, ComputeScore, Retreat, SelectJoint, SetClinicalInput
from joint_assessment.contracts import (
    AssessmentState,
    ClinicalAssessmentStage,
    ClinicalInputs,
    ResultsStage,
    SwollenJointsStage,
    TenderJointsStage,
)
from joint_assessment.core.assessment_machine import AssessmentStateMachine
from joint_assessment.core.region_catalog import RegionCatalog
from joint_assessment.utils.phases import AssessmentPhase

# 5 regions: 5 tender + 5 swollen steps, then clinical assessment, then results
ADVANCES_TO_CLINICAL = 10
ADVANCES_TO_RESULTS = 11


@pytest.fixture(scope="module")
def machine():
    return AssessmentStateMachine(RegionCatalog())


def apply_all(machine, state, events):
    for event in events:
        state = machine.apply(state, event)
    return state


def advance_n(machine, state, n):
    return apply_all(machine, state, [Advance()] * n)


def retreat_n(machine, state, n):
    return apply_all(machine, state, [Retreat()] * n)


# ========================
# Initial state
# ========================

def test_initial_state(machine):
    state = machine.start()

    assert state.phase == AssessmentPhase.TENDER_JOINTS
    assert state.region_index == 0
    assert state.tender_joints == frozenset()
    assert state.swollen_joints == frozenset()
    assert state.clinical_inputs == ClinicalInputs(pga=0.0, ega=0.0, crp=0.0)
    assert state.score is None
    assert state == AssessmentState()

    print("✓ Initial state test passed")


# ========================
# Forward traversal
# ========================

def test_advance_within_tender_regions(machine):
    state = machine.start()

    for expected_index in range(1, 5):
        state = machine.apply(state, Advance())
        assert state.stage == TenderJointsStage(expected_index), \
            f"Expected tender region {expected_index}, got {state.stage}"


def test_last_tender_region_crosses_to_swollen(machine):
    """Advance from the last tender region lands on swollen region 0"""
    state = AssessmentState(stage=TenderJointsStage(region_index=4))

    state = machine.apply(state, Advance())

    assert state.phase == AssessmentPhase.SWOLLEN_JOINTS
    assert state.region_index == 0


def test_last_swollen_region_crosses_to_clinical(machine):
    state = AssessmentState(stage=SwollenJointsStage(region_index=4))

    state = machine.apply(state, Advance())

    assert state.stage == ClinicalAssessmentStage()
    assert state.region_index is None
    assert state.score is None


def test_full_forward_walk(machine):
    state = advance_n(machine, machine.start(), ADVANCES_TO_CLINICAL)
    assert state.phase == AssessmentPhase.CLINICAL_ASSESSMENT

    state = machine.apply(state, Advance())
    assert state.phase == AssessmentPhase.RESULTS


def test_advance_from_clinical_computes_score(machine):
    """Advance out of CLINICAL_ASSESSMENT with nothing entered scores 0.00"""
    state = advance_n(machine, machine.start(), ADVANCES_TO_CLINICAL)

    state = machine.apply(state, Advance())

    assert state.phase == AssessmentPhase.RESULTS
    assert state.score == 0.0
    assert state.stage == ResultsStage(score=0.0)


def test_advance_in_results_is_noop(machine):
    state = advance_n(machine, machine.start(), ADVANCES_TO_RESULTS)

    assert machine.apply(state, Advance()) == state


# ========================
# Backward traversal
# ========================

def test_retreat_at_start_is_noop(machine):
    """TENDER_JOINTS region 0 cannot be retreated from"""
    state = machine.start()
    assert machine.apply(state, Retreat()) == state

    # Also with selections and inputs present
    state = apply_all(machine, state, [
        SelectJoint('Cervical Spine'),
        SetClinicalInput('crp', 4),
    ])
    assert machine.apply(state, Retreat()) == state

    # Idempotent
    assert retreat_n(machine, state, 3) == state


def test_retreat_within_tender_regions(machine):
    state = AssessmentState(stage=TenderJointsStage(region_index=3))
    assert machine.apply(state, Retreat()).stage == TenderJointsStage(2)


def test_retreat_from_swollen_region_zero(machine):
    """SWOLLEN_JOINTS region 0 goes back to the last tender region"""
    state = AssessmentState(stage=SwollenJointsStage(region_index=0))

    state = machine.apply(state, Retreat())

    assert state.stage == TenderJointsStage(4)


def test_retreat_within_swollen_regions(machine):
    state = AssessmentState(stage=SwollenJointsStage(region_index=2))
    assert machine.apply(state, Retreat()).stage == SwollenJointsStage(1)


def test_retreat_from_clinical(machine):
    state = AssessmentState(stage=ClinicalAssessmentStage())
    assert machine.apply(state, Retreat()).stage == SwollenJointsStage(4)


def test_retreat_from_results_keeps_stale_score(machine):
    state = advance_n(machine, machine.start(), ADVANCES_TO_CLINICAL)
    state = machine.apply(state, SetClinicalInput('crp', 12))
    state = machine.apply(state, ComputeScore())
    assert state.score == 12.0
    assert state.score_is_current

    state = machine.apply(state, Retreat())

    assert state.phase == AssessmentPhase.CLINICAL_ASSESSMENT
    assert state.score == 12.0
    assert not state.score_is_current


@pytest.mark.parametrize("n", range(0, ADVANCES_TO_RESULTS + 1))
def test_traversal_symmetry(machine, n):
    """n advances followed by n retreats return to TENDER_JOINTS region 0"""
    state = advance_n(machine, machine.start(), n)
    state = retreat_n(machine, state, n)

    assert state.phase == AssessmentPhase.TENDER_JOINTS
    assert state.region_index == 0


def test_retreat_inverts_advance_at_every_step(machine):
    state = machine.start()

    for _ in range(ADVANCES_TO_CLINICAL):
        forward = machine.apply(state, Advance())
        back = machine.apply(forward, Retreat())
        assert back.stage == state.stage, f"{state.stage} -> {forward.stage} -> {back.stage}"
        state = forward


# ========================
# Joint selection
# ========================

def test_select_joint_adds_to_current_phase(machine):
    state = machine.apply(machine.start(), SelectJoint('Temporomandibular'))

    assert state.tender_joints == {'Temporomandibular'}
    assert state.swollen_joints == frozenset()


def test_select_joint_twice_restores_set(machine):
    state = machine.apply(machine.start(), SelectJoint('Cervical Spine'))

    toggled = apply_all(machine, state, [SelectJoint('Temporomandibular')] * 2)

    assert toggled.tender_joints == state.tender_joints
    assert toggled == state


def test_tender_and_swollen_sets_independent(machine):
    state = apply_all(machine, machine.start(), [
        SelectJoint('Temporomandibular'),
        *[Advance()] * 5,
        SelectJoint('Temporomandibular'),
        SelectJoint('Cervical Spine'),
    ])

    assert state.phase == AssessmentPhase.SWOLLEN_JOINTS
    assert state.tender_joints == {'Temporomandibular'}
    assert state.swollen_joints == {'Temporomandibular', 'Cervical Spine'}

    # Deselect in swollen phase leaves tender selection alone
    state = machine.apply(state, SelectJoint('Temporomandibular'))
    assert state.tender_joints == {'Temporomandibular'}
    assert state.swollen_joints == {'Cervical Spine'}


def test_selections_survive_traversal(machine):
    state = apply_all(machine, machine.start(), [
        SelectJoint('Cervical Spine'),
        Advance(),
        SelectJoint('Elbow'),
        Retreat(),
        Retreat(),
    ])

    assert state.region_index == 0
    assert state.tender_joints == {'Cervical Spine', 'Elbow'}


def test_select_joint_outside_current_region_accepted(machine):
    """Any catalog joint toggles, even one from another region"""
    state = machine.apply(machine.start(), SelectJoint('Knee'))
    assert state.tender_joints == {'Knee'}


def test_shared_joint_name_is_one_selection(machine):
    """'PIP' from Hands and from Feet collapse into one entry"""
    state = advance_n(machine, machine.start(), 2)  # Hands
    state = machine.apply(state, SelectJoint('PIP'))
    state = advance_n(machine, state, 2)  # Feet

    assert 'PIP' in state.tender_joints
    state = machine.apply(state, SelectJoint('PIP'))
    assert 'PIP' not in state.tender_joints


def test_select_unknown_joint_raises(machine):
    with pytest.raises(ValueError) as excinfo:
        machine.apply(machine.start(), SelectJoint('Spleen'))
    assert "Unknown joint 'Spleen'" in str(excinfo.value)


@pytest.mark.parametrize("advances", [ADVANCES_TO_CLINICAL, ADVANCES_TO_RESULTS])
def test_select_joint_outside_joint_phases_is_noop(machine, advances):
    state = machine.apply(machine.start(), SelectJoint('Knee'))
    state = advance_n(machine, state, advances)

    assert machine.apply(state, SelectJoint('Hip')) == state


def test_apply_never_mutates_input(machine):
    original = machine.start()
    snapshot = original.to_json()

    apply_all(machine, original, [SelectJoint('Hip'), Advance(), SetClinicalInput('pga', 30)])

    assert original.to_json() == snapshot


# ========================
# Clinical inputs
# ========================

def test_set_clinical_inputs(machine):
    state = advance_n(machine, machine.start(), ADVANCES_TO_CLINICAL)
    state = apply_all(machine, state, [
        SetClinicalInput('pga', 55),
        SetClinicalInput('ega', 12.5),
        SetClinicalInput('crp', 3),
    ])

    assert state.clinical_inputs == ClinicalInputs(pga=55.0, ega=12.5, crp=3.0)


def test_set_clinical_input_clamps(machine):
    state = apply_all(machine, machine.start(), [
        SetClinicalInput('pga', 250),
        SetClinicalInput('ega', -5),
        SetClinicalInput('crp', 301),
    ])

    assert state.clinical_inputs == ClinicalInputs(pga=100.0, ega=0.0, crp=300.0)


def test_set_clinical_input_allowed_in_any_phase(machine):
    state = machine.apply(machine.start(), SetClinicalInput('ega', 40))

    assert state.phase == AssessmentPhase.TENDER_JOINTS
    assert state.clinical_inputs.ega == 40.0


def test_set_clinical_input_unknown_field(machine):
    with pytest.raises(ValueError):
        machine.apply(machine.start(), SetClinicalInput('esr', 40))


# ========================
# Scoring
# ========================

def test_compute_score_reference_case(machine):
    """tender {A,B}, swollen {C}, PGA 50, EGA 20, CRP 10 -> 20.0"""
    state = AssessmentState(
        stage=ClinicalAssessmentStage(),
        tender_joints=frozenset({'Hip', 'Knee'}),
        swollen_joints=frozenset({'Ankle'}),
        clinical_inputs=ClinicalInputs(pga=50, ega=20, crp=10),
    )

    state = machine.apply(state, ComputeScore())

    assert state.score == 20.0
    assert state.phase == AssessmentPhase.RESULTS


def test_compute_score_twice_is_stable(machine):
    state = apply_all(machine, machine.start(), [
        SelectJoint('Wrist'),
        SetClinicalInput('pga', 70),
        ComputeScore(),
    ])
    again = machine.apply(state, ComputeScore())

    assert again.score == state.score == 8.0
    assert again.phase == AssessmentPhase.RESULTS
    assert again == state


def test_compute_score_from_any_phase(machine):
    """ComputeScore enters RESULTS unconditionally"""
    state = machine.apply(machine.start(), ComputeScore())

    assert state.phase == AssessmentPhase.RESULTS
    assert state.score == 0.0


def test_recompute_after_retreat_refreshes_score(machine):
    state = advance_n(machine, machine.start(), ADVANCES_TO_RESULTS)
    assert state.score == 0.0

    state = apply_all(machine, state, [Retreat(), SetClinicalInput('crp', 25), Advance()])

    assert state.phase == AssessmentPhase.RESULTS
    assert state.score == 25.0
    assert state.score_is_current


def test_unsupported_event(machine):
    with pytest.raises(TypeError):
        machine.apply(machine.start(), object())


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-v']))
