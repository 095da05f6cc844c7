"""
Result types returned by AssessmentStateMachine.handle()

These are the ONLY return types from the command handler.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from joint_assessment.contracts import AssessmentState


@dataclass(frozen=True)
class TransitionResult:
    """
    Successful event processing result.

    Returned by: StartAssessment, SelectJoint, Advance, Retreat,
    SetClinicalInput, ComputeScore

    Attributes:
        state: New assessment snapshot (pass to the next command)
        phase_changed: Whether the event moved the workflow to another phase
        debug: Debug information (previous phase, clamping, etc.)
    """
    state: AssessmentState
    phase_changed: bool
    debug: Dict[str, Any]


@dataclass(frozen=True)
class FinalReport:
    """
    Final outputs after the assessment is finished.

    Returned by: FinishAssessment

    Attributes:
        tender_count: Number of tender joints
        swollen_count: Number of swollen joints
        tender_joints: Tender joint names, sorted
        swollen_joints: Swollen joint names, sorted
        pga: Physician Global Assessment (mm)
        ega: Evaluator Global Assessment (mm)
        crp: C-Reactive Protein (mg/L)
        score: Composite disease-activity score
        disease_activity: Activity band label (e.g. 'moderate'), None if
            the catalog defines no band covering the score
    """
    tender_count: int
    swollen_count: int
    tender_joints: Tuple[str, ...]
    swollen_joints: Tuple[str, ...]
    pga: float
    ega: float
    crp: float
    score: float
    disease_activity: Optional[str]

    def to_json(self) -> dict:
        return {
            'tender_count': self.tender_count,
            'swollen_count': self.swollen_count,
            'tender_joints': list(self.tender_joints),
            'swollen_joints': list(self.swollen_joints),
            'pga': self.pga,
            'ega': self.ega,
            'crp': self.crp,
            'score': self.score,
            'disease_activity': self.disease_activity,
        }


@dataclass(frozen=True)
class IllegalCommand:
    """
    Command rejected by the state machine. State is unchanged.

    Examples:
    - SelectJoint during CLINICAL_ASSESSMENT
    - SelectJoint with a joint name missing from the catalog
    - SetClinicalInput with an unknown field
    - FinishAssessment before RESULTS

    Attributes:
        reason: Human-readable explanation
        command_type: Name of rejected command type
    """
    reason: str
    command_type: str
