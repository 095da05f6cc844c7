"""
Semantic contracts for the joint assessment workflow.

This module defines immutable data structures that serve as contracts
between modules. These are NOT validators - they define shape and
semantics without enforcing rules.

Design principles:
- Frozen dataclasses (immutable after creation)
- Joint selections are frozensets (copy-on-write, no aliasing between phases)
- The current stage is a tagged union: only joint-selection stages carry
  a region index, only the results stage carries a score
- No dependencies on other modules except the phase enum

Contents:
- Region: One entry of the static region catalog
- ActivityBand: Score threshold for disease-activity classification
- ClinicalInputs: PGA, EGA and CRP values
- TenderJointsStage / SwollenJointsStage / ClinicalAssessmentStage /
  ResultsStage: the four workflow stages
- AssessmentState: Aggregate snapshot handed to the presentation layer

Usage:
    from joint_assessment.contracts import AssessmentState, TenderJointsStage
"""

from dataclasses import dataclass, field
from typing import ClassVar, Dict, FrozenSet, Optional, Tuple

from joint_assessment.utils.phases import AssessmentPhase


# Inclusive bounds per clinical input field: (lower, upper)
CLINICAL_INPUT_BOUNDS: Dict[str, Tuple[float, float]] = {
    'pga': (0.0, 100.0),   # mm
    'ega': (0.0, 100.0),   # mm
    'crp': (0.0, 300.0),   # mg/L
}


@dataclass(frozen=True)
class Region:
    """
    Named anatomical grouping of joints.

    Attributes:
        name: Display name (e.g. 'Hands')
        joints: Ordered joint names, as offered to the user
    """
    name: str
    joints: Tuple[str, ...]


@dataclass(frozen=True)
class ActivityBand:
    """
    Disease-activity band, matched by inclusive upper bound.

    Attributes:
        label: Band name (e.g. 'remission', 'low')
        upper: Inclusive upper score bound. None for the open-ended top band.
    """
    label: str
    upper: Optional[float]


@dataclass(frozen=True)
class ClinicalInputs:
    """
    Clinician-entered severity measures.

    Values are stored already clamped to CLINICAL_INPUT_BOUNDS;
    clamping is done by the state machine, not here.

    Attributes:
        pga: Physician Global Assessment, 0-100 mm
        ega: Evaluator Global Assessment, 0-100 mm
        crp: C-Reactive Protein, 0-300 mg/L
    """
    pga: float = 0.0
    ega: float = 0.0
    crp: float = 0.0


# Stage variants

@dataclass(frozen=True)
class TenderJointsStage:
    """Selecting tender joints in region `region_index`."""
    region_index: int
    phase: ClassVar[AssessmentPhase] = AssessmentPhase.TENDER_JOINTS


@dataclass(frozen=True)
class SwollenJointsStage:
    """Selecting swollen joints in region `region_index`."""
    region_index: int
    phase: ClassVar[AssessmentPhase] = AssessmentPhase.SWOLLEN_JOINTS


@dataclass(frozen=True)
class ClinicalAssessmentStage:
    """Entering PGA, EGA and CRP."""
    phase: ClassVar[AssessmentPhase] = AssessmentPhase.CLINICAL_ASSESSMENT


@dataclass(frozen=True)
class ResultsStage:
    """Showing the composite score computed on entry."""
    score: float
    phase: ClassVar[AssessmentPhase] = AssessmentPhase.RESULTS


# Stage union type for type hints
Stage = TenderJointsStage | SwollenJointsStage | ClinicalAssessmentStage | ResultsStage


@dataclass(frozen=True)
class AssessmentState:
    """
    Immutable snapshot of one assessment session.

    Every event produces a new AssessmentState; instances are never
    mutated. Two snapshots compare equal when every field matches, which
    is what the traversal tests rely on.

    Attributes:
        stage: Current workflow stage (carries region index or score)
        tender_joints: Joints marked tender, flat across regions
        swollen_joints: Joints marked swollen, flat across regions
        clinical_inputs: PGA, EGA, CRP
        score: Last computed score. Kept after retreating out of RESULTS,
               where it is stale until the next computation.
    """
    stage: Stage = field(default_factory=lambda: TenderJointsStage(region_index=0))
    tender_joints: FrozenSet[str] = frozenset()
    swollen_joints: FrozenSet[str] = frozenset()
    clinical_inputs: ClinicalInputs = field(default_factory=ClinicalInputs)
    score: Optional[float] = None

    @property
    def phase(self) -> AssessmentPhase:
        return self.stage.phase

    @property
    def region_index(self) -> Optional[int]:
        """Region index in joint-selection phases, None otherwise."""
        return getattr(self.stage, 'region_index', None)

    @property
    def score_is_current(self) -> bool:
        """True only while the score on display reflects the current inputs."""
        return isinstance(self.stage, ResultsStage)

    def joints_for_phase(self, phase: AssessmentPhase) -> FrozenSet[str]:
        """
        Selection set owned by a joint-selection phase.

        Raises:
            ValueError: If phase does not own a selection set
        """
        if phase == AssessmentPhase.TENDER_JOINTS:
            return self.tender_joints
        if phase == AssessmentPhase.SWOLLEN_JOINTS:
            return self.swollen_joints
        raise ValueError(f"Phase {phase.value} has no joint selection")

    def to_json(self) -> dict:
        """
        Serialize to JSON-safe dict.

        Sets become sorted lists so the output is deterministic.

        Returns:
            dict: Snapshot for the presentation layer
        """
        return {
            'phase': self.phase.value,
            'region_index': self.region_index,
            'tender_joints': sorted(self.tender_joints),
            'swollen_joints': sorted(self.swollen_joints),
            'clinical_inputs': {
                'pga': self.clinical_inputs.pga,
                'ega': self.clinical_inputs.ega,
                'crp': self.clinical_inputs.crp,
            },
            'score': self.score,
            'score_is_current': self.score_is_current,
        }
