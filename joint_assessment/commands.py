"""
Command types for AssessmentStateMachine control flow.

Commands are the ONLY way to change an assessment.
The presentation layer never edits AssessmentState directly; it sends
a command and renders whatever state comes back.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StartAssessment:
    """
    Begin a new assessment.

    No state parameter - the machine creates the initial state.
    Returns: TransitionResult at TENDER_JOINTS, region 0.
    """
    pass


@dataclass(frozen=True)
class SelectJoint:
    """
    Toggle a joint in the current phase's selection set.

    Only accepted in TENDER_JOINTS and SWOLLEN_JOINTS. The joint must
    exist somewhere in the catalog but need not belong to the region
    currently on display.
    """
    joint: str


@dataclass(frozen=True)
class Advance:
    """Move forward one region, or into the next phase."""
    pass


@dataclass(frozen=True)
class Retreat:
    """Move back one region, or into the previous phase."""
    pass


@dataclass(frozen=True)
class SetClinicalInput:
    """
    Assign one of pga / ega / crp.

    Out-of-range values are clamped. Accepted in any phase.
    """
    field: str
    value: float


@dataclass(frozen=True)
class ComputeScore:
    """
    Compute the composite score and enter RESULTS.

    Accepted in any phase; recomputes when already in RESULTS.
    """
    pass


@dataclass(frozen=True)
class FinishAssessment:
    """
    Close the assessment and emit the final report.

    Only valid in RESULTS.
    Returns: FinalReport.
    """
    pass


# Events that transform an existing state
Event = SelectJoint | Advance | Retreat | SetClinicalInput | ComputeScore

# Command union type for type hints
Command = StartAssessment | Event | FinishAssessment
