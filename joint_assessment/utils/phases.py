"""
Assessment phase enum for the joint assessment workflow.

Invariants:
- Exactly one phase is active at a time
- Phases are strictly ordered; none is skippable and none recurs
- Only TENDER_JOINTS and SWOLLEN_JOINTS carry a region index

Design:
- AssessmentPhase is a string-based enum for JSON serialization
- The state machine owns all phase transitions
- Display helpers read the phase but never change it
"""

from enum import Enum


class AssessmentPhase(str, Enum):
    """
    Workflow phases, in traversal order.

    TENDER_JOINTS:
        Region-by-region selection of tender joints.

        Entry: Assessment start, or retreat from SWOLLEN_JOINTS region 0
        Exit: Advance past the last region -> SWOLLEN_JOINTS

    SWOLLEN_JOINTS:
        Region-by-region selection of swollen joints.

        Entry: Advance past the last tender region, or retreat from
               CLINICAL_ASSESSMENT (lands on the last region)
        Exit: Advance past the last region -> CLINICAL_ASSESSMENT
              Retreat from region 0 -> TENDER_JOINTS (last region)

    CLINICAL_ASSESSMENT:
        PGA, EGA and CRP entry.

        Exit: Advance or compute score -> RESULTS
              Retreat -> SWOLLEN_JOINTS (last region)

    RESULTS:
        Composite score display. Terminal for forward traversal.

        Exit: Retreat -> CLINICAL_ASSESSMENT (score kept but stale)
    """
    TENDER_JOINTS = "TENDER_JOINTS"
    SWOLLEN_JOINTS = "SWOLLEN_JOINTS"
    CLINICAL_ASSESSMENT = "CLINICAL_ASSESSMENT"
    RESULTS = "RESULTS"


# Phases in which joints are selected region by region
JOINT_SELECTION_PHASES = frozenset({
    AssessmentPhase.TENDER_JOINTS,
    AssessmentPhase.SWOLLEN_JOINTS,
})

PHASE_ORDER = (
    AssessmentPhase.TENDER_JOINTS,
    AssessmentPhase.SWOLLEN_JOINTS,
    AssessmentPhase.CLINICAL_ASSESSMENT,
    AssessmentPhase.RESULTS,
)
