"""
Assessment State Machine - Joint assessment workflow (Functional Core)

Responsibilities:
- Walk tender joints, then swollen joints, region by region
- Collect PGA, EGA and CRP
- Compute the composite score on entry to RESULTS
- Reject commands that would corrupt state

Design principles:
- Ephemeral: no assessment state held between calls
- apply(state, event) -> state is pure (input state never mutated)
- handle(command, state) wraps apply() with rejection and reporting
- Region catalog is the only cached dependency (read-only)

Traversal (R = last region index):

    advance:  TJ(i<R) -> TJ(i+1)    TJ(R) -> SJ(0)
              SJ(i<R) -> SJ(i+1)    SJ(R) -> CA
              CA -> RESULTS (score computed)
              RESULTS -> RESULTS (no-op)

    retreat:  SJ(i>0) -> SJ(i-1)    SJ(0) -> TJ(R)
              TJ(i>0) -> TJ(i-1)    TJ(0) -> TJ(0) (no-op)
              CA -> SJ(R)
              RESULTS -> CA (score kept, stale)
"""

import logging
from dataclasses import replace
from typing import Optional

from joint_assessment.commands import (
    Advance,
    Command,
    ComputeScore,
    Event,
    FinishAssessment,
    Retreat,
    SelectJoint,
    SetClinicalInput,
    StartAssessment,
)
from joint_assessment.contracts import (
    AssessmentState,
    ClinicalAssessmentStage,
    ResultsStage,
    SwollenJointsStage,
    TenderJointsStage,
)
from joint_assessment.core.sdai_calculator import (
    calculate_sdai,
    clamp_clinical_input,
    classify_disease_activity,
)
from joint_assessment.results import FinalReport, IllegalCommand, TransitionResult
from joint_assessment.utils.phases import JOINT_SELECTION_PHASES, AssessmentPhase

logger = logging.getLogger(__name__)


class AssessmentStateMachine:
    """
    Drives one or many assessment sessions over a shared region catalog.

    Functional core design:
    - Catalog cached, state external
    - Same (state, event) always yields the same new state
    - No implicit state accumulation
    """

    def __init__(self, region_catalog):
        """
        Initialize with the region catalog.

        Args:
            region_catalog: RegionCatalog instance (read-only, safe to cache)

        Raises:
            TypeError: If the catalog is missing a required attribute
        """
        self._validate_catalog(region_catalog)
        self.catalog = region_catalog

        logger.info(
            f"Assessment state machine initialized ({region_catalog.region_count} regions)"
        )

    def _validate_catalog(self, region_catalog):
        """Validate catalog interface"""
        for method in ('get_region', 'is_known_joint'):
            if not callable(getattr(region_catalog, method, None)):
                raise TypeError(f"region_catalog must have callable {method}() method")

        for attribute in ('region_count', 'last_index', 'activity_bands'):
            if not hasattr(region_catalog, attribute):
                raise TypeError(f"region_catalog must have '{attribute}' attribute")

        if region_catalog.region_count < 1:
            raise TypeError("region_catalog must define at least one region")

    # =========================================================================
    # Public API
    # =========================================================================

    def start(self) -> AssessmentState:
        """Initial state: TENDER_JOINTS, region 0, nothing selected."""
        return AssessmentState()

    def apply(self, state: AssessmentState, event: Event) -> AssessmentState:
        """
        Apply one event and return the new state.

        Args:
            state: Current snapshot (never mutated)
            event: SelectJoint, Advance, Retreat, SetClinicalInput or ComputeScore

        Returns:
            AssessmentState: New snapshot (may equal the input for no-ops)

        Raises:
            ValueError: Unknown joint, unknown clinical input field or
                non-numeric value
            TypeError: Unsupported event type
        """
        if isinstance(event, SelectJoint):
            return self._select_joint(state, event.joint)
        if isinstance(event, Advance):
            return self._advance(state)
        if isinstance(event, Retreat):
            return self._retreat(state)
        if isinstance(event, SetClinicalInput):
            return self._set_clinical_input(state, event.field, event.value)
        if isinstance(event, ComputeScore):
            return self._compute_score(state)
        raise TypeError(f"Unsupported event: {type(event).__name__}")

    def handle(self, command: Command, state: Optional[AssessmentState] = None):
        """
        Process a command.

        Args:
            command: Any Command
            state: Current snapshot (ignored for StartAssessment)

        Returns:
            TransitionResult for state-changing commands,
            FinalReport for FinishAssessment,
            IllegalCommand if the command is rejected (state unchanged)
        """
        command_type = type(command).__name__

        if isinstance(command, StartAssessment):
            initial = self.start()
            logger.info("Assessment started")
            return TransitionResult(state=initial, phase_changed=False, debug={'started': True})

        if state is None:
            return self._reject(command_type, "No assessment state; start an assessment first")

        if isinstance(command, FinishAssessment):
            if state.phase != AssessmentPhase.RESULTS:
                return self._reject(
                    command_type,
                    f"Assessment can only be finished from RESULTS (current phase {state.phase.value})"
                )
            report = self.build_final_report(state)
            logger.info(f"Assessment finished: score={report.score}, activity={report.disease_activity}")
            return report

        if isinstance(command, SelectJoint) and state.phase not in JOINT_SELECTION_PHASES:
            return self._reject(
                command_type,
                f"Joints cannot be selected during {state.phase.value}"
            )

        try:
            new_state = self.apply(state, command)
        except ValueError as e:
            return self._reject(command_type, str(e))

        phase_changed = new_state.phase != state.phase
        if phase_changed:
            logger.info(f"Phase {state.phase.value} -> {new_state.phase.value}")

        debug = {
            'previous_phase': state.phase.value,
            'previous_region_index': state.region_index,
        }
        if isinstance(command, SetClinicalInput):
            stored = getattr(new_state.clinical_inputs, command.field)
            debug['clamped'] = stored != command.value

        return TransitionResult(state=new_state, phase_changed=phase_changed, debug=debug)

    def build_final_report(self, state: AssessmentState) -> FinalReport:
        """
        Build the report emitted on finish.

        Raises:
            ValueError: If state has no computed score
        """
        if state.score is None:
            raise ValueError("No score has been computed")

        return FinalReport(
            tender_count=len(state.tender_joints),
            swollen_count=len(state.swollen_joints),
            tender_joints=tuple(sorted(state.tender_joints)),
            swollen_joints=tuple(sorted(state.swollen_joints)),
            pga=state.clinical_inputs.pga,
            ega=state.clinical_inputs.ega,
            crp=state.clinical_inputs.crp,
            score=state.score,
            disease_activity=classify_disease_activity(state.score, self.catalog.activity_bands),
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    def _select_joint(self, state: AssessmentState, joint: str) -> AssessmentState:
        """Toggle joint in the current phase's set. No-op outside joint phases."""
        if state.phase not in JOINT_SELECTION_PHASES:
            logger.warning(f"Ignoring joint selection during {state.phase.value}")
            return state

        if not self.catalog.is_known_joint(joint):
            raise ValueError(f"Unknown joint '{joint}'")

        selected = state.joints_for_phase(state.phase)
        toggled = selected - {joint} if joint in selected else selected | {joint}

        logger.debug(
            f"{state.phase.value}: {'deselected' if joint in selected else 'selected'} {joint}"
        )

        if state.phase == AssessmentPhase.TENDER_JOINTS:
            return replace(state, tender_joints=toggled)
        return replace(state, swollen_joints=toggled)

    def _advance(self, state: AssessmentState) -> AssessmentState:
        stage = state.stage
        last = self.catalog.last_index

        if isinstance(stage, TenderJointsStage):
            if stage.region_index < last:
                return replace(state, stage=TenderJointsStage(stage.region_index + 1))
            return replace(state, stage=SwollenJointsStage(0))

        if isinstance(stage, SwollenJointsStage):
            if stage.region_index < last:
                return replace(state, stage=SwollenJointsStage(stage.region_index + 1))
            return replace(state, stage=ClinicalAssessmentStage())

        if isinstance(stage, ClinicalAssessmentStage):
            return self._compute_score(state)

        # RESULTS is terminal for forward traversal
        return state

    def _retreat(self, state: AssessmentState) -> AssessmentState:
        stage = state.stage
        last = self.catalog.last_index

        if isinstance(stage, SwollenJointsStage):
            if stage.region_index > 0:
                return replace(state, stage=SwollenJointsStage(stage.region_index - 1))
            return replace(state, stage=TenderJointsStage(last))

        if isinstance(stage, TenderJointsStage):
            if stage.region_index > 0:
                return replace(state, stage=TenderJointsStage(stage.region_index - 1))
            # Start boundary
            return state

        if isinstance(stage, ClinicalAssessmentStage):
            return replace(state, stage=SwollenJointsStage(last))

        # RESULTS -> CLINICAL_ASSESSMENT; state.score is retained
        return replace(state, stage=ClinicalAssessmentStage())

    def _set_clinical_input(self, state: AssessmentState, field: str, value) -> AssessmentState:
        clamped = clamp_clinical_input(field, value)
        logger.debug(f"Clinical input {field} = {clamped}")
        return replace(state, clinical_inputs=replace(state.clinical_inputs, **{field: clamped}))

    def _compute_score(self, state: AssessmentState) -> AssessmentState:
        score = calculate_sdai(
            tender_count=len(state.tender_joints),
            swollen_count=len(state.swollen_joints),
            inputs=state.clinical_inputs,
        )
        return replace(state, stage=ResultsStage(score=score), score=score)

    def _reject(self, command_type: str, reason: str) -> IllegalCommand:
        logger.warning(f"Rejected {command_type}: {reason}")
        return IllegalCommand(reason=reason, command_type=command_type)
