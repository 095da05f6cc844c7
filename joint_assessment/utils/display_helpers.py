"""
Display Helpers - Convert assessment state to a renderable view

Used by the Flask API and the console harness. Produces plain dicts
only; no rendering happens here.
"""

from typing import Any, Dict, List

from joint_assessment.contracts import CLINICAL_INPUT_BOUNDS, AssessmentState
from joint_assessment.core.sdai_calculator import classify_disease_activity
from joint_assessment.utils.phases import JOINT_SELECTION_PHASES, PHASE_ORDER, AssessmentPhase


PHASE_TITLES = {
    AssessmentPhase.TENDER_JOINTS: 'Tender Joint Assessment',
    AssessmentPhase.SWOLLEN_JOINTS: 'Swollen Joint Assessment',
    AssessmentPhase.CLINICAL_ASSESSMENT: 'Clinical Assessment',
    AssessmentPhase.RESULTS: 'Assessment Results',
}

# Adjective used in prompts and counters for the joint phases
JOINT_PHASE_ADJECTIVES = {
    AssessmentPhase.TENDER_JOINTS: 'tender',
    AssessmentPhase.SWOLLEN_JOINTS: 'swollen',
}

CLINICAL_INPUT_LABELS = {
    'pga': {
        'label': 'PGA (Physician Global Assessment)',
        'description': 'Rate your overall disease activity (0-100mm)',
        'unit': 'mm',
    },
    'ega': {
        'label': 'EGA (Evaluator Global Assessment)',
        'description': 'Rate your overall disease activity (0-100mm)',
        'unit': 'mm',
    },
    'crp': {
        'label': 'CRP (C-Reactive Protein)',
        'description': 'Enter your CRP value (0-300 mg/L)',
        'unit': 'mg/L',
    },
}

# Primary button per phase
PRIMARY_ACTIONS = {
    AssessmentPhase.TENDER_JOINTS: 'next',
    AssessmentPhase.SWOLLEN_JOINTS: 'next',
    AssessmentPhase.CLINICAL_ASSESSMENT: 'calculate',
    AssessmentPhase.RESULTS: 'finish',
}


def format_measure(value: float, unit: str) -> str:
    """
    Format a clinical input for display, whole numbers only.

    Examples:
        >>> format_measure(49.6, 'mm')
        '50 mm'
    """
    return f"{value:.0f} {unit}"


def can_retreat(state: AssessmentState) -> bool:
    """False only at the very first region of the tender phase."""
    return not (
        state.phase == AssessmentPhase.TENDER_JOINTS and state.region_index == 0
    )


def build_results_lines(state: AssessmentState, activity_bands=()) -> List[Dict[str, str]]:
    """
    Label/value pairs shown on the results screen.

    Args:
        state: Snapshot with a computed score
        activity_bands: Catalog bands; omit to skip the activity line

    Returns:
        list of {'label', 'value'} dicts in display order
    """
    inputs = state.clinical_inputs
    lines = [
        {'label': 'Tender Joints', 'value': str(len(state.tender_joints))},
        {'label': 'Swollen Joints', 'value': str(len(state.swollen_joints))},
        {'label': 'PGA', 'value': format_measure(inputs.pga, 'mm')},
        {'label': 'EGA', 'value': format_measure(inputs.ega, 'mm')},
        {'label': 'CRP', 'value': format_measure(inputs.crp, 'mg/L')},
        {'label': 'SDAI Score', 'value': f"{state.score}"},
    ]

    if activity_bands and state.score is not None:
        activity = classify_disease_activity(state.score, activity_bands)
        if activity:
            lines.append({'label': 'Disease Activity', 'value': activity.capitalize()})

    return lines


def build_view(state: AssessmentState, catalog) -> Dict[str, Any]:
    """
    Convert an assessment snapshot to what the current screen needs.

    Args:
        state: Current AssessmentState
        catalog: RegionCatalog used to resolve the current region

    Returns:
        dict: {
            'phase': 'TENDER_JOINTS',
            'step': 1,
            'step_count': 4,
            'title': 'Tender Joint Assessment',
            'can_retreat': False,
            'primary_action': 'next',
            # joint phases only
            'subtitle': 'Select all tender joints in the Head & Neck region',
            'region': {'name': 'Head & Neck', 'index': 0, 'count': 5},
            'joints': [{'name': 'Temporomandibular', 'selected': False}, ...],
            'selected_count': 0,
            # CLINICAL_ASSESSMENT only
            'clinical_inputs': [{'field': 'pga', 'label': ..., 'value': 0.0, ...}, ...],
            # RESULTS only
            'results': [{'label': 'Tender Joints', 'value': '0'}, ...],
        }
    """
    phase = state.phase
    view = {
        'phase': phase.value,
        'step': PHASE_ORDER.index(phase) + 1,
        'step_count': len(PHASE_ORDER),
        'title': PHASE_TITLES[phase],
        'can_retreat': can_retreat(state),
        'primary_action': PRIMARY_ACTIONS[phase],
    }

    if phase in JOINT_SELECTION_PHASES:
        adjective = JOINT_PHASE_ADJECTIVES[phase]
        region = catalog.get_region(state.region_index)
        selected = state.joints_for_phase(phase)

        view['subtitle'] = f"Select all {adjective} joints in the {region.name} region"
        view['region'] = {
            'name': region.name,
            'index': state.region_index,
            'count': catalog.region_count,
        }
        view['joints'] = [
            {'name': joint, 'selected': joint in selected}
            for joint in region.joints
        ]
        view['selected_count'] = len(selected)

    elif phase == AssessmentPhase.CLINICAL_ASSESSMENT:
        view['clinical_inputs'] = [
            {
                'field': field,
                'label': CLINICAL_INPUT_LABELS[field]['label'],
                'description': CLINICAL_INPUT_LABELS[field]['description'],
                'unit': CLINICAL_INPUT_LABELS[field]['unit'],
                'min': lower,
                'max': upper,
                'value': getattr(state.clinical_inputs, field),
            }
            for field, (lower, upper) in CLINICAL_INPUT_BOUNDS.items()
        ]

    else:
        view['results'] = build_results_lines(state, catalog.activity_bands)

    return view
