"""
Flask Web Application for the Joint Assessment workflow

JSON API in front of AssessmentStateMachine. Holds live assessments in
process memory; nothing is persisted.
"""

from flask import Flask, request, jsonify
import logging
import os

from joint_assessment.commands import (
    Advance,
    ComputeScore,
    FinishAssessment,
    Retreat,
    SelectJoint,
    SetClinicalInput,
    StartAssessment,
)
from joint_assessment.core.assessment_machine import AssessmentStateMachine
from joint_assessment.core.region_catalog import RegionCatalog
from joint_assessment.results import IllegalCommand
from joint_assessment.utils.display_helpers import build_view
from joint_assessment.utils.helpers import generate_assessment_id

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'joint-assessment-secret-key')

# Catalog is loaded once and shared by every assessment
catalog = RegionCatalog(os.environ.get('JOINT_ASSESSMENT_CONFIG'))
machine = AssessmentStateMachine(catalog)

# Live assessments: assessment_id -> AssessmentState
assessments = {}


def _state_payload(assessment_id, state, **extra):
    payload = {
        'success': True,
        'assessment_id': assessment_id,
        'view': build_view(state, catalog),
        'state': state.to_json(),
    }
    payload.update(extra)
    return payload


def _rejected(result: IllegalCommand):
    return jsonify({
        'success': False,
        'error': result.reason,
        'command': result.command_type
    }), 409


def _not_found(assessment_id):
    return jsonify({
        'success': False,
        'error': f'Assessment not found: {assessment_id}'
    }), 404


def _dispatch(assessment_id, command):
    """Apply command to a live assessment and build the response"""
    state = assessments.get(assessment_id)
    if state is None:
        return _not_found(assessment_id)

    result = machine.handle(command, state)

    if isinstance(result, IllegalCommand):
        return _rejected(result)

    assessments[assessment_id] = result.state
    return jsonify(_state_payload(
        assessment_id,
        result.state,
        phase_changed=result.phase_changed
    ))


@app.route('/api/regions', methods=['GET'])
def list_regions():
    """Region catalog"""
    return jsonify({
        'success': True,
        'version': catalog.version,
        'regions': [
            {'name': region.name, 'joints': list(region.joints)}
            for region in catalog.regions
        ]
    })


@app.route('/api/assessments', methods=['POST'])
def start_assessment():
    """Start new assessment"""
    try:
        result = machine.handle(StartAssessment())

        # Short ids can collide; never overwrite a live session
        assessment_id = generate_assessment_id()
        while assessment_id in assessments:
            assessment_id = generate_assessment_id()
        assessments[assessment_id] = result.state

        logger.info(f"New assessment created: {assessment_id}")
        return jsonify(_state_payload(assessment_id, result.state)), 201

    except Exception as e:
        logger.error(f"Error starting assessment: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/assessments/<assessment_id>', methods=['GET'])
def get_assessment(assessment_id):
    """Current view and snapshot"""
    state = assessments.get(assessment_id)
    if state is None:
        return _not_found(assessment_id)
    return jsonify(_state_payload(assessment_id, state))


@app.route('/api/assessments/<assessment_id>', methods=['DELETE'])
def discard_assessment(assessment_id):
    """Drop an unfinished assessment (user navigated away)"""
    if assessments.pop(assessment_id, None) is None:
        return _not_found(assessment_id)

    logger.info(f"Assessment discarded: {assessment_id}")
    return jsonify({
        'success': True,
        'assessment_id': assessment_id
    })


@app.route('/api/assessments/<assessment_id>/joints', methods=['POST'])
def select_joint(assessment_id):
    """Toggle a joint in the current phase"""
    data = request.get_json(silent=True) or {}
    joint = data.get('joint')

    if not isinstance(joint, str) or not joint:
        return jsonify({
            'success': False,
            'error': "Request body must contain 'joint'"
        }), 400

    try:
        return _dispatch(assessment_id, SelectJoint(joint=joint))
    except Exception as e:
        logger.error(f"Error selecting joint: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/assessments/<assessment_id>/advance', methods=['POST'])
def advance(assessment_id):
    """Next region / phase"""
    try:
        return _dispatch(assessment_id, Advance())
    except Exception as e:
        logger.error(f"Error advancing assessment: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/assessments/<assessment_id>/retreat', methods=['POST'])
def retreat(assessment_id):
    """Previous region / phase"""
    try:
        return _dispatch(assessment_id, Retreat())
    except Exception as e:
        logger.error(f"Error retreating assessment: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/assessments/<assessment_id>/clinical-inputs', methods=['POST'])
def set_clinical_input(assessment_id):
    """Set PGA, EGA or CRP"""
    data = request.get_json(silent=True) or {}

    if 'field' not in data or 'value' not in data:
        return jsonify({
            'success': False,
            'error': "Request body must contain 'field' and 'value'"
        }), 400

    if not isinstance(data['field'], str):
        return jsonify({
            'success': False,
            'error': "'field' must be a string"
        }), 400

    try:
        return _dispatch(
            assessment_id,
            SetClinicalInput(field=data['field'], value=data['value'])
        )
    except Exception as e:
        logger.error(f"Error setting clinical input: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/assessments/<assessment_id>/score', methods=['POST'])
def compute_score(assessment_id):
    """Compute SDAI and show results"""
    try:
        return _dispatch(assessment_id, ComputeScore())
    except Exception as e:
        logger.error(f"Error computing score: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/assessments/<assessment_id>/finish', methods=['POST'])
def finish_assessment(assessment_id):
    """Emit final report and end the session"""
    try:
        state = assessments.get(assessment_id)
        if state is None:
            return _not_found(assessment_id)

        result = machine.handle(FinishAssessment(), state)

        if isinstance(result, IllegalCommand):
            return _rejected(result)

        del assessments[assessment_id]

        logger.info(f"Assessment finalized: {assessment_id}")

        return jsonify({
            'success': True,
            'assessment_id': assessment_id,
            'report': result.to_json()
        })

    except Exception as e:
        logger.error(f"Error finishing assessment: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


if __name__ == '__main__':
    print("\n" + "="*60)
    print("JOINT ASSESSMENT SYSTEM - WEB API")
    print("="*60)
    print("\nServer starting...")
    print("API root: http://localhost:5000/api/regions")
    print("\nPress Ctrl+C to stop the server")
    print("="*60 + "\n")

    app.run(debug=False, host='0.0.0.0', port=5000)
