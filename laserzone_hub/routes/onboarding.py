"""
LaserZone Hub - Onboarding Routes
New-employee wizard: NDA, documents, training video, quiz, equipment handoff
"""
from flask import Blueprint, request, jsonify
import logging

from laserzone_hub.routes.auth import token_required, manager_required
from laserzone_hub.services.onboarding_service import onboarding_service
from laserzone_hub.services.onboarding_config_service import onboarding_config_service
from laserzone_hub.utils import safe_bool

logger = logging.getLogger(__name__)

onboarding_bp = Blueprint('onboarding', __name__)


def _own_progress(current_user, employee_id):
    onboarding_service.ensure_access(current_user, employee_id)
    return onboarding_service.require_progress(employee_id)


@onboarding_bp.route('', methods=['GET'])
@manager_required
def list_progress(current_user):
    """
    All onboarding records, newest first

    GET /api/onboarding?incomplete=true
    """
    incomplete = safe_bool(request.args.get('incomplete'))
    records = onboarding_service.list_progress(incomplete_only=incomplete)
    return jsonify([p.to_dict() for p in records])


@onboarding_bp.route('/<employee_id>', methods=['GET'])
@token_required
def get_progress(current_user, employee_id):
    progress = _own_progress(current_user, employee_id)
    return jsonify(progress.to_dict())


@onboarding_bp.route('/<employee_id>', methods=['POST'])
@manager_required
def initialize(current_user, employee_id):
    """
    Start onboarding for an employee

    POST /api/onboarding/<employeeId>
    {"employeeName": "Maria Popescu"}
    """
    data = request.get_json(silent=True) or {}
    progress = onboarding_service.initialize(employee_id, data.get('employeeName'), current_user)
    return jsonify(progress.to_dict()), 201


@onboarding_bp.route('/<employee_id>', methods=['PUT'])
@token_required
def update_progress(current_user, employee_id):
    """
    Move the wizard to another step

    PUT /api/onboarding/<employeeId>
    {"currentStep": "documents"}
    """
    progress = _own_progress(current_user, employee_id)
    data = request.get_json(silent=True) or {}
    progress = onboarding_service.update(progress, data)
    return jsonify(progress.to_dict())


@onboarding_bp.route('/<employee_id>/nda', methods=['POST'])
@token_required
def sign_nda(current_user, employee_id):
    """
    Sign the NDA

    POST /api/onboarding/<employeeId>/nda
    {"signatureDataUrl": "data:image/png;base64,...", "signedByName": "Maria Popescu"}
    """
    progress = _own_progress(current_user, employee_id)
    data = request.get_json(silent=True) or {}
    progress = onboarding_service.sign_nda(progress, data, current_user)
    return jsonify(progress.to_dict())


@onboarding_bp.route('/<employee_id>/documents', methods=['PUT'])
@token_required
def update_document(current_user, employee_id):
    """
    Track reading time or confirm a document

    PUT /api/onboarding/<employeeId>/documents
    {"documentId": "doc_abc", "timeSpentSeconds": 45, "confirmed": true}
    """
    progress = _own_progress(current_user, employee_id)
    data = request.get_json(silent=True) or {}
    progress = onboarding_service.update_document(progress, data, current_user)
    return jsonify(progress.to_dict())


@onboarding_bp.route('/<employee_id>/video', methods=['PUT'])
@token_required
def update_video(current_user, employee_id):
    """
    Report training video position

    PUT /api/onboarding/<employeeId>/video
    {"lastPosition": 120, "furthestReached": 130, "totalDuration": 600, "completed": false}
    """
    progress = _own_progress(current_user, employee_id)
    data = request.get_json(silent=True) or {}
    progress = onboarding_service.update_video(progress, data, current_user)
    return jsonify(progress.to_dict())


@onboarding_bp.route('/<employee_id>/quiz', methods=['POST'])
@token_required
def submit_quiz(current_user, employee_id):
    """
    Submit quiz answers; scoring happens here, not in the browser

    POST /api/onboarding/<employeeId>/quiz
    {"answers": {"q_abc": "opt_1", "q_def": ["opt_2", "opt_3"], "q_ghi": "text"}}
    """
    progress = _own_progress(current_user, employee_id)
    data = request.get_json(silent=True) or {}
    config = onboarding_config_service.get_config()

    outcome = onboarding_service.submit_quiz(progress, data.get('answers'), current_user, config)

    result = outcome['progress'].to_dict()
    result['_quizResult'] = {
        'score': outcome['result']['score'],
        'passed': outcome['result']['passed']
    }
    return jsonify(result)


@onboarding_bp.route('/<employee_id>/handoff', methods=['POST'])
@token_required
def record_handoff(current_user, employee_id):
    """
    Equipment handoff, signed by the manager then confirmed by the employee

    POST /api/onboarding/<employeeId>/handoff
    {"type": "manager", "signature": {"dataUrl": "data:image/png;base64,...", "signerName": "Ion"}}
    {"type": "employee"}
    """
    progress = _own_progress(current_user, employee_id)
    data = request.get_json(silent=True) or {}
    progress = onboarding_service.record_handoff(progress, data, current_user)
    return jsonify(progress.to_dict())


@onboarding_bp.route('/<employee_id>/complete', methods=['POST'])
@token_required
def complete(current_user, employee_id):
    progress = _own_progress(current_user, employee_id)
    progress = onboarding_service.complete(progress, current_user)
    return jsonify(progress.to_dict())


@onboarding_bp.route('/<employee_id>/reset', methods=['POST'])
@manager_required
def reset(current_user, employee_id):
    """Restart the wizard from the NDA step"""
    progress = onboarding_service.require_progress(employee_id)
    progress = onboarding_service.reset(progress, current_user)
    return jsonify(progress.to_dict())
