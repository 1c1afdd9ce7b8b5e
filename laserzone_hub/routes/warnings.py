"""
LaserZone Hub - Warning Routes
Disciplinary warnings with escalation, acknowledgment and refusal
"""
from flask import Blueprint, request, jsonify
import logging

from laserzone_hub.models.db_models import WarningLevel, WarningStatus
from laserzone_hub.routes.auth import token_required
from laserzone_hub.services.warning_service import warning_service
from laserzone_hub.utils import safe_bool

logger = logging.getLogger(__name__)

warnings_bp = Blueprint('warnings', __name__)


@warnings_bp.route('', methods=['GET'])
@token_required
def list_warnings(current_user):
    """
    Warnings, newest first; employees only ever see their own

    GET /api/warnings?employeeId=usr_abc&status=pending_acknowledgment&level=written&active=true
    """
    status = request.args.get('status')
    level = request.args.get('level')
    if status and status not in WarningStatus.ALL:
        return jsonify({'error': 'Status invalid'}), 400
    if level and level not in WarningLevel.ORDER:
        return jsonify({'error': 'Nivel invalid'}), 400

    employee_id = request.args.get('employeeId') if current_user.is_manager else current_user.id

    warnings = warning_service.list_warnings(
        employee_id=employee_id,
        status=status,
        level=level,
        active=safe_bool(request.args.get('active'))
    )
    return jsonify([w.to_dict() for w in warnings])


@warnings_bp.route('', methods=['POST'])
@token_required
def create_warning(current_user):
    """
    Issue a warning (manager only)

    POST /api/warnings
    {
        "employeeId": "usr_abc",
        "level": "written",
        "category": "tardiness",
        "description": "Intarziere de 40 de minute la tura de seara",
        "incidentDate": "2026-03-10",
        "witness": "Ion Ionescu",
        "managerSignature": {"dataUrl": "data:image/png;base64,...", "signerName": "Ana"}
    }
    """
    if not current_user.is_manager:
        return jsonify({'error': 'Doar managerii pot crea avertismente'}), 403

    data = request.get_json(silent=True) or {}
    result = warning_service.create_warning(data, current_user)

    body = result['warning'].to_dict()
    body['escalation'] = result['escalation']
    return jsonify(body), 201


@warnings_bp.route('/templates', methods=['GET'])
@token_required
def list_templates(current_user):
    """Title and default description per violation category"""
    return jsonify(warning_service.templates())


@warnings_bp.route('/pending', methods=['GET'])
@token_required
def list_pending(current_user):
    """Warnings waiting for the current user's signature"""
    warnings = warning_service.pending_for(current_user.id)
    return jsonify([w.to_dict() for w in warnings])


@warnings_bp.route('/<warning_id>', methods=['GET'])
@token_required
def get_warning(current_user, warning_id):
    warning = warning_service.get_warning(warning_id)
    if not current_user.is_manager and warning.employee_id != current_user.id:
        return jsonify({'error': 'Acces interzis'}), 403
    return jsonify(warning.to_dict())


@warnings_bp.route('/<warning_id>', methods=['PUT'])
@token_required
def update_warning(current_user, warning_id):
    """Edit a warning that has not been signed yet"""
    if not current_user.is_manager:
        return jsonify({'error': 'Doar managerii pot modifica avertismente'}), 403

    warning = warning_service.get_warning(warning_id)
    data = request.get_json(silent=True) or {}
    warning = warning_service.update_warning(warning, data)
    return jsonify(warning.to_dict())


@warnings_bp.route('/<warning_id>/acknowledge', methods=['POST'])
@token_required
def acknowledge_warning(current_user, warning_id):
    """
    POST /api/warnings/<id>/acknowledge
    {"signature": {"dataUrl": "data:image/png;base64,..."}, "employeeComments": "Inteleg"}
    """
    warning = warning_service.get_warning(warning_id)
    data = request.get_json(silent=True) or {}
    warning = warning_service.acknowledge(warning, current_user, data)
    return jsonify(warning.to_dict())


@warnings_bp.route('/<warning_id>/refuse', methods=['POST'])
@token_required
def refuse_warning(current_user, warning_id):
    """POST /api/warnings/<id>/refuse {"witnessName": "Ion Ionescu"}"""
    warning = warning_service.get_warning(warning_id)
    data = request.get_json(silent=True) or {}
    warning = warning_service.refuse(warning, current_user, data)
    return jsonify(warning.to_dict())


@warnings_bp.route('/<warning_id>/clear', methods=['POST'])
@token_required
def clear_warning(current_user, warning_id):
    """POST /api/warnings/<id>/clear {"reason": "Emis din greseala"}"""
    if not current_user.is_manager:
        return jsonify({'error': 'Doar managerii pot anula avertismente'}), 403

    warning = warning_service.get_warning(warning_id)
    data = request.get_json(silent=True) or {}
    warning = warning_service.clear(warning, current_user, data)
    return jsonify(warning.to_dict())
