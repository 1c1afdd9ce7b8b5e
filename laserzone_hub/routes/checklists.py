"""
LaserZone Hub - Checklist Routes
Templates, daily instances, item completion and the audit trail
"""
from flask import Blueprint, request, jsonify
import logging

from laserzone_hub.routes.auth import token_required, manager_required
from laserzone_hub.services.checklist_service import checklist_service
from laserzone_hub.services.audit_service import audit_service
from laserzone_hub.utils import safe_int, safe_bool, parse_datetime

logger = logging.getLogger(__name__)

checklists_bp = Blueprint('checklists', __name__)

DEFAULT_AUDIT_LIMIT = 50
MAX_AUDIT_LIMIT = 500


def _template_or_404(template_id):
    template = checklist_service.get_template(template_id)
    if not template or not template.is_active:
        return None
    return template


# ==========================================
# TEMPLATES
# ==========================================

@checklists_bp.route('/templates', methods=['GET'])
@token_required
def list_templates(current_user):
    """Active templates, newest first, items ordered"""
    templates = checklist_service.get_active_templates()
    return jsonify([t.to_dict() for t in templates])


@checklists_bp.route('/templates', methods=['POST'])
@manager_required
def create_template(current_user):
    """
    Create a checklist template

    POST /api/checklists/templates
    {
        "name": "Deschidere arena",
        "type": "opening",
        "timeWindowStartHour": 9,
        "timeWindowEndHour": 10,
        "allowLateCompletion": true,
        "lateWindowMinutes": 30,
        "assignedTo": "all",
        "items": [
            {"label": "Porneste sistemul de sunet", "isRequired": true}
        ]
    }
    """
    data = request.get_json(silent=True) or {}
    template = checklist_service.create_template(data, current_user)
    return jsonify(template.to_dict()), 201


@checklists_bp.route('/templates/<template_id>', methods=['GET'])
@token_required
def get_template(current_user, template_id):
    template = _template_or_404(template_id)
    if not template:
        return jsonify({'error': 'Template negasit'}), 404
    return jsonify(template.to_dict())


@checklists_bp.route('/templates/<template_id>', methods=['PUT'])
@manager_required
def update_template(current_user, template_id):
    """Partial update; `items` replaces every existing item"""
    template = _template_or_404(template_id)
    if not template:
        return jsonify({'error': 'Template negasit'}), 404

    data = request.get_json(silent=True) or {}
    template = checklist_service.update_template(template, data, current_user)
    return jsonify(template.to_dict())


@checklists_bp.route('/templates/<template_id>', methods=['DELETE'])
@manager_required
def delete_template(current_user, template_id):
    template = _template_or_404(template_id)
    if not template:
        return jsonify({'error': 'Template negasit'}), 404

    checklist_service.delete_template(template, current_user)
    return jsonify({'success': True})


# ==========================================
# INSTANCES
# ==========================================

@checklists_bp.route('/instances', methods=['GET'])
@token_required
def list_instances(current_user):
    """
    Checklist instances

    GET /api/checklists/instances?date=2026-03-14&userId=usr_abc&status=pending
    """
    instances = checklist_service.get_instances(
        date=request.args.get('date'),
        user_id=request.args.get('userId'),
        status=request.args.get('status')
    )
    return jsonify([i.to_dict() for i in instances])


@checklists_bp.route('/instances', methods=['POST'])
@token_required
def create_instance(current_user):
    """
    Start a checklist for a day

    POST /api/checklists/instances
    {"templateId": "tpl_abc", "assignedToId": "usr_abc", "date": "2026-03-14"}
    """
    data = request.get_json(silent=True) or {}
    instance = checklist_service.create_instance(data, current_user)
    return jsonify(instance.to_dict()), 201


@checklists_bp.route('/instances/<instance_id>', methods=['GET'])
@token_required
def get_instance(current_user, instance_id):
    instance = checklist_service.get_instance(instance_id)
    if not instance:
        return jsonify({'error': 'Instanta negasita'}), 404
    return jsonify(instance.to_dict())


@checklists_bp.route('/instances/<instance_id>', methods=['PUT'])
@token_required
def update_instance(current_user, instance_id):
    """
    Set instance status

    PUT /api/checklists/instances/<id>
    {"status": "in_progress"}
    """
    instance = checklist_service.get_instance(instance_id)
    if not instance:
        return jsonify({'error': 'Instanta negasita'}), 404

    data = request.get_json(silent=True) or {}
    instance = checklist_service.update_instance_status(instance, data.get('status'))
    return jsonify(instance.to_dict())


@checklists_bp.route('/instances/<instance_id>/items/<item_id>', methods=['PUT'])
@token_required
def update_item(current_user, instance_id, item_id):
    """
    Check or uncheck an item

    PUT /api/checklists/instances/<id>/items/<itemId>
    {"checked": true, "notes": "Totul in regula"}
    """
    instance = checklist_service.get_instance(instance_id)
    if not instance:
        return jsonify({'error': 'Instanta negasita'}), 404

    data = request.get_json(silent=True) or {}
    if not isinstance(data.get('checked'), bool):
        return jsonify({'error': 'Campul checked este obligatoriu'}), 400

    if data['checked']:
        result = checklist_service.check_item(instance, item_id, current_user, notes=data.get('notes'))
    else:
        result = checklist_service.uncheck_item(instance, item_id, current_user)
    return jsonify(result)


# ==========================================
# AUDIT
# ==========================================

@checklists_bp.route('/audit', methods=['GET'])
@token_required
def list_audit(current_user):
    """
    Query the audit trail

    GET /api/checklists/audit?entityType=item&entityId=itm_abc&userId=usr_abc
        &from=2026-03-01T00:00:00&to=2026-03-31T23:59:59&action=item_checked&limit=50
    """
    start_date = end_date = None
    if request.args.get('from'):
        start_date = parse_datetime(request.args['from'])
        if start_date is None:
            return jsonify({'error': 'Parametrul from este invalid'}), 400
    if request.args.get('to'):
        end_date = parse_datetime(request.args['to'])
        if end_date is None:
            return jsonify({'error': 'Parametrul to este invalid'}), 400

    limit = min(max(safe_int(request.args.get('limit'), DEFAULT_AUDIT_LIMIT), 1), MAX_AUDIT_LIMIT)

    logs = audit_service.get_logs(
        action=request.args.get('action'),
        entity_type=request.args.get('entityType'),
        entity_id=request.args.get('entityId'),
        user_id=request.args.get('userId'),
        start_date=start_date,
        end_date=end_date,
        limit=limit
    )
    return jsonify([entry.to_dict() for entry in logs])


@checklists_bp.route('/audit', methods=['POST'])
@token_required
def create_audit(current_user):
    """
    Record a client-side audit event

    POST /api/checklists/audit
    {
        "action": "item_checked",
        "entityType": "item",
        "entityId": "itm_abc",
        "details": {"note": "verificat manual"},
        "wasWithinTimeWindow": true
    }
    """
    data = request.get_json(silent=True) or {}
    if not data.get('action') or not data.get('entityType') or not data.get('entityId'):
        return jsonify({'error': 'action, entityType si entityId sunt obligatorii'}), 400

    entry = audit_service.log(
        action=data['action'],
        entity_type=data['entityType'],
        entity_id=data['entityId'],
        user=current_user,
        details=data.get('details'),
        was_within_time_window=safe_bool(data.get('wasWithinTimeWindow'), True)
    )
    return jsonify(entry.to_dict()), 201
