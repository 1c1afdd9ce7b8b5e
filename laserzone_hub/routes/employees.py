"""
LaserZone Hub - Employee Routes
Staff directory and the first-login onboarding flag
"""
from flask import Blueprint, request, jsonify
import logging

from laserzone_hub.models.db_models import UserRole, ShiftType
from laserzone_hub.routes.auth import token_required
from laserzone_hub.services.db_service import DataService
from laserzone_hub.services.warning_service import warning_service

logger = logging.getLogger(__name__)

employees_bp = Blueprint('employees', __name__)
users_bp = Blueprint('users', __name__)
data_service = DataService()


@employees_bp.route('', methods=['GET'])
@token_required
def list_employees(current_user):
    """
    Active staff ordered by name

    GET /api/employees?role=angajat&shift=dimineata
    """
    role = request.args.get('role')
    shift = request.args.get('shift')

    if role and role not in UserRole.ALL:
        return jsonify({'error': 'Rol invalid'}), 400
    if shift and shift not in ShiftType.ALL:
        return jsonify({'error': 'Tura invalida'}), 400

    users = data_service.get_users(role=role, shift=shift)
    return jsonify([u.to_dict() for u in users])


@employees_bp.route('/<user_id>', methods=['GET'])
@token_required
def get_employee(current_user, user_id):
    """Employee profile with a summary of their warnings"""
    user = data_service.get_user(user_id)
    if not user:
        return jsonify({'error': 'Angajatul nu a fost gasit'}), 404

    result = user.to_dict()
    if current_user.is_manager or current_user.id == user.id:
        result['warningsSummary'] = warning_service.summary(user.id)
    return jsonify(result)


@users_bp.route('/<user_id>/onboarding-complete', methods=['POST'])
@token_required
def mark_onboarding_complete(current_user, user_id):
    """Clear the isNew flag (the user themselves or a manager)"""
    if current_user.id != user_id and not current_user.is_manager:
        return jsonify({'error': 'Acces interzis'}), 403

    user = data_service.get_user(user_id)
    if not user:
        return jsonify({'error': 'Utilizator negasit'}), 404

    user.is_new = False
    data_service.save_user(user)
    logger.info(f"User {user.id} finished first-login onboarding")
    return jsonify({'success': True, 'user': user.to_dict()})
