"""
LaserZone Hub - Calendar Routes
Capacity, reservations, customers and customer tags
"""
from flask import Blueprint, request, jsonify
import logging

from laserzone_hub.routes.auth import token_required, manager_required
from laserzone_hub.services.calendar_service import calendar_service
from laserzone_hub.services.capacity_service import capacity_service
from laserzone_hub.utils import parse_date

logger = logging.getLogger(__name__)

calendar_bp = Blueprint('calendar', __name__)


# ==========================================
# CAPACITY
# ==========================================

@calendar_bp.route('/capacity/settings', methods=['GET'])
@token_required
def get_capacity_settings(current_user):
    """Current capacity settings (defaults when never saved)"""
    return jsonify(capacity_service.get_settings().to_dict())


@calendar_bp.route('/capacity/settings', methods=['PUT'])
@manager_required
def update_capacity_settings(current_user):
    """
    Update capacity settings (manager only)

    PUT /api/calendar/capacity/settings
    {
        "defaultCapacity": 40,
        "warningThreshold": 0.8,
        "criticalThreshold": 1.0
    }
    """
    data = request.get_json(silent=True) or {}
    settings = capacity_service.update_settings(data)
    return jsonify(settings.to_dict())


@calendar_bp.route('/capacity', methods=['GET'])
@token_required
def get_capacity(current_user):
    """
    Slot occupancy for a day

    GET /api/calendar/capacity?date=2026-03-14
    """
    date = request.args.get('date')
    if not date:
        return jsonify({'error': 'Parametrul date este obligatoriu (format: YYYY-MM-DD)'}), 400
    if parse_date(date) is None:
        return jsonify({'error': 'Format data invalid (asteptat: YYYY-MM-DD)'}), 400

    return jsonify(capacity_service.get_slots(date))


# ==========================================
# RESERVATIONS
# ==========================================

@calendar_bp.route('/reservations', methods=['GET'])
@token_required
def list_reservations(current_user):
    """
    Active reservations for a day, earliest first

    GET /api/calendar/reservations?date=2026-03-14&customerId=cust_abc
    """
    reservations = calendar_service.list_reservations(
        request.args.get('date'),
        customer_id=request.args.get('customerId')
    )
    return jsonify([r.to_dict(include_customer=True) for r in reservations])


@calendar_bp.route('/reservations', methods=['POST'])
@token_required
def create_reservation(current_user):
    """
    Create a reservation

    POST /api/calendar/reservations
    {
        "customerId": "cust_abc123",
        "date": "2026-03-14",
        "startTime": "14:00",
        "endTime": "15:00",
        "partySize": 12,
        "occasion": "birthday",
        "notes": "Tort adus de client",
        "isWalkup": false,
        "conflictOverridden": true
    }
    """
    data = request.get_json(silent=True) or {}
    result = calendar_service.create_reservation(data, current_user)

    body = result['reservation'].to_dict(include_customer=True)
    if result['conflict']:
        body['conflict'] = result['conflict']
    return jsonify(body), 201


@calendar_bp.route('/reservations/<reservation_id>', methods=['GET'])
@token_required
def get_reservation(current_user, reservation_id):
    reservation = calendar_service.get_reservation(reservation_id)
    return jsonify(reservation.to_dict(include_customer=True))


@calendar_bp.route('/reservations/<reservation_id>', methods=['PUT'])
@token_required
def update_reservation(current_user, reservation_id):
    """
    Partial update

    PUT /api/calendar/reservations/<id>
    {
        "startTime": "15:00",
        "partySize": 10,
        "status": "completed"
    }
    """
    reservation = calendar_service.get_reservation(reservation_id)
    data = request.get_json(silent=True) or {}
    reservation = calendar_service.update_reservation(reservation, data, current_user)
    return jsonify(reservation.to_dict(include_customer=True))


@calendar_bp.route('/reservations/<reservation_id>', methods=['DELETE'])
@token_required
def cancel_reservation(current_user, reservation_id):
    """Soft cancel"""
    reservation = calendar_service.get_reservation(reservation_id)
    calendar_service.cancel_reservation(reservation, current_user)
    return jsonify({'success': True})


# ==========================================
# CUSTOMERS
# ==========================================

@calendar_bp.route('/customers', methods=['GET'])
@token_required
def list_customers(current_user):
    """
    Customer directory

    GET /api/calendar/customers?q=popescu
    """
    customers = calendar_service.search_customers(request.args.get('q'))
    return jsonify([c.to_dict() for c in customers])


@calendar_bp.route('/customers', methods=['POST'])
@token_required
def create_customer(current_user):
    """
    Create a customer

    POST /api/calendar/customers
    {
        "name": "Andrei Ionescu",
        "phone": "0722123456",
        "email": "andrei@example.com",
        "notes": "Prefera seara"
    }
    """
    data = request.get_json(silent=True) or {}
    customer = calendar_service.create_customer(data)
    return jsonify(customer.to_dict()), 201


@calendar_bp.route('/customers/<customer_id>', methods=['GET'])
@token_required
def get_customer(current_user, customer_id):
    """Customer profile with reservation history, newest first"""
    customer = calendar_service.get_customer(customer_id)
    return jsonify(customer.to_dict(include_reservations=True))


@calendar_bp.route('/customers/<customer_id>', methods=['PUT'])
@token_required
def update_customer(current_user, customer_id):
    customer = calendar_service.get_customer(customer_id)
    data = request.get_json(silent=True) or {}
    customer = calendar_service.update_customer(customer, data)
    return jsonify(customer.to_dict())


@calendar_bp.route('/customers/<customer_id>', methods=['DELETE'])
@token_required
def delete_customer(current_user, customer_id):
    customer = calendar_service.get_customer(customer_id)
    calendar_service.delete_customer(customer)
    return jsonify({'success': True})


@calendar_bp.route('/customers/<customer_id>/tags', methods=['POST'])
@token_required
def add_customer_tag(current_user, customer_id):
    """
    Attach a tag

    POST /api/calendar/customers/<id>/tags
    {"tagId": "tag_abc123"}
    """
    customer = calendar_service.get_customer(customer_id)
    data = request.get_json(silent=True) or {}
    calendar_service.add_customer_tag(customer, data.get('tagId'))
    return jsonify({'success': True}), 201


@calendar_bp.route('/customers/<customer_id>/tags', methods=['DELETE'])
@token_required
def remove_customer_tag(current_user, customer_id):
    data = request.get_json(silent=True) or {}
    tag_id = data.get('tagId') or request.args.get('tagId')
    customer = calendar_service.get_customer(customer_id)
    calendar_service.remove_customer_tag(customer, tag_id)
    return jsonify({'success': True})


# ==========================================
# TAGS
# ==========================================

@calendar_bp.route('/tags', methods=['GET'])
@token_required
def list_tags(current_user):
    return jsonify([t.to_dict() for t in calendar_service.list_tags()])


@calendar_bp.route('/tags', methods=['POST'])
@token_required
def create_tag(current_user):
    """
    Create a tag

    POST /api/calendar/tags
    {"name": "VIP", "color": "#FFD700"}
    """
    data = request.get_json(silent=True) or {}
    tag = calendar_service.create_tag(data)
    return jsonify(tag.to_dict()), 201


@calendar_bp.route('/tags/<tag_id>', methods=['DELETE'])
@token_required
def delete_tag(current_user, tag_id):
    tag = calendar_service.get_tag(tag_id)
    calendar_service.delete_tag(tag)
    return jsonify({'success': True})
