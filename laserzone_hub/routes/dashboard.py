"""
LaserZone Hub - Dashboard Routes
"""
from flask import Blueprint, request, jsonify
import logging

from laserzone_hub.routes.auth import token_required
from laserzone_hub.services.dashboard_service import dashboard_service
from laserzone_hub.utils import safe_int

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/activity', methods=['GET'])
@token_required
def get_activity(current_user):
    """
    Recent activity feed

    GET /api/dashboard/activity?limit=10
    """
    limit = safe_int(request.args.get('limit'), 10, min_val=1, max_val=50)
    return jsonify(dashboard_service.get_activity(limit))


@dashboard_bp.route('/stats', methods=['GET'])
@token_required
def get_stats(current_user):
    """Stat cards: four for managers, three for employees"""
    return jsonify({'stats': dashboard_service.get_stats(current_user)})
