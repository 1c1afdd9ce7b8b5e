"""
LaserZone Hub - Authentication Routes
Login, logout, session lookup and the auth decorators used by every blueprint
"""
from flask import Blueprint, request, jsonify, current_app
from functools import wraps
import jwt
import logging
from datetime import datetime

from laserzone_hub.models.db_models import DBUser, UserRole
from laserzone_hub.services.db_service import DataService

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)
data_service = DataService()

MIN_PASSWORD_LENGTH = 6


def _read_token():
    """Session cookie first, then an Authorization: Bearer header"""
    token = request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])
    if not token:
        auth_header = request.headers.get('Authorization', '')
        if auth_header.startswith('Bearer '):
            token = auth_header.split(' ', 1)[1]
    return token


def token_required(f):
    """Decorator to require a valid session; passes the user as first argument"""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _read_token()
        if not token:
            return jsonify({'error': 'Neautorizat'}), 401

        try:
            payload = jwt.decode(
                token,
                current_app.config['JWT_SECRET_KEY'],
                algorithms=['HS256']
            )
        except jwt.ExpiredSignatureError:
            return jsonify({'error': 'Neautorizat', 'message': 'Sesiunea a expirat'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'error': 'Neautorizat'}), 401

        current_user = data_service.get_user(payload.get('user_id'))
        if not current_user or not current_user.is_active:
            return jsonify({'error': 'Neautorizat'}), 401

        return f(current_user, *args, **kwargs)

    return decorated


def manager_required(f):
    """Decorator to require the manager role"""
    @wraps(f)
    @token_required
    def decorated(current_user, *args, **kwargs):
        if current_user.role != UserRole.MANAGER:
            return jsonify({'error': 'Acces interzis'}), 403
        return f(current_user, *args, **kwargs)
    return decorated


def generate_token(user: DBUser) -> str:
    """Generate JWT token for user"""
    payload = {
        'user_id': user.id,
        'email': user.email,
        'role': user.role,
        'exp': datetime.utcnow() + current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm='HS256'
    )


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    User login

    POST /api/auth/login
    {
        "email": "manager@laserzone.ro",
        "password": "manager123"
    }
    """
    data = request.get_json(silent=True) or {}

    if not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Email si parola sunt obligatorii'}), 400

    user = data_service.get_user_by_email(data['email'].strip())

    if not user or not user.verify_password(data['password']):
        logger.info(f"Failed login for {data['email']}")
        return jsonify({'error': 'Email sau parola incorecta'}), 401

    if not user.is_active:
        return jsonify({'error': 'Cont dezactivat'}), 401

    data_service.update_last_login(user.id)

    token = generate_token(user)
    response = jsonify({
        'token': token,
        'user': user.to_dict()
    })
    response.set_cookie(
        current_app.config['AUTH_COOKIE_NAME'],
        token,
        max_age=int(current_app.config['JWT_ACCESS_TOKEN_EXPIRES'].total_seconds()),
        httponly=True,
        secure=current_app.config['AUTH_COOKIE_SECURE'],
        samesite='Lax'
    )
    logger.info(f"User {user.id} logged in")
    return response


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Clear the session cookie"""
    response = jsonify({'success': True})
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'])
    return response


@auth_bp.route('/me', methods=['GET'])
@token_required
def get_current_user(current_user):
    """Get current authenticated user"""
    return jsonify(current_user.to_dict())


@auth_bp.route('/change-password', methods=['POST'])
@token_required
def change_password(current_user):
    """
    Change password

    POST /api/auth/change-password
    {
        "currentPassword": "old123",
        "newPassword": "new456"
    }
    """
    data = request.get_json(silent=True) or {}

    if not data.get('currentPassword') or not data.get('newPassword'):
        return jsonify({'error': 'Parola curenta si parola noua sunt obligatorii'}), 400

    if len(data['newPassword']) < MIN_PASSWORD_LENGTH:
        return jsonify({'error': f'Parola noua trebuie sa aiba cel putin {MIN_PASSWORD_LENGTH} caractere'}), 400

    if not current_user.verify_password(data['currentPassword']):
        return jsonify({'error': 'Parola curenta este incorecta'}), 401

    current_user.set_password(data['newPassword'])
    data_service.save_user(current_user)

    return jsonify({'message': 'Parola a fost actualizata'})
