"""
LaserZone Hub - Auth Tests
"""
import jwt
from datetime import datetime, timedelta

import pytest

from laserzone_hub import create_app
from laserzone_hub.config import TestingConfig
from laserzone_hub.database import db
from tests.conftest import MANAGER_EMAIL, MANAGER_PASSWORD, EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD


class TestLogin:
    """POST /api/auth/login"""

    def test_login_sets_session_cookie(self, app, client, manager):
        response = client.post('/api/auth/login', json={'email': MANAGER_EMAIL, 'password': MANAGER_PASSWORD})

        assert response.status_code == 200
        data = response.get_json()
        assert data['user']['email'] == MANAGER_EMAIL
        assert data['user']['role'] == 'manager'
        assert data['token']
        cookie = response.headers.get('Set-Cookie')
        assert app.config['AUTH_COOKIE_NAME'] in cookie
        assert 'HttpOnly' in cookie

    def test_login_is_case_insensitive_on_email(self, client, manager):
        response = client.post('/api/auth/login', json={'email': 'MANAGER@laserzone.ro', 'password': MANAGER_PASSWORD})
        assert response.status_code == 200

    def test_login_records_last_login(self, client, manager):
        client.post('/api/auth/login', json={'email': MANAGER_EMAIL, 'password': MANAGER_PASSWORD})
        assert manager.last_login is not None

    def test_missing_fields(self, client):
        response = client.post('/api/auth/login', json={'email': MANAGER_EMAIL})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email si parola sunt obligatorii'

    def test_wrong_password(self, client, manager):
        response = client.post('/api/auth/login', json={'email': MANAGER_EMAIL, 'password': 'gresit'})

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Email sau parola incorecta'

    def test_unknown_user(self, client):
        response = client.post('/api/auth/login', json={'email': 'nimeni@laserzone.ro', 'password': 'x'})
        assert response.status_code == 401

    def test_inactive_user(self, client, employee):
        employee.is_active = False

        response = client.post('/api/auth/login', json={'email': EMPLOYEE_EMAIL, 'password': EMPLOYEE_PASSWORD})

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Cont dezactivat'


class TestSession:
    """Cookie and bearer token handling"""

    def test_me_requires_session(self, client):
        response = client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Neautorizat'

    def test_me_with_cookie(self, manager_client):
        response = manager_client.get('/api/auth/me')

        assert response.status_code == 200
        assert response.get_json()['email'] == MANAGER_EMAIL

    def test_me_with_bearer_token(self, client, manager):
        token = client.post(
            '/api/auth/login', json={'email': MANAGER_EMAIL, 'password': MANAGER_PASSWORD}
        ).get_json()['token']

        fresh = client.application.test_client()
        response = fresh.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200
        assert response.get_json()['id'] == manager.id

    def test_expired_token(self, app, client, manager):
        token = jwt.encode(
            {'user_id': manager.id, 'exp': datetime.utcnow() - timedelta(minutes=1)},
            app.config['JWT_SECRET_KEY'],
            algorithm='HS256'
        )

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401
        assert response.get_json()['message'] == 'Sesiunea a expirat'

    def test_token_with_wrong_secret(self, client, manager):
        token = jwt.encode(
            {'user_id': manager.id, 'exp': datetime.utcnow() + timedelta(hours=1)},
            'another-secret',
            algorithm='HS256'
        )
        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401

    def test_logout_clears_cookie(self, manager_client):
        response = manager_client.post('/api/auth/logout')
        assert response.status_code == 200

        assert manager_client.get('/api/auth/me').status_code == 401

    def test_manager_only_route_rejects_employee(self, employee_client):
        response = employee_client.put('/api/calendar/capacity/settings', json={'defaultCapacity': 30})

        assert response.status_code == 403
        assert response.get_json()['error'] == 'Acces interzis'


class TestChangePassword:
    """POST /api/auth/change-password"""

    def test_change_password(self, app, employee_client, employee):
        response = employee_client.post('/api/auth/change-password', json={
            'currentPassword': EMPLOYEE_PASSWORD,
            'newPassword': 'parola-noua'
        })

        assert response.status_code == 200
        assert employee.verify_password('parola-noua')

    def test_new_password_too_short(self, employee_client):
        response = employee_client.post('/api/auth/change-password', json={
            'currentPassword': EMPLOYEE_PASSWORD,
            'newPassword': '123'
        })
        assert response.status_code == 400

    def test_wrong_current_password(self, employee_client):
        response = employee_client.post('/api/auth/change-password', json={
            'currentPassword': 'gresit',
            'newPassword': 'parola-noua'
        })
        assert response.status_code == 401


class TestAppEndpoints:
    """Health and info endpoints"""

    def test_health(self, client):
        data = client.get('/health').get_json()

        assert data['status'] == 'healthy'
        assert data['database'] == 'connected'
        assert data['scheduler'] == 'not_initialized'

    def test_api_info(self, client):
        data = client.get('/api').get_json()
        assert data['endpoints']['calendar'] == '/api/calendar'

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nu-exista')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Resursa negasita'


class TestLoginRateLimit:
    """Login attempts are throttled per client address"""

    @pytest.fixture
    def limited_client(self, monkeypatch):
        monkeypatch.setattr(TestingConfig, 'RATELIMIT_ENABLED', True)
        monkeypatch.setattr(TestingConfig, 'LOGIN_RATE_LIMIT', '3 per minute')
        app = create_app('testing')
        with app.app_context():
            yield app.test_client()
            db.session.remove()
            db.drop_all()

    def test_fourth_attempt_is_rejected(self, limited_client):
        credentials = {'email': 'nimeni@laserzone.ro', 'password': 'gresit'}

        statuses = [limited_client.post('/api/auth/login', json=credentials).status_code for _ in range(4)]

        assert statuses == [401, 401, 401, 429]

    def test_limit_is_json(self, limited_client):
        for _ in range(3):
            limited_client.post('/api/auth/login', json={'email': 'nimeni@laserzone.ro', 'password': 'x'})

        response = limited_client.post('/api/auth/login', json={'email': 'nimeni@laserzone.ro', 'password': 'x'})

        assert response.status_code == 429
        assert response.get_json()['error'] == 'Prea multe cereri'

    def test_other_routes_keep_default_limits(self, limited_client):
        for _ in range(5):
            assert limited_client.get('/api').status_code == 200
