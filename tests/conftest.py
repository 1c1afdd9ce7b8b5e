"""
LaserZone Hub - Test Fixtures
Fresh in-memory database per test, plus logged-in clients for each role
"""
import pytest

from laserzone_hub import create_app
from laserzone_hub.database import db
from laserzone_hub.models.db_models import UserRole, ShiftType
from laserzone_hub.services.db_service import create_user

MANAGER_EMAIL = 'manager@laserzone.ro'
MANAGER_PASSWORD = 'manager123'
EMPLOYEE_EMAIL = 'angajat@laserzone.ro'
EMPLOYEE_PASSWORD = 'angajat123'

SIGNATURE = {'dataUrl': 'data:image/png;base64,iVBORw0KGgo=', 'signerName': 'Alexandru Popescu'}


@pytest.fixture
def app(tmp_path):
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    app.config['VIDEO_CHUNK_FOLDER'] = str(tmp_path / 'chunks')

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def manager(app):
    return create_user(MANAGER_EMAIL, 'Alexandru Popescu', MANAGER_PASSWORD, role=UserRole.MANAGER)


@pytest.fixture
def employee(app):
    return create_user(
        EMPLOYEE_EMAIL, 'Ion Vasile', EMPLOYEE_PASSWORD,
        role=UserRole.EMPLOYEE, shift_type=ShiftType.MORNING, is_new=True
    )


@pytest.fixture
def other_employee(app):
    return create_user(
        'elena@laserzone.ro', 'Elena Dumitrescu', 'elena123',
        role=UserRole.EMPLOYEE, shift_type=ShiftType.EVENING
    )


def login(app, email, password):
    """Test client carrying the session cookie set by /api/auth/login"""
    test_client = app.test_client()
    response = test_client.post('/api/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return test_client


@pytest.fixture
def manager_client(app, manager):
    return login(app, MANAGER_EMAIL, MANAGER_PASSWORD)


@pytest.fixture
def employee_client(app, employee):
    return login(app, EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD)
