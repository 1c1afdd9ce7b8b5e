"""
LaserZone Hub - Employee Directory Tests
"""
from laserzone_hub.database import db
from laserzone_hub.models.db_models import DBUser, WarningLevel
from laserzone_hub.services.warning_service import warning_service
from tests.conftest import SIGNATURE


class TestEmployeeList:
    """GET /api/employees"""

    def test_ordered_by_name(self, manager_client, manager, employee, other_employee):
        names = [u['name'] for u in manager_client.get('/api/employees').get_json()]

        assert names == ['Alexandru Popescu', 'Elena Dumitrescu', 'Ion Vasile']

    def test_filters(self, employee_client, manager, employee, other_employee):
        staff = employee_client.get('/api/employees?role=angajat').get_json()
        assert {u['email'] for u in staff} == {employee.email, other_employee.email}

        evening = employee_client.get('/api/employees?role=angajat&shift=seara').get_json()
        assert [u['id'] for u in evening] == [other_employee.id]

    def test_inactive_users_hidden(self, manager_client, manager, other_employee):
        other_employee.is_active = False
        db.session.commit()

        ids = [u['id'] for u in manager_client.get('/api/employees').get_json()]
        assert other_employee.id not in ids

    def test_invalid_filters(self, manager_client):
        response = manager_client.get('/api/employees?role=admin')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Rol invalid'

        response = manager_client.get('/api/employees?shift=noapte')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Tura invalida'

    def test_no_password_in_payload(self, manager_client, employee):
        data = manager_client.get('/api/employees').get_json()
        assert all('password' not in u and 'passwordHash' not in u for u in data)


class TestEmployeeProfile:
    """GET /api/employees/<id>"""

    def test_manager_sees_warning_summary(self, manager_client, manager, employee):
        warning_service.create_warning({
            'employeeId': employee.id,
            'level': WarningLevel.VERBAL,
            'category': 'uniform_appearance',
            'description': 'Fara tricou de uniforma',
            'incidentDate': '2026-03-10',
            'managerSignature': SIGNATURE
        }, manager)

        data = manager_client.get(f'/api/employees/{employee.id}').get_json()

        assert data['shiftType'] == 'dimineata'
        assert data['warningsSummary']['total'] == 1
        assert data['warningsSummary']['currentLevel'] == WarningLevel.VERBAL

    def test_self_sees_summary(self, employee_client, employee):
        data = employee_client.get(f'/api/employees/{employee.id}').get_json()
        assert data['warningsSummary']['total'] == 0

    def test_colleague_does_not_see_summary(self, employee_client, other_employee):
        data = employee_client.get(f'/api/employees/{other_employee.id}').get_json()

        assert data['id'] == other_employee.id
        assert 'warningsSummary' not in data

    def test_unknown_employee(self, manager_client):
        response = manager_client.get('/api/employees/user_missing')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Angajatul nu a fost gasit'


class TestOnboardingFlag:
    """POST /api/users/<id>/onboarding-complete"""

    def test_self_completion(self, employee_client, employee):
        response = employee_client.post(f'/api/users/{employee.id}/onboarding-complete')

        assert response.status_code == 200
        assert response.get_json()['user']['isNew'] is False
        assert db.session.get(DBUser, employee.id).is_new is False

    def test_manager_can_complete_for_employee(self, manager_client, employee):
        response = manager_client.post(f'/api/users/{employee.id}/onboarding-complete')
        assert response.get_json()['success'] is True

    def test_colleague_forbidden(self, employee_client, other_employee):
        response = employee_client.post(f'/api/users/{other_employee.id}/onboarding-complete')
        assert response.status_code == 403

    def test_unknown_user(self, manager_client):
        response = manager_client.post('/api/users/user_missing/onboarding-complete')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Utilizator negasit'
