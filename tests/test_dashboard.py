"""
LaserZone Hub - Dashboard Tests
"""
import json
from datetime import datetime, date, timedelta

import pytest

from laserzone_hub.database import db
from laserzone_hub.models.db_models import DBAuditLog
from laserzone_hub.services.calendar_service import calendar_service
from laserzone_hub.services.checklist_service import checklist_service
from laserzone_hub.services.dashboard_service import (
    dashboard_service, relative_time, describe_activity, week_dates
)
from laserzone_hub.services.onboarding_service import onboarding_service

TODAY = date(2026, 3, 14)
NOW = datetime(2026, 3, 14, 12, 0)


def audit_entry(action, entity_type, details=None, created_at=NOW, user_name='Ion Vasile'):
    entry = DBAuditLog(
        user_id='user_1',
        user_name=user_name,
        action=action,
        entity_type=entity_type,
        entity_id='ent_1',
        details=None if details is None else json.dumps(details),
        created_at=created_at
    )
    db.session.add(entry)
    db.session.commit()
    return entry


class TestRelativeTime:
    """Romanian 'time ago' phrases"""

    @pytest.mark.parametrize('delta, expected', [
        (timedelta(seconds=20), 'in urma cu mai putin de un minut'),
        (timedelta(seconds=70), 'in urma cu un minut'),
        (timedelta(minutes=10), 'in urma cu 10 minute'),
        (timedelta(minutes=50), 'in urma cu aproximativ o ora'),
        (timedelta(hours=3), 'in urma cu aproximativ 3 ore'),
        (timedelta(hours=30), 'in urma cu o zi'),
        (timedelta(days=5), 'in urma cu 5 zile'),
        (timedelta(days=35), 'in urma cu aproximativ o luna'),
        (timedelta(days=100), 'in urma cu 3 luni'),
        (timedelta(days=400), 'in urma cu aproximativ un an'),
        (timedelta(days=800), 'in urma cu aproximativ 2 ani'),
    ])
    def test_phrases(self, delta, expected):
        assert relative_time(NOW - delta, NOW) == expected

    def test_future_timestamp_is_clamped(self):
        assert relative_time(NOW + timedelta(minutes=5), NOW) == 'in urma cu mai putin de un minut'


class TestDescribeActivity:
    """Audit entry to feed wording"""

    def test_template_created(self, app):
        entry = audit_entry('template_created', 'template', {'templateName': 'Deschidere'})
        assert describe_activity(entry) == {'action': 'a creat', 'target': 'Template: Deschidere', 'type': 'checklist'}

    def test_blocked_item(self, app):
        entry = audit_entry('item_checked', 'item', {'blocked': True, 'itemLabel': 'Verifica iluminatul'})
        assert describe_activity(entry)['action'] == 'a incercat sa bifeze'
        assert describe_activity(entry)['target'] == 'Verifica iluminatul'

    def test_reservation_cancelled(self, app):
        entry = audit_entry('reservation_cancelled', 'reservation')
        assert describe_activity(entry) == {'action': 'a anulat', 'target': 'Rezervare', 'type': 'reservation'}

    def test_warning(self, app):
        entry = audit_entry('warning_issued', 'warning')
        assert describe_activity(entry)['type'] == 'warning'


class TestWeekDates:

    def test_week_starts_monday(self):
        dates = week_dates(TODAY)

        assert dates[0] == '2026-03-09'
        assert dates[-1] == '2026-03-15'
        assert len(dates) == 7


class TestActivityFeed:
    """GET /api/dashboard/activity"""

    def test_newest_first_with_limit(self, app):
        audit_entry('template_created', 'template', {'templateName': 'Vechi'}, created_at=NOW - timedelta(hours=2))
        audit_entry('reservation_created', 'reservation', created_at=NOW - timedelta(minutes=5))

        feed = dashboard_service.get_activity(limit=10, now=NOW)

        assert [a['action'] for a in feed] == ['a adaugat', 'a creat']
        assert feed[0]['time'] == 'in urma cu 5 minute'
        assert feed[0]['user'] == 'Ion Vasile'
        assert len(dashboard_service.get_activity(limit=1, now=NOW)) == 1

    def test_endpoint(self, employee_client):
        audit_entry('reservation_created', 'reservation', created_at=datetime.utcnow())

        data = employee_client.get('/api/dashboard/activity?limit=5').get_json()

        assert len(data) == 1
        assert set(data[0]) == {'id', 'user', 'action', 'target', 'time', 'type'}

    def test_requires_login(self, client):
        assert client.get('/api/dashboard/activity').status_code == 401


class TestStats:
    """Stat cards per role"""

    @pytest.fixture
    def busy_day(self, app, manager, employee):
        template = checklist_service.create_template({
            'name': 'Pauza', 'type': 'general', 'items': [{'label': 'Aeriseste arena'}]
        }, manager)
        done = checklist_service.create_instance({
            'templateId': template.id, 'assignedToId': employee.id, 'date': TODAY.isoformat()
        }, manager)
        checklist_service.check_item(done, template.items[0].id, employee, now=NOW)
        checklist_service.create_instance({
            'templateId': template.id, 'assignedToId': employee.id, 'date': TODAY.isoformat()
        }, manager)
        # earlier the same week
        checklist_service.create_instance({
            'templateId': template.id, 'assignedToId': employee.id, 'date': '2026-03-10'
        }, manager)

        customer = calendar_service.create_customer({'name': 'Maria Pop', 'phone': '0733123456'})
        calendar_service.create_reservation({
            'customerId': customer.id, 'date': TODAY.isoformat(),
            'startTime': '14:00', 'endTime': '15:00', 'partySize': 8, 'occasion': 'regular'
        }, manager)

        onboarding_service.initialize(employee.id, employee.name, manager)

    def test_manager_cards(self, app, busy_day):
        stats = dashboard_service.manager_stats(TODAY)

        assert [s['label'] for s in stats] == [
            'Angajati activi azi', 'Checklisturi completate', 'Rezervari azi', 'Onboarding in asteptare'
        ]
        assert stats[0]['value'] == 1
        assert stats[1]['value'] == '1/2'
        assert stats[1]['change'] == '50%'
        assert stats[2]['value'] == 1
        assert stats[3]['value'] == 1

    def test_employee_cards(self, app, busy_day, employee):
        stats = dashboard_service.employee_stats(employee, TODAY)

        assert stats[0] == {'label': 'Task-uri de azi', 'value': 2, 'change': '1 completate', 'changeType': 'neutral'}
        assert stats[1]['value'] == '1/2'
        assert stats[2]['value'] == 3

    def test_empty_day(self, app, employee):
        stats = dashboard_service.employee_stats(employee, TODAY)

        assert stats[1]['value'] == '0/0'
        assert stats[1]['change'] == '0%'

    def test_endpoint_by_role(self, manager_client, employee_client):
        assert len(manager_client.get('/api/dashboard/stats').get_json()['stats']) == 4
        assert len(employee_client.get('/api/dashboard/stats').get_json()['stats']) == 3
