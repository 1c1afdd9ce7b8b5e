"""
LaserZone Hub - Calendar Tests
Customers, tags, reservations and capacity slots
"""
import pytest

from laserzone_hub.models.db_models import DBAuditLog, DBReservation, DBCapacitySettings
from laserzone_hub.services.calendar_service import calendar_service
from laserzone_hub.services.capacity_service import (
    capacity_service, ranges_overlap, default_end_time, CapacityStatus, ConflictSeverity
)
from laserzone_hub.services.errors import ServiceError, NotFoundError
from laserzone_hub.database import db

DAY = '2026-03-14'


@pytest.fixture
def customer(app):
    return calendar_service.create_customer({
        'name': 'Ionescu Alexandru',
        'phone': '0722123456',
        'email': 'alex.ionescu@email.ro'
    })


@pytest.fixture
def small_arena(app):
    settings = DBCapacitySettings(default_capacity=20, warning_threshold=0.8, critical_threshold=1.0)
    db.session.add(settings)
    db.session.commit()
    return settings


def book(customer, user, start, end, party, date=DAY):
    return calendar_service.create_reservation({
        'customerId': customer.id,
        'date': date,
        'startTime': start,
        'endTime': end,
        'partySize': party,
        'occasion': 'regular'
    }, user)


class TestTimeHelpers:
    """Slot arithmetic"""

    def test_overlap_is_half_open(self):
        assert ranges_overlap('10:00', '11:00', '10:30', '11:30')
        assert not ranges_overlap('10:00', '11:00', '11:00', '12:00')
        assert not ranges_overlap('14:00', '15:00', '10:00', '11:00')

    def test_default_end_time(self):
        assert default_end_time('14:30') == '15:30'
        assert default_end_time('09:00', 30) == '09:30'


class TestCapacity:
    """Capacity settings and slot occupancy"""

    def test_defaults_when_never_saved(self, app):
        settings = capacity_service.get_settings()

        assert settings.default_capacity == 40
        assert settings.warning_threshold == 0.8
        assert settings.critical_threshold == 1.0

    def test_update_settings_upserts(self, app):
        capacity_service.update_settings({'defaultCapacity': 30})
        capacity_service.update_settings({'warningThreshold': 0.5})

        settings = capacity_service.get_settings()
        assert settings.default_capacity == 30
        assert settings.warning_threshold == 0.5

    @pytest.mark.parametrize('data', [
        {'defaultCapacity': 0},
        {'defaultCapacity': 'mult'},
        {'warningThreshold': 1.5},
        {'criticalThreshold': -0.1},
    ])
    def test_invalid_settings(self, app, data):
        with pytest.raises(ServiceError):
            capacity_service.update_settings(data)

    def test_slots_cover_opening_hours(self, app):
        slots = capacity_service.get_slots(DAY)

        assert len(slots) == 26
        assert slots[0]['startTime'] == '09:00'
        assert slots[0]['endTime'] == '09:30'
        assert slots[-1]['endTime'] == '22:00'
        assert all(s['status'] == CapacityStatus.AVAILABLE for s in slots)

    def test_slots_count_overlapping_parties(self, app, manager, customer, small_arena):
        book(customer, manager, '10:00', '11:00', 16)
        cancelled = book(customer, manager, '10:00', '11:00', 10)['reservation']
        calendar_service.cancel_reservation(cancelled, manager)

        slots = {s['startTime']: s for s in capacity_service.get_slots(DAY)}

        assert slots['10:00']['currentBookings'] == 16
        assert slots['10:30']['currentBookings'] == 16
        assert slots['11:00']['currentBookings'] == 0
        assert slots['10:00']['percentage'] == 0.8
        assert slots['10:00']['status'] == CapacityStatus.WARNING

    def test_no_conflict_without_overlap(self, app, manager, customer, small_arena):
        book(customer, manager, '10:00', '11:00', 19)
        assert capacity_service.check_conflict(DAY, '11:00', '12:00', 19) is None

    def test_warning_conflict(self, app, manager, customer, small_arena):
        book(customer, manager, '10:00', '11:00', 14)

        conflict = capacity_service.check_conflict(DAY, '10:30', '11:30', 4)

        assert conflict['severity'] == ConflictSeverity.WARNING
        assert conflict['totalPlayers'] == 18
        assert conflict['reason'] == 'Capacitate aproape plina: 18/20 jucatori (90%)'

    def test_critical_conflict(self, app, manager, customer, small_arena):
        book(customer, manager, '10:00', '11:00', 14)

        conflict = capacity_service.check_conflict(DAY, '10:00', '11:00', 10)

        assert conflict['severity'] == ConflictSeverity.CRITICAL
        assert conflict['reason'] == 'Capacitate depasita: 24/20 jucatori (120%)'

    def test_capacity_endpoint_validates_date(self, manager_client):
        assert manager_client.get('/api/calendar/capacity').status_code == 400
        assert manager_client.get('/api/calendar/capacity?date=14-03-2026').status_code == 400
        assert manager_client.get(f'/api/calendar/capacity?date={DAY}').status_code == 200

    def test_settings_endpoint(self, manager_client):
        response = manager_client.put('/api/calendar/capacity/settings', json={'defaultCapacity': 25})

        assert response.status_code == 200
        assert response.get_json()['defaultCapacity'] == 25
        assert manager_client.get('/api/calendar/capacity/settings').get_json()['defaultCapacity'] == 25


class TestCustomers:
    """Customer directory"""

    def test_requires_name_and_phone(self, app):
        with pytest.raises(ServiceError) as exc:
            calendar_service.create_customer({'name': 'Ana'})
        assert exc.value.message == 'Numele si telefonul sunt obligatorii'

    @pytest.mark.parametrize('phone', ['0722 123 456', '722123456', '07221234567', '+40722123456'])
    def test_rejects_bad_phone(self, app, phone):
        with pytest.raises(ServiceError):
            calendar_service.create_customer({'name': 'Ana Pop', 'phone': phone})

    def test_rejects_bad_email(self, app):
        with pytest.raises(ServiceError):
            calendar_service.create_customer({'name': 'Ana Pop', 'phone': '0722123456', 'email': 'ana@'})

    def test_search_ignores_case_diacritics_and_spaces(self, app):
        calendar_service.create_customer({'name': 'Ștefănescu Ioana', 'phone': '0733234567'})
        calendar_service.create_customer({'name': 'Marin Bogdan', 'phone': '0788789012'})

        assert [c.name for c in calendar_service.search_customers('stefanescu')] == ['Ștefănescu Ioana']
        assert [c.name for c in calendar_service.search_customers('0788 789')] == ['Marin Bogdan']
        assert len(calendar_service.search_customers('')) == 2

    def test_missing_customer(self, app):
        with pytest.raises(NotFoundError):
            calendar_service.get_customer('cust_missing')

    def test_create_via_api(self, employee_client):
        response = employee_client.post('/api/calendar/customers', json={
            'name': 'Popescu Maria',
            'phone': '0733234567'
        })

        assert response.status_code == 201
        assert response.get_json()['name'] == 'Popescu Maria'

    def test_profile_lists_reservations_newest_first(self, manager_client, manager, customer):
        book(customer, manager, '10:00', '11:00', 4, date='2026-03-10')
        book(customer, manager, '10:00', '11:00', 4, date='2026-03-12')

        data = manager_client.get(f'/api/calendar/customers/{customer.id}').get_json()

        assert [r['date'] for r in data['reservations']] == ['2026-03-12', '2026-03-10']

    def test_delete_removes_reservations(self, manager_client, manager, customer):
        reservation_id = book(customer, manager, '10:00', '11:00', 4)['reservation'].id

        response = manager_client.delete(f'/api/calendar/customers/{customer.id}')

        assert response.status_code == 200
        assert db.session.get(DBReservation, reservation_id) is None
        assert manager_client.get(f'/api/calendar/customers/{customer.id}').status_code == 404


class TestTags:
    """Customer tags"""

    def test_tag_lifecycle(self, manager_client, customer):
        tag = manager_client.post('/api/calendar/tags', json={'name': 'VIP', 'color': '#f535aa'}).get_json()

        response = manager_client.post(f'/api/calendar/customers/{customer.id}/tags', json={'tagId': tag['id']})
        assert response.status_code == 201

        data = manager_client.get(f'/api/calendar/customers/{customer.id}').get_json()
        assert [t['name'] for t in data['tags']] == ['VIP']

        response = manager_client.delete(f"/api/calendar/customers/{customer.id}/tags?tagId={tag['id']}")
        assert response.status_code == 200
        assert manager_client.get(f'/api/calendar/customers/{customer.id}').get_json()['tags'] == []

    def test_duplicate_tag_name(self, app):
        calendar_service.create_tag({'name': 'VIP', 'color': '#f535aa'})
        with pytest.raises(ServiceError):
            calendar_service.create_tag({'name': 'VIP', 'color': '#000000'})

    def test_tag_already_attached(self, app, customer):
        tag = calendar_service.create_tag({'name': 'VIP', 'color': '#f535aa'})
        calendar_service.add_customer_tag(customer, tag.id)

        with pytest.raises(ServiceError):
            calendar_service.add_customer_tag(customer, tag.id)

    def test_remove_unattached_tag(self, app, customer):
        tag = calendar_service.create_tag({'name': 'VIP', 'color': '#f535aa'})
        with pytest.raises(NotFoundError):
            calendar_service.remove_customer_tag(customer, tag.id)


class TestReservations:
    """Reservation book"""

    def test_create_defaults_end_time(self, app, manager, customer):
        result = calendar_service.create_reservation({
            'customerId': customer.id,
            'date': DAY,
            'startTime': '14:00',
            'partySize': 6,
            'occasion': 'birthday'
        }, manager)

        reservation = result['reservation']
        assert reservation.end_time == '15:00'
        assert reservation.created_by == manager.id
        assert result['conflict'] is None

    def test_late_start_without_end_time(self, manager_client, customer):
        response = manager_client.post('/api/calendar/reservations', json={
            'customerId': customer.id,
            'date': DAY,
            'startTime': '23:30',
            'partySize': 4,
            'occasion': 'regular'
        })

        assert response.status_code == 201
        assert response.get_json()['endTime'] == '24:30'

    def test_start_update_checked_against_stored_end(self, app, manager, customer):
        reservation = book(customer, manager, '10:00', '11:00', 4)['reservation']

        with pytest.raises(ServiceError) as exc:
            calendar_service.update_reservation(reservation, {'startTime': '11:30'}, manager)
        assert exc.value.message == 'Ora de sfarsit trebuie sa fie dupa ora de inceput'
        assert reservation.start_time == '10:00'

        calendar_service.update_reservation(reservation, {'startTime': '10:30'}, manager)
        assert reservation.start_time == '10:30'

    def test_create_is_audited(self, app, manager, customer):
        reservation = book(customer, manager, '10:00', '11:00', 4)['reservation']

        entry = DBAuditLog.query.filter_by(entity_id=reservation.id).one()
        assert entry.action == 'reservation_created'
        assert entry.user_name == manager.name

    @pytest.mark.parametrize('override, message', [
        ({'date': '2026/03/14'}, 'Format data invalid (asteptat: YYYY-MM-DD)'),
        ({'startTime': '25:00'}, 'Ora de inceput invalida'),
        ({'partySize': 51}, 'Numarul de persoane trebuie sa fie intre 1 si 50'),
        ({'occasion': 'nunta'}, 'Tip rezervare invalid'),
        ({'endTime': '13:00'}, 'Ora de sfarsit trebuie sa fie dupa ora de inceput'),
    ])
    def test_validation(self, app, manager, customer, override, message):
        data = {
            'customerId': customer.id,
            'date': DAY,
            'startTime': '14:00',
            'partySize': 6,
            'occasion': 'regular'
        }
        data.update(override)

        with pytest.raises(ServiceError) as exc:
            calendar_service.create_reservation(data, manager)
        assert exc.value.message == message

    def test_conflict_is_flagged_not_refused(self, manager_client, manager, customer, small_arena):
        book(customer, manager, '10:00', '11:00', 18)

        response = manager_client.post('/api/calendar/reservations', json={
            'customerId': customer.id,
            'date': DAY,
            'startTime': '10:00',
            'endTime': '11:00',
            'partySize': 6,
            'occasion': 'group',
            'conflictOverridden': True
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data['hasConflict'] is True
        assert data['conflictOverridden'] is True
        assert data['conflict']['severity'] == 'critical'
        assert data['customer']['id'] == customer.id

    def test_list_skips_cancelled(self, manager_client, manager, customer):
        book(customer, manager, '16:00', '17:00', 4)
        early = book(customer, manager, '10:00', '11:00', 4)['reservation']
        cancelled = book(customer, manager, '12:00', '13:00', 4)['reservation']

        assert manager_client.delete(f'/api/calendar/reservations/{cancelled.id}').status_code == 200

        data = manager_client.get(f'/api/calendar/reservations?date={DAY}').get_json()
        assert [r['startTime'] for r in data] == ['10:00', '16:00']
        assert data[0]['id'] == early.id
        assert db.session.get(DBReservation, cancelled.id).status == 'cancelled'

    def test_list_requires_date(self, manager_client):
        response = manager_client.get('/api/calendar/reservations')
        assert response.status_code == 400

    def test_update(self, manager_client, manager, customer):
        reservation = book(customer, manager, '10:00', '11:00', 4)['reservation']

        response = manager_client.put(f'/api/calendar/reservations/{reservation.id}', json={
            'partySize': 10,
            'notes': 'Tort adus de client'
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['partySize'] == 10
        assert data['notes'] == 'Tort adus de client'

    def test_update_rejects_bad_status(self, app, manager, customer):
        reservation = book(customer, manager, '10:00', '11:00', 4)['reservation']
        with pytest.raises(ServiceError):
            calendar_service.update_reservation(reservation, {'status': 'pierdut'}, manager)

    def test_missing_reservation(self, manager_client):
        response = manager_client.get('/api/calendar/reservations/res_missing')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Rezervare negasita'
