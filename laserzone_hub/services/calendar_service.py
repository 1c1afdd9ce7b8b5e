"""
LaserZone Hub - Calendar Service
Customers, customer tags and reservations with capacity conflict checks
"""
import re
import logging
from typing import List, Dict

from laserzone_hub.database import db
from laserzone_hub.models.db_models import (
    DBCustomer, DBTag, DBCustomerTag, DBReservation, DBUser, ReservationStatus, Occasion
)
from laserzone_hub.services.audit_service import audit_service
from laserzone_hub.services.capacity_service import capacity_service, default_end_time
from laserzone_hub.services.errors import ServiceError, NotFoundError
from laserzone_hub.utils import (
    DATE_PATTERN, is_valid_time, is_number, time_to_minutes, normalize_search_text, safe_bool
)

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r'^0[0-9]{9}$')
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 50

INVALID_DATE = 'Format data invalid (asteptat: YYYY-MM-DD)'
END_BEFORE_START = 'Ora de sfarsit trebuie sa fie dupa ora de inceput'

# Request field -> model attribute for partial reservation updates
RESERVATION_FIELDS = {
    'date': 'date',
    'startTime': 'start_time',
    'endTime': 'end_time',
    'partySize': 'party_size',
    'occasion': 'occasion',
    'status': 'status',
    'hasConflict': 'has_conflict',
    'conflictOverridden': 'conflict_overridden',
    'isWalkup': 'is_walkup',
}


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _is_valid_date(value) -> bool:
    return isinstance(value, str) and bool(DATE_PATTERN.match(value))


def _valid_party_size(value) -> bool:
    return is_number(value) and MIN_PARTY_SIZE <= value <= MAX_PARTY_SIZE


class CalendarService:
    """Customer directory and reservation book"""

    # ============================================
    # Customers
    # ============================================

    def _validate_customer(self, data: dict, partial: bool = False):
        name = data.get('name')
        phone = data.get('phone')
        email = data.get('email')

        if not partial and (not name or not phone):
            raise ServiceError('Numele si telefonul sunt obligatorii')
        if name is not None and (len(name) < 2 or len(name) > 100):
            raise ServiceError('Numele trebuie sa aiba intre 2 si 100 caractere')
        if phone is not None and not PHONE_PATTERN.match(phone):
            raise ServiceError('Numar de telefon invalid (format: 07XX XXX XXX)')
        if email and not EMAIL_PATTERN.match(email):
            raise ServiceError('Email invalid')

    def search_customers(self, query: str = None) -> List[DBCustomer]:
        """All customers by name, filtered on name/phone/email ignoring case, diacritics and spaces"""
        customers = DBCustomer.query.order_by(DBCustomer.name.asc()).all()
        needle = normalize_search_text((query or '').strip())
        if not needle:
            return customers
        return [
            c for c in customers
            if needle in normalize_search_text(c.name)
            or needle in normalize_search_text(c.phone)
            or (c.email and needle in normalize_search_text(c.email))
        ]

    def get_customer(self, customer_id: str) -> DBCustomer:
        customer = db.session.get(DBCustomer, customer_id)
        if not customer:
            raise NotFoundError('Client negasit')
        return customer

    def create_customer(self, data: dict) -> DBCustomer:
        self._validate_customer(data)
        customer = DBCustomer(
            name=data['name'].strip(),
            phone=data['phone'],
            email=data.get('email') or None,
            notes=data.get('notes') or None
        )
        db.session.add(customer)
        _commit()
        logger.info(f"Customer {customer.id} created")
        return customer

    def update_customer(self, customer: DBCustomer, data: dict) -> DBCustomer:
        self._validate_customer(data, partial=True)
        if 'name' in data:
            customer.name = data['name'].strip()
        if 'phone' in data:
            customer.phone = data['phone']
        if 'email' in data:
            customer.email = data['email'] or None
        if 'notes' in data:
            customer.notes = data['notes'] or None
        _commit()
        return customer

    def delete_customer(self, customer: DBCustomer):
        """Hard delete; reservations and tag links go with it"""
        db.session.delete(customer)
        _commit()
        logger.info(f"Customer {customer.id} deleted")

    # ============================================
    # Tags
    # ============================================

    def list_tags(self) -> List[DBTag]:
        return DBTag.query.order_by(DBTag.name.asc()).all()

    def get_tag(self, tag_id: str) -> DBTag:
        tag = db.session.get(DBTag, tag_id)
        if not tag:
            raise NotFoundError('Tag negasit')
        return tag

    def create_tag(self, data: dict) -> DBTag:
        name, color = data.get('name'), data.get('color')
        if not name or not color:
            raise ServiceError('Numele si culoarea sunt obligatorii')
        if DBTag.query.filter_by(name=name).first():
            raise ServiceError('Un tag cu acest nume exista deja')
        tag = DBTag(name=name, color=color)
        db.session.add(tag)
        _commit()
        return tag

    def delete_tag(self, tag: DBTag):
        db.session.delete(tag)
        _commit()

    def add_customer_tag(self, customer: DBCustomer, tag_id: str):
        if not tag_id:
            raise ServiceError('tagId este obligatoriu')
        tag = self.get_tag(tag_id)
        if any(ct.tag_id == tag.id for ct in customer.customer_tags):
            raise ServiceError('Tag-ul este deja asociat clientului')
        customer.customer_tags.append(DBCustomerTag(tag=tag))
        _commit()

    def remove_customer_tag(self, customer: DBCustomer, tag_id: str):
        if not tag_id:
            raise ServiceError('tagId este obligatoriu')
        link = next((ct for ct in customer.customer_tags if ct.tag_id == tag_id), None)
        if link is None:
            raise NotFoundError('Asocierea nu exista')
        customer.customer_tags.remove(link)
        _commit()

    # ============================================
    # Reservations
    # ============================================

    def list_reservations(self, date: str, customer_id: str = None) -> List[DBReservation]:
        if not date:
            raise ServiceError('Parametrul date este obligatoriu (format: YYYY-MM-DD)')
        if not _is_valid_date(date):
            raise ServiceError(INVALID_DATE)

        query = DBReservation.query.filter(
            DBReservation.date == date,
            DBReservation.status != ReservationStatus.CANCELLED
        )
        if customer_id:
            query = query.filter(DBReservation.customer_id == customer_id)
        return query.order_by(DBReservation.start_time.asc()).all()

    def get_reservation(self, reservation_id: str) -> DBReservation:
        reservation = db.session.get(DBReservation, reservation_id)
        if not reservation:
            raise NotFoundError('Rezervare negasita')
        return reservation

    def _validate_end_time(self, start_time: str, end_time: str):
        if not is_valid_time(end_time):
            raise ServiceError('Ora de sfarsit invalida')
        self._ensure_end_after_start(start_time, end_time)

    @staticmethod
    def _ensure_end_after_start(start_time: str, end_time: str):
        if time_to_minutes(end_time) <= time_to_minutes(start_time):
            raise ServiceError(END_BEFORE_START)

    def create_reservation(self, data: dict, user: DBUser) -> Dict:
        """
        Book a slot, flagging (but not refusing) capacity conflicts

        Returns:
            {'reservation': DBReservation, 'conflict': {hasConflict, reason, severity} or None}
        """
        required = ('customerId', 'date', 'startTime', 'partySize', 'occasion')
        if any(not data.get(field) for field in required):
            raise ServiceError('Campuri obligatorii: customerId, date, startTime, partySize, occasion')
        if not _is_valid_date(data['date']):
            raise ServiceError(INVALID_DATE)
        if not is_valid_time(data['startTime']):
            raise ServiceError('Ora de inceput invalida')
        if not _valid_party_size(data['partySize']):
            raise ServiceError('Numarul de persoane trebuie sa fie intre 1 si 50')
        if data['occasion'] not in Occasion.ALL:
            raise ServiceError('Tip rezervare invalid')

        customer = self.get_customer(data['customerId'])

        start_time = data['startTime']
        if data.get('endTime'):
            end_time = data['endTime']
            self._validate_end_time(start_time, end_time)
        else:
            # may run past midnight (e.g. 24:30); slot math works in minutes
            end_time = default_end_time(start_time)

        conflict = capacity_service.check_conflict(data['date'], start_time, end_time, data['partySize'])
        has_conflict = conflict is not None

        reservation = DBReservation(
            customer_id=customer.id,
            date=data['date'],
            start_time=start_time,
            end_time=end_time,
            party_size=data['partySize'],
            occasion=data['occasion'],
            notes=data.get('notes') or None,
            has_conflict=has_conflict,
            conflict_overridden=has_conflict and safe_bool(data.get('conflictOverridden')),
            is_walkup=safe_bool(data.get('isWalkup')),
            created_by=user.id
        )
        db.session.add(reservation)

        audit_service.log(
            action=audit_service.ACTION_RESERVATION_CREATED,
            entity_type=audit_service.ENTITY_RESERVATION,
            entity_id=reservation.id,
            user=user,
            details={
                'customerName': customer.name,
                'date': reservation.date,
                'startTime': reservation.start_time,
                'partySize': reservation.party_size,
                'hasConflict': has_conflict,
            },
            commit=False
        )
        _commit()

        if has_conflict:
            logger.info(f"Reservation {reservation.id} created with {conflict['severity']} conflict")
        return {
            'reservation': reservation,
            'conflict': {
                'hasConflict': True,
                'reason': conflict['reason'],
                'severity': conflict['severity']
            } if has_conflict else None
        }

    def update_reservation(self, reservation: DBReservation, data: dict, user: DBUser) -> DBReservation:
        if 'date' in data and not _is_valid_date(data['date']):
            raise ServiceError(INVALID_DATE)
        if 'startTime' in data and not is_valid_time(data['startTime']):
            raise ServiceError('Ora de inceput invalida')
        if 'endTime' in data:
            self._validate_end_time(data.get('startTime', reservation.start_time), data['endTime'])
        elif 'startTime' in data:
            self._ensure_end_after_start(data['startTime'], reservation.end_time)
        if 'partySize' in data and not _valid_party_size(data['partySize']):
            raise ServiceError('Numarul de persoane trebuie sa fie intre 1 si 50')
        if 'occasion' in data and data['occasion'] not in Occasion.ALL:
            raise ServiceError('Tip rezervare invalid')
        if 'status' in data and data['status'] not in ReservationStatus.ALL:
            raise ServiceError('Status invalid')

        updated_fields = []
        for field, attr in RESERVATION_FIELDS.items():
            if field in data:
                setattr(reservation, attr, data[field])
                updated_fields.append(field)
        if 'notes' in data:
            reservation.notes = data['notes'] or None
            updated_fields.append('notes')

        cancelled = data.get('status') == ReservationStatus.CANCELLED
        audit_service.log(
            action=audit_service.ACTION_RESERVATION_CANCELLED if cancelled else audit_service.ACTION_RESERVATION_UPDATED,
            entity_type=audit_service.ENTITY_RESERVATION,
            entity_id=reservation.id,
            user=user,
            details={'updatedFields': updated_fields},
            commit=False
        )
        _commit()
        return reservation

    def cancel_reservation(self, reservation: DBReservation, user: DBUser) -> DBReservation:
        """Soft delete: the row stays for history with status cancelled"""
        reservation.status = ReservationStatus.CANCELLED
        audit_service.log(
            action=audit_service.ACTION_RESERVATION_CANCELLED,
            entity_type=audit_service.ENTITY_RESERVATION,
            entity_id=reservation.id,
            user=user,
            details={'date': reservation.date, 'startTime': reservation.start_time},
            commit=False
        )
        _commit()
        logger.info(f"Reservation {reservation.id} cancelled by {user.id}")
        return reservation


calendar_service = CalendarService()
