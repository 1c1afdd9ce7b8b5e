"""
LaserZone Hub - Capacity Service
Half-hour slot occupancy and booking conflict detection for the calendar
"""
import logging
import math
from typing import Optional, List, Dict

from flask import current_app

from laserzone_hub.database import db
from laserzone_hub.models.db_models import DBCapacitySettings, DBReservation, ReservationStatus
from laserzone_hub.services.errors import ServiceError
from laserzone_hub.utils import time_to_minutes, minutes_to_time, is_number

logger = logging.getLogger(__name__)


class CapacityStatus:
    AVAILABLE = 'available'
    WARNING = 'warning'
    FULL = 'full'


class ConflictSeverity:
    WARNING = 'warning'
    CRITICAL = 'critical'


def ranges_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Half-open [start, end) overlap on HH:MM strings"""
    s1, e1 = time_to_minutes(start1), time_to_minutes(end1)
    s2, e2 = time_to_minutes(start2), time_to_minutes(end2)
    return s1 < e2 and s2 < e1


def default_end_time(start_time: str, duration_minutes: int = 60) -> str:
    return minutes_to_time(time_to_minutes(start_time) + duration_minutes)


class CapacityService:
    """Reads capacity settings and computes slot occupancy"""

    # ============================================
    # Settings
    # ============================================

    def get_settings(self) -> DBCapacitySettings:
        """Stored settings, or an unsaved row holding the defaults"""
        settings = db.session.get(DBCapacitySettings, DBCapacitySettings.DEFAULT_ID)
        return settings or DBCapacitySettings()

    def update_settings(self, data: dict) -> DBCapacitySettings:
        """Validate and upsert the singleton settings row"""
        capacity = data.get('defaultCapacity')
        warning = data.get('warningThreshold')
        critical = data.get('criticalThreshold')

        if capacity is not None and (not is_number(capacity) or capacity < 1):
            raise ServiceError('Capacitatea trebuie sa fie un numar pozitiv')
        if warning is not None and (not is_number(warning) or warning < 0 or warning > 1):
            raise ServiceError('Pragul de avertizare trebuie sa fie intre 0 si 1')
        if critical is not None and (not is_number(critical) or critical < 0 or critical > 1):
            raise ServiceError('Pragul critic trebuie sa fie intre 0 si 1')

        settings = db.session.get(DBCapacitySettings, DBCapacitySettings.DEFAULT_ID)
        if settings is None:
            settings = DBCapacitySettings()
            db.session.add(settings)

        if capacity is not None:
            settings.default_capacity = int(capacity)
        if warning is not None:
            settings.warning_threshold = float(warning)
        if critical is not None:
            settings.critical_threshold = float(critical)

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Capacity settings updated: {settings.to_dict()}")
        return settings

    # ============================================
    # Occupancy
    # ============================================

    def active_reservations(self, date: str, exclude_id: str = None) -> List[DBReservation]:
        query = DBReservation.query.filter(
            DBReservation.date == date,
            DBReservation.status != ReservationStatus.CANCELLED
        )
        if exclude_id:
            query = query.filter(DBReservation.id != exclude_id)
        return query.all()

    def slot_status(self, percentage: float, settings: DBCapacitySettings) -> str:
        if percentage >= settings.critical_threshold:
            return CapacityStatus.FULL
        if percentage >= settings.warning_threshold:
            return CapacityStatus.WARNING
        return CapacityStatus.AVAILABLE

    def get_slots(self, date: str) -> List[Dict]:
        """
        Occupancy for every 30-minute slot of the opening hours

        Returns:
            list of {date, startTime, endTime, capacity, currentBookings, percentage, status}
        """
        settings = self.get_settings()
        capacity = settings.default_capacity
        reservations = self.active_reservations(date)

        open_minutes = current_app.config.get('VENUE_OPEN_HOUR', 9) * 60
        close_minutes = current_app.config.get('VENUE_CLOSE_HOUR', 22) * 60
        step = current_app.config.get('CAPACITY_SLOT_MINUTES', 30)

        slots = []
        for minute in range(open_minutes, close_minutes, step):
            start, end = minutes_to_time(minute), minutes_to_time(minute + step)
            bookings = sum(
                r.party_size for r in reservations
                if ranges_overlap(start, end, r.start_time, r.end_time)
            )
            percentage = bookings / capacity if capacity > 0 else 0
            slots.append({
                'date': date,
                'startTime': start,
                'endTime': end,
                'capacity': capacity,
                'currentBookings': bookings,
                'percentage': percentage,
                'status': self.slot_status(percentage, settings)
            })
        return slots

    def check_conflict(self, date: str, start_time: str, end_time: str, party_size: int,
                       exclude_id: str = None) -> Optional[Dict]:
        """
        Check whether adding party_size players to [start_time, end_time) crowds the arena

        Returns:
            {severity, reason, totalPlayers, capacity, percentage} or None when there is no conflict
        """
        settings = self.get_settings()
        overlapping = [
            r for r in self.active_reservations(date, exclude_id=exclude_id)
            if ranges_overlap(start_time, end_time, r.start_time, r.end_time)
        ]
        if not overlapping:
            return None

        total = sum(r.party_size for r in overlapping) + party_size
        capacity = settings.default_capacity
        used = total / capacity if capacity > 0 else 0
        pct = math.floor(used * 100 + 0.5)

        if used >= settings.critical_threshold:
            severity = ConflictSeverity.CRITICAL
            reason = f"Capacitate depasita: {total}/{capacity} jucatori ({pct}%)"
        elif used >= settings.warning_threshold:
            severity = ConflictSeverity.WARNING
            reason = f"Capacitate aproape plina: {total}/{capacity} jucatori ({pct}%)"
        else:
            return None

        return {
            'severity': severity,
            'reason': reason,
            'totalPlayers': total,
            'capacity': capacity,
            'percentage': used,
            'overlappingIds': [r.id for r in overlapping]
        }


capacity_service = CapacityService()
