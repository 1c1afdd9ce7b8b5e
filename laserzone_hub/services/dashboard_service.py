"""
LaserZone Hub - Dashboard Service
Activity feed and the stat cards shown on the home screen
"""
import math
from datetime import datetime, date, timedelta
from typing import List, Dict

from laserzone_hub.models.db_models import (
    DBAuditLog, DBChecklistInstance, DBReservation, DBOnboardingProgress, DBUser,
    ChecklistStatus, ReservationStatus
)
from laserzone_hub.services.audit_service import audit_service
from laserzone_hub.services.db_service import DataService


def relative_time(then: datetime, now: datetime = None) -> str:
    """Romanian 'time ago' phrase for a UTC timestamp"""
    now = now or datetime.utcnow()
    seconds = max((now - then).total_seconds(), 0)
    minutes = int(seconds // 60 + (1 if seconds % 60 >= 30 else 0))

    if minutes < 1:
        return 'in urma cu mai putin de un minut'
    if minutes == 1:
        return 'in urma cu un minut'
    if minutes < 45:
        return f'in urma cu {minutes} minute'
    if minutes < 90:
        return 'in urma cu aproximativ o ora'

    hours = math.floor(minutes / 60 + 0.5)
    if minutes < 24 * 60:
        return f'in urma cu aproximativ {hours} ore'
    if minutes < 42 * 60:
        return 'in urma cu o zi'

    days = math.floor(minutes / (24 * 60) + 0.5)
    if days < 30:
        return f'in urma cu {days} zile'
    if days < 45:
        return 'in urma cu aproximativ o luna'
    if days < 365:
        return f'in urma cu {math.floor(days / 30 + 0.5)} luni'

    years = days // 365
    if years == 1:
        return 'in urma cu aproximativ un an'
    return f'in urma cu aproximativ {years} ani'


def describe_activity(entry: DBAuditLog) -> Dict:
    """Map an audit entry to the feed's {action, target, type} wording"""
    details = entry.get_details()
    action, target, kind = 'a efectuat', entry.entity_type, 'checklist'

    if entry.action == audit_service.ACTION_TEMPLATE_CREATED:
        action, target = 'a creat', f"Template: {details.get('templateName') or entry.entity_id}"
    elif entry.action == audit_service.ACTION_TEMPLATE_UPDATED:
        action, target = 'a actualizat', f"Template: {details.get('templateName') or entry.entity_id}"
    elif entry.action == audit_service.ACTION_TEMPLATE_DELETED:
        action, target = 'a sters', f"Template: {details.get('templateName') or entry.entity_id}"
    elif entry.action == audit_service.ACTION_INSTANCE_CREATED:
        action, target = 'a atribuit', details.get('templateName') or 'Checklist'
    elif entry.action == audit_service.ACTION_INSTANCE_COMPLETED:
        action, target = 'a completat', details.get('templateName') or 'Checklist'
    elif entry.action == audit_service.ACTION_ITEM_CHECKED:
        action = 'a incercat sa bifeze' if details.get('blocked') else 'a bifat'
        target = details.get('itemLabel') or 'Item checklist'
    elif entry.action == audit_service.ACTION_ITEM_UNCHECKED:
        action, target = 'a debifat', details.get('itemLabel') or 'Item checklist'
    elif entry.entity_type == audit_service.ENTITY_RESERVATION:
        kind, target = 'reservation', 'Rezervare'
        if entry.action == audit_service.ACTION_RESERVATION_CREATED:
            action = 'a adaugat'
        elif entry.action == audit_service.ACTION_RESERVATION_CANCELLED:
            action = 'a anulat'
        else:
            action = 'a actualizat'
    elif entry.entity_type == audit_service.ENTITY_ONBOARDING:
        action, target, kind = 'a actualizat', 'Onboarding', 'onboarding'
    elif entry.entity_type == audit_service.ENTITY_WARNING:
        action, target, kind = 'a emis', 'Avertisment', 'warning'

    return {'action': action, 'target': target, 'type': kind}


def week_dates(today: date) -> List[str]:
    """Monday through Sunday of the week containing today"""
    monday = today - timedelta(days=today.weekday())
    return [(monday + timedelta(days=offset)).isoformat() for offset in range(7)]


def _percent(part: int, whole: int) -> str:
    if whole <= 0:
        return '0%'
    return f"{math.floor(part * 100 / whole + 0.5)}%"


class DashboardService:
    """Read-only aggregates for the dashboard"""

    def get_activity(self, limit: int = 10, now: datetime = None) -> List[Dict]:
        activities = []
        for entry in audit_service.get_recent(limit):
            described = describe_activity(entry)
            activities.append({
                'id': entry.id,
                'user': entry.user_name,
                'action': described['action'],
                'target': described['target'],
                'time': relative_time(entry.created_at, now),
                'type': described['type']
            })
        return activities

    def manager_stats(self, today: date = None) -> List[Dict]:
        today_str = (today or date.today()).isoformat()

        instances = DBChecklistInstance.query.filter_by(date=today_str)
        total = instances.count()
        completed = instances.filter(DBChecklistInstance.status == ChecklistStatus.COMPLETED).count()
        reservations = DBReservation.query.filter_by(date=today_str, status=ReservationStatus.CONFIRMED).count()
        pending_onboarding = DBOnboardingProgress.query.filter_by(is_complete=False).count()

        return [
            {'label': 'Angajati activi azi', 'value': DataService().count_employees(), 'changeType': 'neutral'},
            {
                'label': 'Checklisturi completate',
                'value': f"{completed}/{total}",
                'change': _percent(completed, total),
                'changeType': 'neutral'
            },
            {'label': 'Rezervari azi', 'value': reservations, 'changeType': 'neutral'},
            {'label': 'Onboarding in asteptare', 'value': pending_onboarding, 'changeType': 'neutral'},
        ]

    def employee_stats(self, user: DBUser, today: date = None) -> List[Dict]:
        today = today or date.today()
        mine = DBChecklistInstance.query.filter_by(assigned_to_id=user.id)

        todays = mine.filter(DBChecklistInstance.date == today.isoformat())
        total = todays.count()
        completed = todays.filter(DBChecklistInstance.status == ChecklistStatus.COMPLETED).count()
        week_shifts = mine.filter(DBChecklistInstance.date.in_(week_dates(today))).count()

        return [
            {
                'label': 'Task-uri de azi',
                'value': total,
                'change': f"{completed} completate",
                'changeType': 'neutral'
            },
            {
                'label': 'Checklisturi',
                'value': f"{completed}/{total}",
                'change': _percent(completed, total),
                'changeType': 'neutral'
            },
            {'label': 'Ture saptamana asta', 'value': week_shifts, 'changeType': 'neutral'},
        ]

    def get_stats(self, user: DBUser, today: date = None) -> List[Dict]:
        if user.is_manager:
            return self.manager_stats(today)
        return self.employee_stats(user, today)


dashboard_service = DashboardService()
