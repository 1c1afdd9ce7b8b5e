"""
LaserZone Hub - Checklist Service
Templates, daily instances and time-window enforcement for item completion
"""
import json
import logging
from datetime import datetime
from typing import Optional, List, Dict

from laserzone_hub.database import db
from laserzone_hub.models.db_models import (
    DBChecklistTemplate, DBChecklistItem, DBChecklistInstance, DBChecklistCompletion,
    DBUser, ChecklistStatus
)
from laserzone_hub.services.audit_service import audit_service
from laserzone_hub.services.errors import ServiceError, NotFoundError, ForbiddenError
from laserzone_hub.utils import safe_int, safe_bool

logger = logging.getLogger(__name__)

# Request field -> model attribute for the scalar template fields
TEMPLATE_FIELDS = {
    'name': 'name',
    'description': 'description',
    'type': 'type',
    'timeWindowStartHour': 'time_window_start_hour',
    'timeWindowStartMinute': 'time_window_start_minute',
    'timeWindowEndHour': 'time_window_end_hour',
    'timeWindowEndMinute': 'time_window_end_minute',
    'allowLateCompletion': 'allow_late_completion',
    'lateWindowMinutes': 'late_window_minutes',
}

WINDOW_CLOSED = 'Fereastra de completare s-a inchis'
GRACE_EXPIRED = 'Fereastra de gratie a expirat'
INVALID_WINDOW = 'Fereastra de timp invalida'

WINDOW_LIMITS = {
    'timeWindowStartHour': 23,
    'timeWindowStartMinute': 59,
    'timeWindowEndHour': 23,
    'timeWindowEndMinute': 59,
}


def _validate_window(data: dict):
    """Hours 0-23, minutes 0-59, a non-negative grace period and a real boolean flag"""
    for field, upper in WINDOW_LIMITS.items():
        if field in data:
            value = data[field]
            if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= upper:
                raise ServiceError(INVALID_WINDOW)
    late_window = data.get('lateWindowMinutes')
    if late_window is not None and (not isinstance(late_window, int) or isinstance(late_window, bool)
                                    or late_window < 0):
        raise ServiceError(INVALID_WINDOW)
    if 'allowLateCompletion' in data and not isinstance(data['allowLateCompletion'], bool):
        raise ServiceError(INVALID_WINDOW)


def _serialize_assigned_to(value) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value or 'all'


def _build_items(items: List[dict]) -> List[DBChecklistItem]:
    built = []
    for index, item in enumerate(items):
        built.append(DBChecklistItem(
            label=item.get('label', ''),
            order=safe_int(item.get('order'), index + 1),
            description=item.get('description'),
            is_required=safe_bool(item.get('isRequired'), True)
        ))
    return built


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class ChecklistService:
    """Template management and item check/uncheck rules"""

    # ============================================
    # Templates
    # ============================================

    def get_active_templates(self) -> List[DBChecklistTemplate]:
        return DBChecklistTemplate.query.filter_by(is_active=True) \
            .order_by(DBChecklistTemplate.created_at.desc()).all()

    def get_template(self, template_id: str) -> Optional[DBChecklistTemplate]:
        return db.session.get(DBChecklistTemplate, template_id)

    def create_template(self, data: dict, user: DBUser) -> DBChecklistTemplate:
        """Create template, its items and the audit entry in one transaction"""
        items = data.get('items')
        if not data.get('name') or not data.get('type') or not isinstance(items, list) or not items:
            raise ServiceError('Nume, tip si cel putin un item sunt obligatorii')
        _validate_window(data)

        late_window = data.get('lateWindowMinutes')
        template = DBChecklistTemplate(
            name=data['name'],
            type=data['type'],
            description=data.get('description'),
            time_window_start_hour=safe_int(data.get('timeWindowStartHour'), 0),
            time_window_start_minute=safe_int(data.get('timeWindowStartMinute'), 0),
            time_window_end_hour=safe_int(data.get('timeWindowEndHour'), 23),
            time_window_end_minute=safe_int(data.get('timeWindowEndMinute'), 59),
            allow_late_completion=safe_bool(data.get('allowLateCompletion'), False),
            late_window_minutes=safe_int(late_window) if late_window is not None else None,
            assigned_to=_serialize_assigned_to(data.get('assignedTo')),
            created_by=user.id
        )
        template.items = _build_items(items)
        db.session.add(template)

        audit_service.log(
            action=audit_service.ACTION_TEMPLATE_CREATED,
            entity_type=audit_service.ENTITY_TEMPLATE,
            entity_id=template.id,
            user=user,
            details={'templateName': template.name, 'itemCount': len(items), 'type': template.type},
            commit=False
        )
        _commit()

        logger.info(f"Checklist template {template.id} created by {user.id}")
        return template

    def update_template(self, template: DBChecklistTemplate, data: dict, user: DBUser) -> DBChecklistTemplate:
        """Partial update; a provided items list replaces all existing items"""
        _validate_window(data)
        if 'name' in data and not data['name']:
            raise ServiceError('Numele este obligatoriu')

        updated_fields = []
        for field, attr in TEMPLATE_FIELDS.items():
            if field in data:
                setattr(template, attr, data[field])
                updated_fields.append(field)

        if 'assignedTo' in data:
            template.assigned_to = _serialize_assigned_to(data['assignedTo'])
            updated_fields.append('assignedTo')

        if isinstance(data.get('items'), list):
            template.items = _build_items(data['items'])
            updated_fields.append('items')

        template.updated_at = datetime.utcnow()

        audit_service.log(
            action=audit_service.ACTION_TEMPLATE_UPDATED,
            entity_type=audit_service.ENTITY_TEMPLATE,
            entity_id=template.id,
            user=user,
            details={'templateName': template.name, 'updatedFields': updated_fields},
            commit=False
        )
        _commit()
        return template

    def delete_template(self, template: DBChecklistTemplate, user: DBUser):
        """Soft delete: existing instances keep their template"""
        template.is_active = False
        audit_service.log(
            action=audit_service.ACTION_TEMPLATE_DELETED,
            entity_type=audit_service.ENTITY_TEMPLATE,
            entity_id=template.id,
            user=user,
            details={'templateName': template.name},
            commit=False
        )
        _commit()

    # ============================================
    # Instances
    # ============================================

    def get_instances(self, date: str = None, user_id: str = None, status: str = None) -> List[DBChecklistInstance]:
        query = DBChecklistInstance.query
        if date:
            query = query.filter(DBChecklistInstance.date == date)
        if user_id:
            query = query.filter(DBChecklistInstance.assigned_to_id == user_id)
        if status:
            query = query.filter(DBChecklistInstance.status == status)
        return query.order_by(DBChecklistInstance.created_at.desc()).all()

    def get_instance(self, instance_id: str) -> Optional[DBChecklistInstance]:
        return db.session.get(DBChecklistInstance, instance_id)

    def create_instance(self, data: dict, user: DBUser) -> DBChecklistInstance:
        if not data.get('templateId') or not data.get('assignedToId') or not data.get('date'):
            raise ServiceError('templateId, assignedToId si date sunt obligatorii')

        template = self.get_template(data['templateId'])
        if not template or not template.is_active:
            raise NotFoundError('Template negasit sau inactiv')

        instance = DBChecklistInstance(
            template_id=template.id,
            template_name=template.name,
            date=data['date'],
            assigned_to_id=data['assignedToId']
        )
        db.session.add(instance)

        audit_service.log(
            action=audit_service.ACTION_INSTANCE_CREATED,
            entity_type=audit_service.ENTITY_INSTANCE,
            entity_id=instance.id,
            user=user,
            details={'templateName': template.name, 'assignedToId': instance.assigned_to_id, 'date': instance.date},
            commit=False
        )
        _commit()
        return instance

    def update_instance_status(self, instance: DBChecklistInstance, status: str) -> DBChecklistInstance:
        if not status:
            raise ServiceError('Status obligatoriu')
        if status not in ChecklistStatus.ALL:
            raise ServiceError('Status invalid')

        instance.status = status
        if status == ChecklistStatus.IN_PROGRESS and not instance.started_at:
            instance.started_at = datetime.utcnow()
        if status == ChecklistStatus.COMPLETED:
            instance.completed_at = datetime.utcnow()
        _commit()
        return instance

    # ============================================
    # Item completion
    # ============================================

    @staticmethod
    def window_minutes(template: DBChecklistTemplate) -> int:
        return template.time_window_end_hour * 60 + template.time_window_end_minute

    def evaluate_window(self, template: DBChecklistTemplate, now: datetime) -> Dict:
        """
        Decide whether an item may be checked at `now` (venue local time)

        Returns:
            {'late': bool, 'blocked_reason': str or None}
        """
        current = now.hour * 60 + now.minute
        end = self.window_minutes(template)
        if current <= end:
            return {'late': False, 'blocked_reason': None}
        if not template.allow_late_completion:
            return {'late': True, 'blocked_reason': WINDOW_CLOSED}
        if template.late_window_minutes and current > end + template.late_window_minutes:
            return {'late': True, 'blocked_reason': GRACE_EXPIRED}
        return {'late': True, 'blocked_reason': None}

    def _required_done(self, instance: DBChecklistInstance) -> bool:
        done = {c.item_id for c in instance.completions}
        return all(item.id in done for item in instance.template.items if item.is_required)

    def check_item(self, instance: DBChecklistInstance, item_id: str, user: DBUser,
                   notes: str = None, now: datetime = None) -> Dict:
        """Record a completion, enforcing the template time window"""
        template = instance.template
        item = next((i for i in template.items if i.id == item_id), None)
        if item is None:
            raise NotFoundError('Item negasit in template')

        if instance.completion_for(item_id):
            raise ServiceError('Item deja completat', 409)

        window = self.evaluate_window(template, now or datetime.now())
        if window['blocked_reason']:
            audit_service.log(
                action=audit_service.ACTION_ITEM_CHECKED,
                entity_type=audit_service.ENTITY_ITEM,
                entity_id=item_id,
                user=user,
                details={
                    'instanceId': instance.id,
                    'itemLabel': item.label,
                    'blocked': True,
                    'reason': window['blocked_reason'],
                },
                was_within_time_window=False
            )
            logger.info(f"Blocked late check of {item_id} on {instance.id}: {window['blocked_reason']}")
            raise ForbiddenError(window['blocked_reason'])

        is_first = len(instance.completions) == 0
        completion = DBChecklistCompletion(
            item_id=item_id,
            checked_by_id=user.id,
            is_late=window['late'],
            notes=notes or None
        )
        instance.completions.append(completion)

        all_required_done = self._required_done(instance)
        instance.status = ChecklistStatus.COMPLETED if all_required_done else ChecklistStatus.IN_PROGRESS
        if is_first and not instance.started_at:
            instance.started_at = datetime.utcnow()
        if all_required_done:
            instance.completed_at = datetime.utcnow()

        audit_service.log(
            action=audit_service.ACTION_ITEM_CHECKED,
            entity_type=audit_service.ENTITY_ITEM,
            entity_id=item_id,
            user=user,
            details={'instanceId': instance.id, 'itemLabel': item.label, 'wasLate': window['late']},
            was_within_time_window=not window['late'],
            commit=False
        )
        if all_required_done:
            audit_service.log(
                action=audit_service.ACTION_INSTANCE_COMPLETED,
                entity_type=audit_service.ENTITY_INSTANCE,
                entity_id=instance.id,
                user=user,
                details={
                    'templateName': instance.template_name,
                    'completedItemsCount': len(instance.completions),
                    'totalItemsCount': len(template.items),
                },
                was_within_time_window=not window['late'],
                commit=False
            )
        _commit()

        return {
            'completion': completion.to_dict(),
            'instanceStatus': instance.status,
            'allRequiredDone': all_required_done,
            'wasLate': window['late']
        }

    def uncheck_item(self, instance: DBChecklistInstance, item_id: str, user: DBUser) -> Dict:
        """Remove a completion and roll the instance status back"""
        item = next((i for i in instance.template.items if i.id == item_id), None)
        if item is None:
            raise NotFoundError('Item negasit in template')

        completion = instance.completion_for(item_id)
        if completion is None:
            raise NotFoundError('Item nu este completat')

        instance.completions.remove(completion)
        instance.status = ChecklistStatus.IN_PROGRESS if instance.completions else ChecklistStatus.PENDING
        instance.completed_at = None

        audit_service.log(
            action=audit_service.ACTION_ITEM_UNCHECKED,
            entity_type=audit_service.ENTITY_ITEM,
            entity_id=item_id,
            user=user,
            details={'instanceId': instance.id, 'itemLabel': item.label},
            commit=False
        )
        _commit()

        return {'instanceStatus': instance.status, 'unchecked': True}


checklist_service = ChecklistService()
