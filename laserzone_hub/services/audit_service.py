"""
LaserZone Hub - Audit Logging Service
Track checklist and reservation actions for accountability
"""
import json
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any
from flask import request, has_request_context

from laserzone_hub.database import db
from laserzone_hub.models.db_models import DBAuditLog

logger = logging.getLogger(__name__)


class AuditService:
    """Service for logging and querying audit events"""

    # Action types
    ACTION_TEMPLATE_CREATED = 'template_created'
    ACTION_TEMPLATE_UPDATED = 'template_updated'
    ACTION_TEMPLATE_DELETED = 'template_deleted'
    ACTION_INSTANCE_CREATED = 'instance_created'
    ACTION_INSTANCE_COMPLETED = 'instance_completed'
    ACTION_ITEM_CHECKED = 'item_checked'
    ACTION_ITEM_UNCHECKED = 'item_unchecked'
    ACTION_RESERVATION_CREATED = 'reservation_created'
    ACTION_RESERVATION_UPDATED = 'reservation_updated'
    ACTION_RESERVATION_CANCELLED = 'reservation_cancelled'
    ACTION_ONBOARDING_COMPLETED = 'onboarding_completed'
    ACTION_ONBOARDING_RESET = 'onboarding_reset'
    ACTION_WARNING_ISSUED = 'warning_issued'

    # Entity types
    ENTITY_TEMPLATE = 'template'
    ENTITY_INSTANCE = 'instance'
    ENTITY_ITEM = 'item'
    ENTITY_RESERVATION = 'reservation'
    ENTITY_ONBOARDING = 'onboarding'
    ENTITY_WARNING = 'warning'

    def log(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        user=None,
        user_id: Optional[str] = None,
        user_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        was_within_time_window: bool = True,
        commit: bool = True
    ) -> DBAuditLog:
        """
        Log an audit event

        Args:
            action: The action performed (template_created, item_checked, ...)
            entity_type: Type of entity affected (template, instance, reservation, ...)
            entity_id: ID of the affected entity
            user: DBUser who performed the action (fills user_id / user_name)
            details: Additional data (will be JSON serialized)
            was_within_time_window: False for late or blocked checklist actions
            commit: Pass False to add the entry to an ongoing transaction

        Returns:
            The created audit log entry
        """
        if user is not None:
            user_id = user_id or user.id
            user_name = user_name or user.name

        ip_address = None
        endpoint = None
        if has_request_context():
            ip_address = request.remote_addr
            endpoint = request.path

        log_entry = DBAuditLog(
            user_id=user_id,
            user_name=user_name,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=json.dumps(details, default=str) if details is not None else None,
            was_within_time_window=was_within_time_window,
            ip_address=ip_address,
            endpoint=endpoint,
            created_at=datetime.utcnow()
        )

        db.session.add(log_entry)
        if commit:
            try:
                db.session.commit()
            except Exception:
                db.session.rollback()
                logger.error(f"Failed to create audit log: {action} {entity_type} {entity_id}")
                raise

        logger.debug(f"Audit: {action} {entity_type} {entity_id} by {user_name}")

        return log_entry

    def get_logs(
        self,
        action: str = None,
        entity_type: str = None,
        entity_id: str = None,
        user_id: str = None,
        start_date: datetime = None,
        end_date: datetime = None,
        limit: int = 50
    ) -> List[DBAuditLog]:
        """
        Query audit logs with filters

        Returns list of audit log entries, newest first
        """
        query = DBAuditLog.query

        if action:
            query = query.filter(DBAuditLog.action == action)
        if entity_type:
            query = query.filter(DBAuditLog.entity_type == entity_type)
        if entity_id:
            query = query.filter(DBAuditLog.entity_id == entity_id)
        if user_id:
            query = query.filter(DBAuditLog.user_id == user_id)
        if start_date:
            query = query.filter(DBAuditLog.created_at >= start_date)
        if end_date:
            query = query.filter(DBAuditLog.created_at <= end_date)

        return query.order_by(DBAuditLog.created_at.desc(), DBAuditLog.id.desc()).limit(limit).all()

    def get_recent(self, limit: int = 10) -> List[DBAuditLog]:
        """Most recent entries across all entities"""
        return self.get_logs(limit=limit)


# Singleton instance
audit_service = AuditService()
