"""
LaserZone Hub - SQLAlchemy Database Models
PostgreSQL-backed models for production deployment
"""
from datetime import datetime
from typing import Optional, List
import uuid
import hashlib
import secrets
import json

from sqlalchemy import String, Text, Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from laserzone_hub.database import db


def safe_json_loads(value, default=None):
    """Safely parse JSON, returning default if None or invalid"""
    if default is None:
        default = []
    if not value:
        return default
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return default


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ============================================
# Enumerations
# ============================================

class UserRole:
    MANAGER = 'manager'
    EMPLOYEE = 'angajat'

    ALL = [MANAGER, EMPLOYEE]


class ShiftType:
    MORNING = 'dimineata'
    EVENING = 'seara'

    ALL = [MORNING, EVENING]


class ReservationStatus:
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
    NO_SHOW = 'no_show'

    ALL = [CONFIRMED, CANCELLED, COMPLETED, NO_SHOW]


class Occasion:
    REGULAR = 'regular'
    BIRTHDAY = 'birthday'
    CORPORATE = 'corporate'
    GROUP = 'group'
    OTHER = 'other'

    ALL = [REGULAR, BIRTHDAY, CORPORATE, GROUP, OTHER]


class ChecklistStatus:
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'

    ALL = [PENDING, IN_PROGRESS, COMPLETED]


class OnboardingStep:
    NDA = 'nda'
    DOCUMENTS = 'documents'
    VIDEO = 'video'
    QUIZ = 'quiz'
    NOTIFICATION = 'notification'
    HANDOFF = 'handoff'
    CONFIRMATION = 'confirmation'
    COMPLETE = 'complete'

    ORDER = [NDA, DOCUMENTS, VIDEO, QUIZ, NOTIFICATION, HANDOFF, CONFIRMATION, COMPLETE]


class QuestionType:
    MULTIPLE_CHOICE = 'multiple_choice'
    TRUE_FALSE = 'true_false'
    MULTI_SELECT = 'multi_select'
    OPEN_TEXT = 'open_text'

    ALL = [MULTIPLE_CHOICE, TRUE_FALSE, MULTI_SELECT, OPEN_TEXT]


class PostStatus:
    DRAFT = 'draft'
    SCHEDULED = 'scheduled'
    PUBLISHED = 'published'
    FAILED = 'failed'

    ALL = [DRAFT, SCHEDULED, PUBLISHED, FAILED]


class WarningLevel:
    VERBAL = 'verbal'
    WRITTEN = 'written'
    FINAL = 'final'
    TERMINATION = 'termination'

    # Escalation order, lowest first
    ORDER = [VERBAL, WRITTEN, FINAL, TERMINATION]


class WarningStatus:
    PENDING = 'pending_acknowledgment'
    ACKNOWLEDGED = 'acknowledged'
    REFUSED = 'refused'
    CLEARED = 'cleared'

    ALL = [PENDING, ACKNOWLEDGED, REFUSED, CLEARED]


class WarningCategory:
    ALL = [
        'tardiness', 'no_show', 'policy_violation', 'performance', 'insubordination',
        'safety_violation', 'customer_complaint', 'cash_handling', 'uniform_appearance', 'other',
    ]


# ============================================
# User Model
# ============================================

class DBUser(db.Model):
    """Venue staff account (manager or employee)"""
    __tablename__ = 'users'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    password_salt: Mapped[str] = mapped_column(String(64), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.EMPLOYEE)
    shift_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_new: Mapped[bool] = mapped_column(Boolean, default=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __init__(self, email: str, name: str, password: str, role: str = UserRole.EMPLOYEE, **kwargs):
        self.id = kwargs.get('id') or new_id('user')
        self.email = email.lower()
        self.name = name
        self.role = role
        self.password_salt = secrets.token_hex(16)
        self.password_hash = self._hash_password(password, self.password_salt)
        self.shift_type = kwargs.get('shift_type')
        self.is_new = kwargs.get('is_new', False)
        self.avatar = kwargs.get('avatar')
        self.start_date = kwargs.get('start_date')
        self.is_active = True
        self.created_at = datetime.utcnow()

    @staticmethod
    def _hash_password(password: str, salt: str) -> str:
        return hashlib.sha256(f"{password}{salt}".encode()).hexdigest()

    def verify_password(self, password: str) -> bool:
        return secrets.compare_digest(self.password_hash, self._hash_password(password, self.password_salt))

    def set_password(self, password: str):
        self.password_salt = secrets.token_hex(16)
        self.password_hash = self._hash_password(password, self.password_salt)

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'shiftType': self.shift_type,
            'isNew': self.is_new,
            'avatar': self.avatar,
            'startDate': iso(self.start_date),
            'isActive': self.is_active,
            'createdAt': iso(self.created_at),
            'lastLogin': iso(self.last_login)
        }


# ============================================
# Calendar: customers, tags, reservations
# ============================================

class DBCustomer(db.Model):
    """Venue customer who books by phone or walks up"""
    __tablename__ = 'customers'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer_tags: Mapped[List["DBCustomerTag"]] = relationship(
        "DBCustomerTag", back_populates="customer", cascade="all, delete-orphan"
    )
    reservations: Mapped[List["DBReservation"]] = relationship(
        "DBReservation", back_populates="customer", cascade="all, delete-orphan"
    )

    def __init__(self, name: str, phone: str, **kwargs):
        self.id = kwargs.get('id') or new_id('cust')
        self.name = name
        self.phone = phone
        self.email = kwargs.get('email')
        self.notes = kwargs.get('notes')
        self.created_at = kwargs.get('created_at') or datetime.utcnow()
        self.updated_at = self.created_at

    @property
    def tags(self) -> List["DBTag"]:
        return [ct.tag for ct in self.customer_tags]

    def to_dict(self, include_reservations: bool = False) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'notes': self.notes,
            'tags': [tag.to_dict() for tag in self.tags],
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at)
        }
        if include_reservations:
            ordered = sorted(self.reservations, key=lambda r: (r.date, r.start_time), reverse=True)
            data['reservations'] = [r.to_dict() for r in ordered]
        return data


class DBTag(db.Model):
    """Colour-coded customer label (VIP, Corporate, ...)"""
    __tablename__ = 'tags'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    customer_tags: Mapped[List["DBCustomerTag"]] = relationship(
        "DBCustomerTag", back_populates="tag", cascade="all, delete-orphan"
    )

    def __init__(self, name: str, color: str, **kwargs):
        self.id = kwargs.get('id') or new_id('tag')
        self.name = name
        self.color = color
        self.created_at = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'createdAt': iso(self.created_at)
        }


class DBCustomerTag(db.Model):
    """Association between a customer and a tag"""
    __tablename__ = 'customer_tags'
    __table_args__ = (UniqueConstraint('customer_id', 'tag_id', name='uq_customer_tag'),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[str] = mapped_column(String(50), ForeignKey('customers.id', ondelete='CASCADE'), index=True)
    tag_id: Mapped[str] = mapped_column(String(50), ForeignKey('tags.id', ondelete='CASCADE'), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    customer: Mapped["DBCustomer"] = relationship("DBCustomer", back_populates="customer_tags")
    tag: Mapped["DBTag"] = relationship("DBTag", back_populates="customer_tags")


class DBReservation(db.Model):
    """Phone or walk-up reservation for a time slot"""
    __tablename__ = 'reservations'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    customer_id: Mapped[str] = mapped_column(String(50), ForeignKey('customers.id', ondelete='CASCADE'), index=True)
    date: Mapped[str] = mapped_column(String(10), index=True)  # YYYY-MM-DD
    start_time: Mapped[str] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5))
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    occasion: Mapped[str] = mapped_column(String(20), default=Occasion.REGULAR)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=ReservationStatus.CONFIRMED, index=True)
    has_conflict: Mapped[bool] = mapped_column(Boolean, default=False)
    conflict_overridden: Mapped[bool] = mapped_column(Boolean, default=False)
    is_walkup: Mapped[bool] = mapped_column(Boolean, default=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(50), ForeignKey('users.id'), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer: Mapped["DBCustomer"] = relationship("DBCustomer", back_populates="reservations")

    def __init__(self, customer_id: str, date: str, start_time: str, end_time: str, party_size: int, **kwargs):
        self.id = kwargs.get('id') or new_id('res')
        self.customer_id = customer_id
        self.date = date
        self.start_time = start_time
        self.end_time = end_time
        self.party_size = party_size
        self.occasion = kwargs.get('occasion', Occasion.REGULAR)
        self.notes = kwargs.get('notes')
        self.status = kwargs.get('status', ReservationStatus.CONFIRMED)
        self.has_conflict = kwargs.get('has_conflict', False)
        self.conflict_overridden = kwargs.get('conflict_overridden', False)
        self.is_walkup = kwargs.get('is_walkup', False)
        self.created_by = kwargs.get('created_by')
        self.created_at = kwargs.get('created_at') or datetime.utcnow()
        self.updated_at = self.created_at

    def to_dict(self, include_customer: bool = False) -> dict:
        data = {
            'id': self.id,
            'customerId': self.customer_id,
            'date': self.date,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'partySize': self.party_size,
            'occasion': self.occasion,
            'notes': self.notes,
            'status': self.status,
            'hasConflict': self.has_conflict,
            'conflictOverridden': self.conflict_overridden,
            'isWalkup': self.is_walkup,
            'createdBy': self.created_by,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at)
        }
        if include_customer and self.customer:
            data['customer'] = self.customer.to_dict()
        return data


class DBCapacitySettings(db.Model):
    """Venue capacity and warning thresholds (single row, id='default')"""
    __tablename__ = 'capacity_settings'

    DEFAULT_ID = 'default'
    DEFAULT_CAPACITY = 40
    DEFAULT_WARNING_THRESHOLD = 0.8
    DEFAULT_CRITICAL_THRESHOLD = 1.0

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=DEFAULT_ID)
    default_capacity: Mapped[int] = mapped_column(Integer, default=DEFAULT_CAPACITY)
    warning_threshold: Mapped[float] = mapped_column(Float, default=DEFAULT_WARNING_THRESHOLD)
    critical_threshold: Mapped[float] = mapped_column(Float, default=DEFAULT_CRITICAL_THRESHOLD)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, **kwargs):
        self.id = self.DEFAULT_ID
        self.default_capacity = kwargs.get('default_capacity', self.DEFAULT_CAPACITY)
        self.warning_threshold = kwargs.get('warning_threshold', self.DEFAULT_WARNING_THRESHOLD)
        self.critical_threshold = kwargs.get('critical_threshold', self.DEFAULT_CRITICAL_THRESHOLD)
        self.updated_at = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'defaultCapacity': self.default_capacity,
            'warningThreshold': self.warning_threshold,
            'criticalThreshold': self.critical_threshold
        }


# ============================================
# Checklists
# ============================================

class DBChecklistTemplate(db.Model):
    """Reusable shift checklist (opening, closing, ...) with a completion window"""
    __tablename__ = 'checklist_templates'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    time_window_start_hour: Mapped[int] = mapped_column(Integer, default=0)
    time_window_start_minute: Mapped[int] = mapped_column(Integer, default=0)
    time_window_end_hour: Mapped[int] = mapped_column(Integer, default=23)
    time_window_end_minute: Mapped[int] = mapped_column(Integer, default=59)
    allow_late_completion: Mapped[bool] = mapped_column(Boolean, default=False)
    late_window_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    assigned_to: Mapped[str] = mapped_column(Text, default='all')  # 'all', 'shift' or JSON object
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items: Mapped[List["DBChecklistItem"]] = relationship(
        "DBChecklistItem", back_populates="template", cascade="all, delete-orphan",
        order_by="DBChecklistItem.order"
    )

    def __init__(self, name: str, type: str, **kwargs):
        self.id = kwargs.get('id') or new_id('tmpl')
        self.name = name
        self.type = type
        self.description = kwargs.get('description')
        self.time_window_start_hour = kwargs.get('time_window_start_hour', 0)
        self.time_window_start_minute = kwargs.get('time_window_start_minute', 0)
        self.time_window_end_hour = kwargs.get('time_window_end_hour', 23)
        self.time_window_end_minute = kwargs.get('time_window_end_minute', 59)
        self.allow_late_completion = kwargs.get('allow_late_completion', False)
        self.late_window_minutes = kwargs.get('late_window_minutes')
        self.assigned_to = kwargs.get('assigned_to', 'all')
        self.is_active = True
        self.created_by = kwargs.get('created_by')
        self.created_at = kwargs.get('created_at') or datetime.utcnow()
        self.updated_at = self.created_at

    def get_assigned_to(self):
        if self.assigned_to in (None, '', 'all', 'shift'):
            return self.assigned_to or 'all'
        return safe_json_loads(self.assigned_to, default=self.assigned_to)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.type,
            'timeWindowStartHour': self.time_window_start_hour,
            'timeWindowStartMinute': self.time_window_start_minute,
            'timeWindowEndHour': self.time_window_end_hour,
            'timeWindowEndMinute': self.time_window_end_minute,
            'allowLateCompletion': self.allow_late_completion,
            'lateWindowMinutes': self.late_window_minutes,
            'assignedTo': self.get_assigned_to(),
            'isActive': self.is_active,
            'createdBy': self.created_by,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
            'items': [item.to_dict() for item in self.items]
        }


class DBChecklistItem(db.Model):
    """Single line of a checklist template"""
    __tablename__ = 'checklist_items'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    template_id: Mapped[str] = mapped_column(String(50), ForeignKey('checklist_templates.id', ondelete='CASCADE'), index=True)
    label: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=True)
    order: Mapped[int] = mapped_column(Integer, default=0)

    template: Mapped["DBChecklistTemplate"] = relationship("DBChecklistTemplate", back_populates="items")

    def __init__(self, label: str, order: int = 0, **kwargs):
        self.id = kwargs.get('id') or new_id('item')
        self.label = label
        self.order = order
        self.description = kwargs.get('description')
        self.is_required = kwargs.get('is_required', True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'templateId': self.template_id,
            'label': self.label,
            'description': self.description,
            'isRequired': self.is_required,
            'order': self.order
        }


class DBChecklistInstance(db.Model):
    """A template assigned to one employee for one day"""
    __tablename__ = 'checklist_instances'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    template_id: Mapped[str] = mapped_column(String(50), ForeignKey('checklist_templates.id'), index=True)
    template_name: Mapped[str] = mapped_column(String(255))
    date: Mapped[str] = mapped_column(String(10), index=True)  # YYYY-MM-DD
    assigned_to_id: Mapped[str] = mapped_column(String(50), ForeignKey('users.id'), index=True)
    status: Mapped[str] = mapped_column(String(20), default=ChecklistStatus.PENDING, index=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    template: Mapped["DBChecklistTemplate"] = relationship("DBChecklistTemplate")
    assigned_to: Mapped["DBUser"] = relationship("DBUser")
    completions: Mapped[List["DBChecklistCompletion"]] = relationship(
        "DBChecklistCompletion", back_populates="instance", cascade="all, delete-orphan",
        order_by="DBChecklistCompletion.checked_at"
    )

    def __init__(self, template_id: str, template_name: str, date: str, assigned_to_id: str, **kwargs):
        self.id = kwargs.get('id') or new_id('inst')
        self.template_id = template_id
        self.template_name = template_name
        self.date = date
        self.assigned_to_id = assigned_to_id
        self.status = kwargs.get('status', ChecklistStatus.PENDING)
        self.started_at = kwargs.get('started_at')
        self.completed_at = kwargs.get('completed_at')
        self.created_at = datetime.utcnow()

    def completion_for(self, item_id: str) -> Optional["DBChecklistCompletion"]:
        for completion in self.completions:
            if completion.item_id == item_id:
                return completion
        return None

    def to_dict(self, include_template: bool = True) -> dict:
        data = {
            'id': self.id,
            'templateId': self.template_id,
            'templateName': self.template_name,
            'date': self.date,
            'assignedToId': self.assigned_to_id,
            'assignedTo': {
                'id': self.assigned_to.id,
                'name': self.assigned_to.name,
            } if self.assigned_to else None,
            'status': self.status,
            'startedAt': iso(self.started_at),
            'completedAt': iso(self.completed_at),
            'createdAt': iso(self.created_at),
            'completions': [c.to_dict() for c in self.completions]
        }
        if include_template and self.template:
            data['template'] = self.template.to_dict()
        return data


class DBChecklistCompletion(db.Model):
    """A checked item on a checklist instance"""
    __tablename__ = 'checklist_completions'
    __table_args__ = (UniqueConstraint('instance_id', 'item_id', name='uq_instance_item'),)

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    instance_id: Mapped[str] = mapped_column(String(50), ForeignKey('checklist_instances.id', ondelete='CASCADE'), index=True)
    item_id: Mapped[str] = mapped_column(String(50), index=True)
    checked_by_id: Mapped[str] = mapped_column(String(50), ForeignKey('users.id'))
    checked_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    is_late: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    instance: Mapped["DBChecklistInstance"] = relationship("DBChecklistInstance", back_populates="completions")

    def __init__(self, item_id: str, checked_by_id: str, **kwargs):
        self.id = kwargs.get('id') or new_id('comp')
        self.item_id = item_id
        self.checked_by_id = checked_by_id
        self.checked_at = kwargs.get('checked_at') or datetime.utcnow()
        self.is_late = kwargs.get('is_late', False)
        self.notes = kwargs.get('notes')

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'instanceId': self.instance_id,
            'itemId': self.item_id,
            'checkedById': self.checked_by_id,
            'checkedAt': iso(self.checked_at),
            'isLate': self.is_late,
            'notes': self.notes
        }


# ==========================================
# AUDIT LOG MODEL
# ==========================================

class DBAuditLog(db.Model):
    """Audit log for checklist and reservation actions"""
    __tablename__ = 'audit_logs'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Who did it
    user_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    user_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # What they did
    action: Mapped[str] = mapped_column(String(50), index=True)  # template_created, item_checked, ...
    entity_type: Mapped[str] = mapped_column(String(50), index=True)  # template, instance, reservation, ...
    entity_id: Mapped[str] = mapped_column(String(50), index=True)

    # Details
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON object
    was_within_time_window: Mapped[bool] = mapped_column(Boolean, default=True)

    # Context
    ip_address: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    endpoint: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Timestamp
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    def get_details(self) -> dict:
        return safe_json_loads(self.details, default={})

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'userId': self.user_id,
            'userName': self.user_name,
            'action': self.action,
            'entityType': self.entity_type,
            'entityId': self.entity_id,
            'details': self.get_details(),
            'wasWithinTimeWindow': self.was_within_time_window,
            'createdAt': iso(self.created_at)
        }


# ============================================
# Onboarding
# ============================================

class DBOnboardingProgress(db.Model):
    """Wizard progress for one new employee; step history kept in audit_log (JSON array)"""
    __tablename__ = 'onboarding_progress'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(50), ForeignKey('users.id', ondelete='CASCADE'), unique=True, index=True)
    employee_name: Mapped[str] = mapped_column(String(255))
    current_step: Mapped[str] = mapped_column(String(20), default=OnboardingStep.NDA)

    nda_signed: Mapped[bool] = mapped_column(Boolean, default=False)
    nda_signature: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON object
    documents: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    video_progress: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON object
    video_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    quiz_attempts: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    quiz_passed: Mapped[bool] = mapped_column(Boolean, default=False)
    quiz_best_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    physical_handoff: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON object
    handoff_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    manager_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    is_complete: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    audit_log: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee: Mapped["DBUser"] = relationship("DBUser")

    def __init__(self, employee_id: str, employee_name: str, **kwargs):
        self.id = kwargs.get('id') or new_id('onb')
        self.employee_id = employee_id
        self.employee_name = employee_name
        self.created_at = datetime.utcnow()
        self.updated_at = self.created_at
        self.reset()
        self.manager_id = kwargs.get('manager_id')
        self.audit_log = '[]'

    def reset(self):
        """Put every step back to its initial state; the audit log is kept"""
        self.current_step = OnboardingStep.NDA
        self.started_at = datetime.utcnow()
        self.nda_signed = False
        self.nda_signature = None
        self.documents = '[]'
        self.video_progress = None
        self.video_completed = False
        self.quiz_attempts = '[]'
        self.quiz_passed = False
        self.quiz_best_score = None
        self.physical_handoff = None
        self.handoff_completed = False
        self.manager_id = None
        self.is_complete = False
        self.completed_at = None

    # JSON accessors
    def get_nda_signature(self) -> Optional[dict]:
        return safe_json_loads(self.nda_signature, default={}) or None

    def set_nda_signature(self, signature: dict):
        self.nda_signature = json.dumps(signature)

    def get_documents(self) -> List[dict]:
        return safe_json_loads(self.documents)

    def set_documents(self, documents: List[dict]):
        self.documents = json.dumps(documents)

    def get_video_progress(self) -> Optional[dict]:
        return safe_json_loads(self.video_progress, default={}) or None

    def set_video_progress(self, progress: dict):
        self.video_progress = json.dumps(progress)

    def get_quiz_attempts(self) -> List[dict]:
        return safe_json_loads(self.quiz_attempts)

    def set_quiz_attempts(self, attempts: List[dict]):
        self.quiz_attempts = json.dumps(attempts)

    def get_physical_handoff(self) -> dict:
        return safe_json_loads(self.physical_handoff, default={})

    def set_physical_handoff(self, handoff: dict):
        self.physical_handoff = json.dumps(handoff)

    def get_audit_log(self) -> List[dict]:
        return safe_json_loads(self.audit_log)

    def set_audit_log(self, entries: List[dict]):
        self.audit_log = json.dumps(entries)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'employeeId': self.employee_id,
            'employeeName': self.employee_name,
            'employee': {
                'id': self.employee.id,
                'name': self.employee.name,
                'email': self.employee.email,
                'avatar': self.employee.avatar,
            } if self.employee else None,
            'currentStep': self.current_step,
            'ndaSigned': self.nda_signed,
            'ndaSignature': self.get_nda_signature(),
            'documents': self.get_documents(),
            'videoProgress': self.get_video_progress(),
            'videoCompleted': self.video_completed,
            'quizAttempts': self.get_quiz_attempts(),
            'quizPassed': self.quiz_passed,
            'quizBestScore': self.quiz_best_score,
            'physicalHandoff': self.get_physical_handoff() or None,
            'handoffCompleted': self.handoff_completed,
            'managerId': self.manager_id,
            'isComplete': self.is_complete,
            'startedAt': iso(self.started_at),
            'completedAt': iso(self.completed_at),
            'auditLog': self.get_audit_log(),
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at)
        }


class DBOnboardingConfig(db.Model):
    """Onboarding content managed by managers (single row, id='default')"""
    __tablename__ = 'onboarding_config'

    DEFAULT_ID = 'default'
    DEFAULT_NDA_CONTENT = '<p>Configurati continutul NDA.</p>'
    DEFAULT_PASS_THRESHOLD = 80
    DEFAULT_MAX_ATTEMPTS = 3

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=DEFAULT_ID)
    nda_content: Mapped[str] = mapped_column(Text, default=DEFAULT_NDA_CONTENT)
    quiz_pass_threshold: Mapped[int] = mapped_column(Integer, default=DEFAULT_PASS_THRESHOLD)
    quiz_max_attempts: Mapped[int] = mapped_column(Integer, default=DEFAULT_MAX_ATTEMPTS)
    video_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    video_file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    video_file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    video_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    documents: Mapped[List["DBOnboardingDocument"]] = relationship(
        "DBOnboardingDocument", cascade="all, delete-orphan", order_by="DBOnboardingDocument.sort_order"
    )
    chapters: Mapped[List["DBOnboardingVideoChapter"]] = relationship(
        "DBOnboardingVideoChapter", cascade="all, delete-orphan", order_by="DBOnboardingVideoChapter.sort_order"
    )
    questions: Mapped[List["DBOnboardingQuizQuestion"]] = relationship(
        "DBOnboardingQuizQuestion", cascade="all, delete-orphan", order_by="DBOnboardingQuizQuestion.sort_order"
    )

    def __init__(self, **kwargs):
        self.id = self.DEFAULT_ID
        self.nda_content = kwargs.get('nda_content', self.DEFAULT_NDA_CONTENT)
        self.quiz_pass_threshold = kwargs.get('quiz_pass_threshold', self.DEFAULT_PASS_THRESHOLD)
        self.quiz_max_attempts = kwargs.get('quiz_max_attempts', self.DEFAULT_MAX_ATTEMPTS)
        self.video_description = kwargs.get('video_description')
        self.updated_at = datetime.utcnow()

    def to_dict(self, include_answers: bool = True) -> dict:
        return {
            'id': self.id,
            'ndaContent': self.nda_content,
            'quizPassThreshold': self.quiz_pass_threshold,
            'quizMaxAttempts': self.quiz_max_attempts,
            'videoUrl': self.video_url,
            'videoFileName': self.video_file_name,
            'videoFileSize': self.video_file_size,
            'videoDescription': self.video_description,
            'updatedBy': self.updated_by,
            'updatedAt': iso(self.updated_at),
            'documents': [d.to_dict() for d in self.documents],
            'chapters': [c.to_dict() for c in self.chapters],
            'questions': [q.to_dict(include_answer=include_answers) for q in self.questions]
        }


class DBOnboardingDocument(db.Model):
    """Policy document an employee must read and confirm"""
    __tablename__ = 'onboarding_documents'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    config_id: Mapped[str] = mapped_column(String(50), ForeignKey('onboarding_config.id', ondelete='CASCADE'), default='default')
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    min_reading_seconds: Mapped[int] = mapped_column(Integer, default=30)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    def __init__(self, title: str, content: str, **kwargs):
        self.id = kwargs.get('id') or new_id('doc')
        self.config_id = DBOnboardingConfig.DEFAULT_ID
        self.title = title
        self.content = content
        self.min_reading_seconds = kwargs.get('min_reading_seconds', 30)
        self.sort_order = kwargs.get('sort_order', 0)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'minReadingSeconds': self.min_reading_seconds,
            'sortOrder': self.sort_order
        }


class DBOnboardingVideoChapter(db.Model):
    """Chapter marker in the training video"""
    __tablename__ = 'onboarding_video_chapters'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    config_id: Mapped[str] = mapped_column(String(50), ForeignKey('onboarding_config.id', ondelete='CASCADE'), default='default')
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[int] = mapped_column(Integer, nullable=False)  # seconds from start
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    def __init__(self, title: str, timestamp: int, **kwargs):
        self.id = kwargs.get('id') or new_id('chap')
        self.config_id = DBOnboardingConfig.DEFAULT_ID
        self.title = title
        self.timestamp = timestamp
        self.sort_order = kwargs.get('sort_order', 0)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'timestamp': self.timestamp,
            'sortOrder': self.sort_order
        }


class DBOnboardingQuizQuestion(db.Model):
    """Quiz question; correct_answer is a JSON string or list of option ids"""
    __tablename__ = 'onboarding_quiz_questions'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    config_id: Mapped[str] = mapped_column(String(50), ForeignKey('onboarding_config.id', ondelete='CASCADE'), default='default')
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[str] = mapped_column(Text, default='[]')  # JSON [{id, text}]
    correct_answer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON str | [str]
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    def __init__(self, type: str, text: str, **kwargs):
        self.id = kwargs.get('id') or new_id('q')
        self.config_id = DBOnboardingConfig.DEFAULT_ID
        self.type = type
        self.text = text
        self.options = json.dumps(kwargs.get('options') or [])
        self.set_correct_answer(kwargs.get('correct_answer'))
        self.sort_order = kwargs.get('sort_order', 0)

    def get_options(self) -> List[dict]:
        return safe_json_loads(self.options)

    def set_options(self, options: List[dict]):
        self.options = json.dumps(options or [])

    def get_correct_answer(self):
        if self.correct_answer is None:
            return None
        return safe_json_loads(self.correct_answer, default='')

    def set_correct_answer(self, answer):
        self.correct_answer = json.dumps(answer) if answer is not None else None

    def to_dict(self, include_answer: bool = True) -> dict:
        data = {
            'id': self.id,
            'type': self.type,
            'text': self.text,
            'options': self.get_options(),
            'sortOrder': self.sort_order
        }
        if include_answer:
            data['correctAnswer'] = self.get_correct_answer()
        return data


# ============================================
# Social media
# ============================================

class DBSocialPost(db.Model):
    """Social media post targeting one or more platforms"""
    __tablename__ = 'social_posts'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    caption: Mapped[str] = mapped_column(Text, nullable=False)
    media_ids: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    hashtags: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    platforms: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=PostStatus.DRAFT, index=True)
    platform_statuses: Mapped[str] = mapped_column(Text, default='{}')  # JSON object
    metrics: Mapped[str] = mapped_column(Text, default='{}')  # JSON object
    created_by_id: Mapped[Optional[str]] = mapped_column(String(50), ForeignKey('users.id'), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, caption: str, platforms: List[str], **kwargs):
        self.id = kwargs.get('id') or new_id('post')
        self.caption = caption
        self.platforms = json.dumps(platforms)
        self.media_ids = json.dumps(kwargs.get('media_ids') or [])
        self.hashtags = json.dumps(kwargs.get('hashtags') or [])
        self.scheduled_at = kwargs.get('scheduled_at')
        self.status = kwargs.get('status', PostStatus.SCHEDULED if self.scheduled_at else PostStatus.DRAFT)
        self.platform_statuses = json.dumps(kwargs.get('platform_statuses') or {})
        self.metrics = json.dumps(kwargs.get('metrics') or {})
        self.created_by_id = kwargs.get('created_by_id')
        self.created_at = kwargs.get('created_at') or datetime.utcnow()
        self.updated_at = self.created_at

    def get_media_ids(self) -> List[str]:
        return safe_json_loads(self.media_ids)

    def get_hashtags(self) -> List[str]:
        return safe_json_loads(self.hashtags)

    def get_platforms(self) -> List[str]:
        return safe_json_loads(self.platforms)

    def get_platform_statuses(self) -> dict:
        return safe_json_loads(self.platform_statuses, default={})

    def set_platform_statuses(self, statuses: dict):
        self.platform_statuses = json.dumps(statuses)

    def get_metrics(self) -> dict:
        return safe_json_loads(self.metrics, default={})

    def mark_published(self, when: Optional[datetime] = None):
        self.status = PostStatus.PUBLISHED
        self.published_at = when or datetime.utcnow()
        statuses = self.get_platform_statuses()
        for platform in self.get_platforms():
            statuses[platform] = {'status': PostStatus.PUBLISHED, 'publishedAt': iso(self.published_at)}
        self.set_platform_statuses(statuses)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'caption': self.caption,
            'mediaIds': self.get_media_ids(),
            'hashtags': self.get_hashtags(),
            'platforms': self.get_platforms(),
            'scheduledAt': iso(self.scheduled_at),
            'publishedAt': iso(self.published_at),
            'status': self.status,
            'platformStatuses': self.get_platform_statuses(),
            'metrics': self.get_metrics(),
            'createdById': self.created_by_id,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at)
        }


class DBSocialTemplate(db.Model):
    """Reusable caption template"""
    __tablename__ = 'social_templates'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __init__(self, name: str, content: str, category: str, **kwargs):
        self.id = kwargs.get('id') or new_id('stpl')
        self.name = name
        self.content = content
        self.category = category
        self.created_at = kwargs.get('created_at') or datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'content': self.content,
            'category': self.category,
            'createdAt': iso(self.created_at)
        }


class DBHashtagSet(db.Model):
    """Named group of hashtags inserted together"""
    __tablename__ = 'hashtag_sets'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    hashtags: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __init__(self, name: str, hashtags: List[str], **kwargs):
        self.id = kwargs.get('id') or new_id('hset')
        self.name = name
        self.set_hashtags(hashtags)
        self.created_at = kwargs.get('created_at') or datetime.utcnow()

    def get_hashtags(self) -> List[str]:
        return safe_json_loads(self.hashtags)

    def set_hashtags(self, hashtags: List[str]):
        self.hashtags = json.dumps(hashtags)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'hashtags': self.get_hashtags(),
            'createdAt': iso(self.created_at)
        }


class DBContentLibraryItem(db.Model):
    """Image or video available to attach to posts"""
    __tablename__ = 'content_library'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(10), index=True)  # image | video
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail_url: Mapped[str] = mapped_column(String(500), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100))
    size: Mapped[int] = mapped_column(Integer)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tags: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __init__(self, name: str, type: str, url: str, thumbnail_url: str, mime_type: str, size: int, **kwargs):
        self.id = kwargs.get('id') or new_id('media')
        self.name = name
        self.type = type
        self.url = url
        self.thumbnail_url = thumbnail_url
        self.mime_type = mime_type
        self.size = size
        self.width = kwargs.get('width')
        self.height = kwargs.get('height')
        self.duration = kwargs.get('duration')
        self.tags = json.dumps(kwargs.get('tags') or [])
        self.created_at = kwargs.get('created_at') or datetime.utcnow()

    def get_tags(self) -> List[str]:
        return safe_json_loads(self.tags)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'url': self.url,
            'thumbnailUrl': self.thumbnail_url,
            'mimeType': self.mime_type,
            'size': self.size,
            'width': self.width,
            'height': self.height,
            'duration': self.duration,
            'tags': self.get_tags(),
            'createdAt': iso(self.created_at)
        }


# ============================================
# Warnings / discipline
# ============================================

class DBWarning(db.Model):
    """Disciplinary warning issued by a manager to an employee"""
    __tablename__ = 'warnings'

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(50), ForeignKey('users.id'), index=True)
    employee_name: Mapped[str] = mapped_column(String(255))
    manager_id: Mapped[str] = mapped_column(String(50), ForeignKey('users.id'))
    manager_name: Mapped[str] = mapped_column(String(255))
    level: Mapped[str] = mapped_column(String(20), index=True)
    category: Mapped[str] = mapped_column(String(30))
    description: Mapped[str] = mapped_column(Text, nullable=False)
    incident_date: Mapped[datetime] = mapped_column(DateTime)
    witness: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    attachments: Mapped[str] = mapped_column(Text, default='[]')  # JSON array

    manager_signature: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON object
    employee_signature: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON object
    acknowledgment_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    refused_to_sign: Mapped[bool] = mapped_column(Boolean, default=False)
    refused_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    refused_witnessed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(String(30), default=WarningStatus.PENDING, index=True)
    is_cleared: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    cleared_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    cleared_by_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    cleared_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, employee_id: str, employee_name: str, manager_id: str, manager_name: str,
                 level: str, category: str, description: str, incident_date: datetime, **kwargs):
        self.id = kwargs.get('id') or new_id('warn')
        self.employee_id = employee_id
        self.employee_name = employee_name
        self.manager_id = manager_id
        self.manager_name = manager_name
        self.level = level
        self.category = category
        self.description = description
        self.incident_date = incident_date
        self.witness = kwargs.get('witness')
        self.attachments = json.dumps(kwargs.get('attachments') or [])
        self.manager_signature = json.dumps(kwargs['manager_signature']) if kwargs.get('manager_signature') else None
        self.employee_signature = None
        self.refused_to_sign = False
        self.status = kwargs.get('status', WarningStatus.PENDING)
        self.is_cleared = False
        self.created_at = kwargs.get('created_at') or datetime.utcnow()
        self.updated_at = self.created_at

    @property
    def is_pending(self) -> bool:
        return self.status == WarningStatus.PENDING

    def get_attachments(self) -> list:
        return safe_json_loads(self.attachments)

    def get_manager_signature(self) -> Optional[dict]:
        return safe_json_loads(self.manager_signature, default={}) or None

    def set_manager_signature(self, signature: dict):
        self.manager_signature = json.dumps(signature)

    def get_employee_signature(self) -> Optional[dict]:
        return safe_json_loads(self.employee_signature, default={}) or None

    def set_employee_signature(self, signature: dict):
        self.employee_signature = json.dumps(signature)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'employeeId': self.employee_id,
            'employeeName': self.employee_name,
            'managerId': self.manager_id,
            'managerName': self.manager_name,
            'level': self.level,
            'category': self.category,
            'description': self.description,
            'incidentDate': iso(self.incident_date),
            'witness': self.witness,
            'attachments': self.get_attachments(),
            'managerSignature': self.get_manager_signature(),
            'employeeSignature': self.get_employee_signature(),
            'acknowledgmentComment': self.acknowledgment_comment,
            'acknowledgedAt': iso(self.acknowledged_at),
            'refusedToSign': self.refused_to_sign,
            'refusedAt': iso(self.refused_at),
            'refusedWitnessedBy': self.refused_witnessed_by,
            'status': self.status,
            'isCleared': self.is_cleared,
            'clearedAt': iso(self.cleared_at),
            'clearedById': self.cleared_by_id,
            'clearedReason': self.cleared_reason,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at)
        }
