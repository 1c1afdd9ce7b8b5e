"""
LaserZone Hub - Database Service
Common data operations shared by the route modules
"""
from typing import Optional, List
from datetime import datetime

from laserzone_hub.database import db
from laserzone_hub.models.db_models import DBUser, UserRole


class DataService:
    """
    Database-backed data service
    Wraps session commits so every caller rolls back the same way
    """

    # ============================================
    # Generic Operations
    # ============================================

    def save(self, obj):
        """Add (if new) and commit a model instance"""
        db.session.add(obj)
        self.commit()
        return obj

    def commit(self):
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    # ============================================
    # User Operations
    # ============================================

    def save_user(self, user: DBUser) -> DBUser:
        """Save or update a user"""
        return self.save(user)

    def get_user(self, user_id: str) -> Optional[DBUser]:
        """Get user by ID"""
        return db.session.get(DBUser, user_id)

    def get_user_by_email(self, email: str) -> Optional[DBUser]:
        """Get user by email"""
        return DBUser.query.filter_by(email=email.lower()).first()

    def get_users(self, role: str = None, shift: str = None) -> List[DBUser]:
        """Get active users, optionally filtered by role and shift, ordered by name"""
        query = DBUser.query.filter_by(is_active=True)
        if role:
            query = query.filter(DBUser.role == role)
        if shift:
            query = query.filter(DBUser.shift_type == shift)
        return query.order_by(DBUser.name.asc()).all()

    def count_employees(self) -> int:
        return DBUser.query.filter_by(role=UserRole.EMPLOYEE, is_active=True).count()

    def update_last_login(self, user_id: str):
        """Update user's last login timestamp"""
        user = self.get_user(user_id)
        if user:
            user.last_login = datetime.utcnow()
            self.commit()


def create_user(email: str, name: str, password: str, role: str = UserRole.EMPLOYEE, **kwargs) -> DBUser:
    """Create and persist a user account"""
    user = DBUser(email=email, name=name, password=password, role=role, **kwargs)
    return DataService().save_user(user)
