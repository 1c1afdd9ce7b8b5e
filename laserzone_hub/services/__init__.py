"""
LaserZone Hub - Services
Business rules shared by the route modules and the scheduler
"""
from laserzone_hub.services.errors import ServiceError, NotFoundError, ForbiddenError
from laserzone_hub.services.db_service import DataService, create_user
from laserzone_hub.services.audit_service import AuditService, audit_service
from laserzone_hub.services.capacity_service import CapacityService, capacity_service
from laserzone_hub.services.calendar_service import CalendarService, calendar_service
from laserzone_hub.services.checklist_service import ChecklistService, checklist_service
from laserzone_hub.services.onboarding_service import OnboardingService, onboarding_service
from laserzone_hub.services.onboarding_config_service import OnboardingConfigService, onboarding_config_service
from laserzone_hub.services.social_service import SocialService, social_service
from laserzone_hub.services.warning_service import WarningService, warning_service
from laserzone_hub.services.dashboard_service import DashboardService, dashboard_service

__all__ = [
    'ServiceError',
    'NotFoundError',
    'ForbiddenError',
    'DataService',
    'create_user',
    'AuditService',
    'audit_service',
    'CapacityService',
    'capacity_service',
    'CalendarService',
    'calendar_service',
    'ChecklistService',
    'checklist_service',
    'OnboardingService',
    'onboarding_service',
    'OnboardingConfigService',
    'onboarding_config_service',
    'SocialService',
    'social_service',
    'WarningService',
    'warning_service',
    'DashboardService',
    'dashboard_service'
]
