"""
LaserZone Hub - Routes
API endpoint registration
"""
from flask import Flask


def register_routes(app: Flask):
    """Register all API blueprints"""

    from laserzone_hub.routes.auth import auth_bp
    from laserzone_hub.routes.calendar import calendar_bp
    from laserzone_hub.routes.checklists import checklists_bp
    from laserzone_hub.routes.dashboard import dashboard_bp
    from laserzone_hub.routes.employees import employees_bp, users_bp
    from laserzone_hub.routes.onboarding import onboarding_bp
    from laserzone_hub.routes.onboarding_config import onboarding_config_bp
    from laserzone_hub.routes.social import social_bp
    from laserzone_hub.routes.warnings import warnings_bp

    # Register with /api prefix
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(calendar_bp, url_prefix='/api/calendar')
    app.register_blueprint(checklists_bp, url_prefix='/api/checklists')
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')
    app.register_blueprint(employees_bp, url_prefix='/api/employees')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    # config before onboarding so /config is not read as an employee id
    app.register_blueprint(onboarding_config_bp, url_prefix='/api/onboarding/config')
    app.register_blueprint(onboarding_bp, url_prefix='/api/onboarding')
    app.register_blueprint(social_bp, url_prefix='/api/social')
    app.register_blueprint(warnings_bp, url_prefix='/api/warnings')
