"""
LaserZone Hub - Venue Operations Platform
Reservations, staff checklists, onboarding, social posts and discipline
for a laser-tag venue
"""
from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.middleware.proxy_fix import ProxyFix
import os
import logging

__version__ = "1.4.0"

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Application factory pattern"""
    app = Flask(__name__)

    # Behind Render / nginx: trust X-Forwarded-* so request.remote_addr and scheme are real
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # Load config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    from laserzone_hub.config import config
    # Use instance instead of class to support @property
    config_instance = config.get(config_name, config['default'])()
    app.config.from_object(config_instance)

    # Enable CORS with credentials so the session cookie reaches the API
    cors_origins = app.config.get('CORS_ORIGINS', '*')
    if cors_origins == '*' and config_name == 'production':
        logger.warning("SECURITY: CORS_ORIGINS is set to '*' in production! Set specific origins.")
    CORS(app, origins=cors_origins, supports_credentials=cors_origins != '*')

    # Rate limiting
    limiter = Limiter(
        app=app,
        key_func=get_remote_address,
        default_limits=app.config['RATELIMIT_DEFAULT_LIMITS'],
        storage_uri="memory://"
    )
    app.limiter = limiter

    # Initialize database
    from laserzone_hub.database import init_db
    init_db(app)

    # Register blueprints
    from laserzone_hub.routes import register_routes
    register_routes(app)

    # Brute-force protection on the login form
    app.view_functions['auth.login'] = limiter.limit(app.config['LOGIN_RATE_LIMIT'])(
        app.view_functions['auth.login']
    )

    # ==========================================
    # GLOBAL ERROR HANDLERS
    # ==========================================

    from laserzone_hub.services.errors import ServiceError

    @app.errorhandler(ServiceError)
    def service_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'error': 'Cerere invalida',
            'message': str(error.description) if hasattr(error, 'description') else 'Cerere invalida'
        }), 400

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({'error': 'Neautorizat'}), 401

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({'error': 'Acces interzis'}), 403

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Resursa negasita',
            'message': 'Resursa ceruta nu exista'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Metoda nepermisa'}), 405

    @app.errorhandler(429)
    def too_many_requests(error):
        return jsonify({
            'error': 'Prea multe cereri',
            'message': str(error.description) if hasattr(error, 'description') else None
        }), 429

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Eroare interna',
            'message': 'A aparut o eroare neasteptata'
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Catch-all for unhandled exceptions"""
        from werkzeug.exceptions import HTTPException
        if isinstance(error, HTTPException):
            return jsonify({'error': error.name, 'message': error.description}), error.code

        logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({
            'error': 'Eroare interna',
            'message': 'A aparut o eroare neasteptata'
        }), 500

    # Health check
    @app.route('/health')
    def health():
        # Basic health check with database ping
        try:
            from laserzone_hub.database import db
            db.session.execute(db.text('SELECT 1'))
            db_status = 'connected'
        except Exception as e:
            logger.warning(f"Health check database ping failed: {e}")
            db_status = f'error: {str(e)[:50]}'

        from laserzone_hub.services.scheduler_service import get_scheduler_status

        return {
            'status': 'healthy' if db_status == 'connected' else 'degraded',
            'version': __version__,
            'database': db_status,
            'scheduler': get_scheduler_status()['status']
        }

    # API info endpoint
    @app.route('/api')
    def api_info():
        return {
            'name': 'LaserZone Hub API',
            'version': __version__,
            'status': 'running',
            'endpoints': {
                'auth': '/api/auth',
                'calendar': '/api/calendar',
                'checklists': '/api/checklists',
                'dashboard': '/api/dashboard',
                'employees': '/api/employees',
                'onboarding': '/api/onboarding',
                'social': '/api/social',
                'warnings': '/api/warnings'
            }
        }

    # Initialize background scheduler (only when explicitly enabled)
    if not app.config.get('TESTING') and os.environ.get('ENABLE_SCHEDULER') == '1':
        try:
            from laserzone_hub.services.scheduler_service import init_scheduler
            init_scheduler(app)
            app.logger.info("Background scheduler started")
        except Exception as e:
            app.logger.warning(f"Could not start scheduler: {e}")

    # Warn when nobody can manage the venue
    if not app.config.get('TESTING'):
        with app.app_context():
            try:
                from laserzone_hub.models.db_models import DBUser, UserRole
                if DBUser.query.filter_by(role=UserRole.MANAGER).count() == 0:
                    app.logger.warning("No manager account exists! Run: python scripts/create_manager.py")
            except Exception as e:
                app.logger.warning(f"Could not check manager accounts: {e}")

    return app
