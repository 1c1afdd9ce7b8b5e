"""
LaserZone Hub - Configuration
Environment-based configuration for different deployment stages
"""
import os
from datetime import timedelta


def _normalize_db_url(db_url):
    """Render/Heroku hand out postgres:// URLs, SQLAlchemy wants the psycopg v3 driver"""
    if db_url.startswith('postgres://'):
        return db_url.replace('postgres://', 'postgresql+psycopg://', 1)
    if db_url.startswith('postgresql://'):
        return db_url.replace('postgresql://', 'postgresql+psycopg://', 1)
    return db_url


class BaseConfig:
    """Base configuration"""

    # Flask - Secret key (required in production)
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Warn if using dev key in production-like environment
    _is_production = os.environ.get('RENDER') or os.environ.get('FLASK_ENV') == 'production'
    if SECRET_KEY == 'dev-secret-key-change-in-production' and _is_production:
        import warnings
        warnings.warn("SECRET_KEY is using default dev value in production! Set SECRET_KEY env var.")

    # CORS
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')

    # Database - PostgreSQL for production, SQLite for local dev
    DATABASE_URL = os.environ.get('DATABASE_URL', '')

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Get database URI, handling Render's postgres:// prefix"""
        db_url = os.environ.get('DATABASE_URL', '')
        if db_url:
            return _normalize_db_url(db_url)

        # Fallback to SQLite for local development
        return 'sqlite:///laserzone_hub.db'

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Rate limiting
    RATELIMIT_ENABLED = os.environ.get('RATE_LIMIT_ENABLED', 'true').lower() == 'true'
    RATELIMIT_DEFAULT_LIMITS = ["5000 per day", "1000 per hour"]
    LOGIN_RATE_LIMIT = os.environ.get('LOGIN_RATE_LIMIT', '10 per minute')

    # JWT session
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get('JWT_EXPIRES_HOURS', '12')))
    AUTH_COOKIE_NAME = os.environ.get('AUTH_COOKIE_NAME', 'laserzone_session')
    AUTH_COOKIE_SECURE = os.environ.get('AUTH_COOKIE_SECURE', 'false').lower() == 'true'

    # Venue opening hours used to build capacity slots
    VENUE_OPEN_HOUR = int(os.environ.get('VENUE_OPEN_HOUR', '9'))
    VENUE_CLOSE_HOUR = int(os.environ.get('VENUE_CLOSE_HOUR', '22'))
    CAPACITY_SLOT_MINUTES = 30

    # Onboarding training video uploads
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    VIDEO_CHUNK_FOLDER = os.environ.get('VIDEO_CHUNK_FOLDER', '/tmp/onboarding-video-chunks')
    MAX_VIDEO_SIZE = int(os.environ.get('MAX_VIDEO_SIZE', str(1024 * 1024 * 1024)))  # 1 GB

    # Social publishing job
    SOCIAL_PUBLISH_INTERVAL_MINUTES = int(os.environ.get('SOCIAL_PUBLISH_INTERVAL_MINUTES', '5'))


class DevelopmentConfig(BaseConfig):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Production always runs on DATABASE_URL"""
        return _normalize_db_url(os.environ.get('DATABASE_URL', ''))

    AUTH_COOKIE_SECURE = os.environ.get('AUTH_COOKIE_SECURE', 'true').lower() == 'true'


class TestingConfig(BaseConfig):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    RATELIMIT_ENABLED = False

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Use TEST_DATABASE_URL if set, otherwise in-memory SQLite"""
        db_url = os.environ.get('TEST_DATABASE_URL', '')
        if db_url:
            return _normalize_db_url(db_url)
        return 'sqlite:///:memory:'

    # In-memory SQLite must stay on a single connection
    SQLALCHEMY_ENGINE_OPTIONS = {}

    JWT_SECRET_KEY = 'test-jwt-secret'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
