"""
LaserZone Hub - Database Configuration
SQLAlchemy ORM setup (PostgreSQL in production, SQLite locally)
"""
from flask_sqlalchemy import SQLAlchemy
import logging
logger = logging.getLogger(__name__)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


db = SQLAlchemy(model_class=Base)


def init_db(app):
    """Initialize database with app"""
    db.init_app(app)

    with app.app_context():
        # Import models to register them
        from laserzone_hub.models import db_models  # noqa

        # Create all tables
        db.create_all()

        logger.info("Database tables created")
