"""
LaserZone Hub - Data Models
SQLAlchemy ORM models for PostgreSQL
"""
