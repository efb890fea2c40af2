"""
SQLAlchemy declarative base.

This is the foundation for all database models.
All models inherit from this Base class.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Keeping every table on one Base lets Alembic and the test fixtures
    create the whole schema from a single metadata object.
    """
    pass
