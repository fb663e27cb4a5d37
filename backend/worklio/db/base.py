"""
SQLAlchemy declarative base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Metadata root shared by the rate store tables."""
