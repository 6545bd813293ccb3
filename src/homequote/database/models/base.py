"""
Base model class for all database models
"""
from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, DateTime

from homequote.utils.helpers import utcnow

Base = declarative_base()


class BaseModel(Base):
    """
    Abstract base model with timestamp fields.
    Tables declare their own string UUID primary keys.
    """
    __abstract__ = True

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
