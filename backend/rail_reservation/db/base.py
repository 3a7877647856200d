"""
Declarative base and shared column mixins for all ORM models.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    # Python-side default keeps microsecond precision, so created_at orders
    # rows in creation order even on SQLite.
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
