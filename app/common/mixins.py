"""
Common mixins for Savia models
"""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
from uuid import uuid4


def generate_id() -> str:
    return str(uuid4())


class IdMixin:
    """String UUID primary key (portable between PostgreSQL and SQLite)"""

    id = Column(String(64), primary_key=True, default=generate_id, index=True)


class TimestampMixin:
    """Mixin for models that need timestamp tracking"""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class BaseMixin(IdMixin, TimestampMixin):
    """Combines id and timestamp functionality for most business models"""
