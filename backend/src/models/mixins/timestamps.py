"""
Timestamp mixin for SQLAlchemy models.

Adds ``created_at`` / ``updated_at`` columns maintained by SQLAlchemy.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime


class TimestampMixin:
    """
    Mixin providing creation and modification timestamps.

    Adds:
    - created_at: Set once on insert
    - updated_at: Set on insert and refreshed on every update
    """

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )
