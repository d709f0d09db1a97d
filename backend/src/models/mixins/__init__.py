"""
Model mixins for shared functionality across entities.

This module provides reusable SQLAlchemy mixins that can be inherited
by multiple models to add common functionality.
"""

from backend.src.models.mixins.timestamps import TimestampMixin
from backend.src.models.mixins.resource import ResourceMixin

__all__ = ["TimestampMixin", "ResourceMixin"]
