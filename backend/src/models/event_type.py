"""
EventType model for event classification (match, shoot, studio...).

Event types are created on demand from their name; the short code and the
display colour are derived from the name.
"""

import hashlib

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import TimestampMixin


class EventType(Base, TimestampMixin):
    """
    Event type model.

    Attributes:
        id: Primary key
        name: Unique type name
        code: Short code (first three letters, upper-case)
        color: Hex display colour (#RRGGBB)
    """

    __tablename__ = "event_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    code = Column(String(20), nullable=False)
    color = Column(String(7), nullable=False)

    events = relationship("Event", back_populates="event_type")

    @staticmethod
    def derive_code(name: str) -> str:
        """Short code for a type name, e.g. "Match" -> "MAT"."""
        return name.strip()[:3].upper()

    @staticmethod
    def derive_color(name: str) -> str:
        """Stable colour for a type name from the MD5 of the name."""
        return "#" + hashlib.md5(name.encode("utf-8")).hexdigest()[:6]

    def __repr__(self) -> str:
        return f"<EventType(id={self.id}, name='{self.name}', code='{self.code}')>"
