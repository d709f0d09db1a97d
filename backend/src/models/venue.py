"""
Venue model for event locations within a city.

Venues are resolved by (name, city) when events are created, so the same
stadium name can exist in two different cities.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import TimestampMixin


class Venue(Base, TimestampMixin):
    """
    Venue model.

    Attributes:
        id: Primary key
        name: Venue name (unique within a city)
        city_id: FK to cities (CASCADE on delete)
        address: Optional street address
    """

    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    city_id = Column(
        Integer,
        ForeignKey("cities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    address = Column(String(500), nullable=True)

    city = relationship("City", back_populates="venues")
    events = relationship("Event", back_populates="venue")

    __table_args__ = (
        UniqueConstraint("name", "city_id", name="uq_venue_name_city"),
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name='{self.name}', city_id={self.city_id})>"
