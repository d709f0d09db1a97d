"""
City model for scheduling locations.

Cities are the nodes of the travel-time graph. Every event takes place in a
city and every venue belongs to one.

Design Rationale:
- Unique name enables find-or-create by name during event creation
- is_active controls which cities appear in the distance matrix and the
  missing-distance report
- Coordinates are informational only; travel times come from CityDistance
- Distance edges are deleted with the city (CASCADE)
"""

from sqlalchemy import Column, Integer, String, Boolean, Numeric
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import TimestampMixin


class City(Base, TimestampMixin):
    """
    City model.

    Attributes:
        id: Primary key
        name: Unique city name
        country: Country name
        latitude: Optional latitude (Decimal 10,7)
        longitude: Optional longitude (Decimal 10,7)
        is_active: Whether the city participates in the distance graph
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Relationships:
        venues: Venues located in this city (one-to-many)
        events: Events held in this city (one-to-many)
    """

    __tablename__ = "cities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    country = Column(String(100), nullable=True)
    latitude = Column(Numeric(10, 7), nullable=True)
    longitude = Column(Numeric(10, 7), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    venues = relationship(
        "Venue",
        back_populates="city",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    events = relationship("Event", back_populates="city")

    def __repr__(self) -> str:
        return f"<City(id={self.id}, name='{self.name}')>"

    def __str__(self) -> str:
        return self.name
