"""
CityDistance model for travel-time graph edges.

Each row is an undirected edge between two cities weighted by the hours a
resource needs to travel between them.

Design Rationale:
- Edges are stored canonically with from_city_id < to_city_id so the
  unordered pair {A, B} maps to exactly one row
- UniqueConstraint on the pair rejects duplicates in either direction
- CheckConstraint forbids self-pairs at the database level
- CASCADE on both city FKs removes edges when a city is deleted
"""

from sqlalchemy import (
    Column, Integer, Numeric, String,
    ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import TimestampMixin


class CityDistance(Base, TimestampMixin):
    """
    Travel time between two cities.

    Attributes:
        id: Primary key
        from_city_id: Lower city id of the pair (CASCADE on delete)
        to_city_id: Higher city id of the pair (CASCADE on delete)
        travel_time_hours: Required travel hours (Decimal 5,2, >= 0)
        notes: Optional notes

    Constraints:
        - Unique (from_city_id, to_city_id)
        - from_city_id < to_city_id
        - travel_time_hours >= 0
    """

    __tablename__ = "city_distances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_city_id = Column(
        Integer,
        ForeignKey("cities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    to_city_id = Column(
        Integer,
        ForeignKey("cities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    travel_time_hours = Column(Numeric(5, 2), nullable=False)
    notes = Column(String(1000), nullable=True)

    from_city = relationship("City", foreign_keys=[from_city_id])
    to_city = relationship("City", foreign_keys=[to_city_id])

    __table_args__ = (
        UniqueConstraint("from_city_id", "to_city_id", name="uq_city_distance_pair"),
        CheckConstraint("from_city_id < to_city_id", name="ck_city_distance_ordered"),
        CheckConstraint("travel_time_hours >= 0", name="ck_city_distance_non_negative"),
    )

    @property
    def pair(self) -> tuple:
        """Canonical (lower, higher) city id pair."""
        return (self.from_city_id, self.to_city_id)

    def connects(self, city_a_id: int, city_b_id: int) -> bool:
        """Check whether this edge joins the two cities, in either order."""
        return self.pair == (min(city_a_id, city_b_id), max(city_a_id, city_b_id))

    def __repr__(self) -> str:
        return (
            f"<CityDistance(id={self.id}, "
            f"{self.from_city_id}<->{self.to_city_id}, "
            f"hours={self.travel_time_hours})>"
        )
