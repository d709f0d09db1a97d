"""
Event model for scheduled broadcast productions.

Events are the unit of scheduling. Each event takes place in a city on a
date and time, and carries the observers, SNG units and generators assigned
to it.

Design Rationale:
- event_date + event_time form the instant used for travel-time arithmetic
- event_time defaults to midnight when not provided
- Resource assignments are plain association tables (one per kind) with a
  unique (event_id, resource_id) pair and CASCADE on both sides
- Status is a flat enum; any status may move to any other
- teams/metadata are free-form JSON payloads
"""

import enum
from datetime import datetime, time

from sqlalchemy import (
    Column, Integer, String, Date, Time, Text, Table,
    ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import TimestampMixin
from backend.src.models.types import JSONBType


class EventStatus(enum.Enum):
    """Event lifecycle status."""
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


def _association_table(name: str, resource_table: str, resource_column: str) -> Table:
    return Table(
        name,
        Base.metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column(
            "event_id",
            Integer,
            ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        Column(
            resource_column,
            Integer,
            ForeignKey(f"{resource_table}.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        UniqueConstraint("event_id", resource_column, name=f"uq_{name}_pair"),
    )


event_observers = _association_table("event_observers", "observers", "observer_id")
event_sngs = _association_table("event_sngs", "sngs", "sng_id")
event_generators = _association_table("event_generators", "generators", "generator_id")


class Event(Base, TimestampMixin):
    """
    Scheduled event model.

    Attributes:
        id: Primary key
        title: Event title
        description: Optional description
        event_date: Calendar date
        event_time: Time of day (midnight when omitted)
        status: scheduled, ongoing, completed, cancelled or postponed
        event_type_id: FK to event_types (SET NULL on delete)
        city_id: FK to cities (RESTRICT on delete)
        venue_id: FK to venues (SET NULL on delete)
        teams: JSON list of participating teams
        event_metadata: JSON object stored in the "metadata" column
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Relationships:
        observers / sngs / generators: Assigned resources (many-to-many)

    Indexes:
        - (event_date, event_time) for timeline and calendar queries
        - status
    """

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    event_date = Column(Date, nullable=False, index=True)
    event_time = Column(Time, nullable=False, default=time(0, 0))

    status = Column(String(20), default=EventStatus.SCHEDULED.value, nullable=False)

    event_type_id = Column(
        Integer,
        ForeignKey("event_types.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    city_id = Column(
        Integer,
        ForeignKey("cities.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    venue_id = Column(
        Integer,
        ForeignKey("venues.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    teams = Column(JSONBType, nullable=True)
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSONBType, nullable=True)

    event_type = relationship("EventType", back_populates="events")
    city = relationship("City", back_populates="events")
    venue = relationship("Venue", back_populates="events")

    observers = relationship(
        "Observer",
        secondary=event_observers,
        back_populates="events",
        order_by="Observer.code",
    )
    sngs = relationship(
        "Sng",
        secondary=event_sngs,
        back_populates="events",
        order_by="Sng.code",
    )
    generators = relationship(
        "Generator",
        secondary=event_generators,
        back_populates="events",
        order_by="Generator.code",
    )

    __table_args__ = (
        Index("ix_events_date_time", "event_date", "event_time"),
        Index("ix_events_status", "status"),
    )

    @property
    def starts_at(self) -> datetime:
        """Date and time combined into a single instant."""
        return datetime.combine(self.event_date, self.event_time or time(0, 0))

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, title='{self.title}', "
            f"date={self.event_date}, time={self.event_time})>"
        )
