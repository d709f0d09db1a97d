"""
Assignable production resources: observers, SNG units and generators.

Design Rationale:
- One table per kind keeps codes unique per kind (OB01 and SNG01 never clash)
- Shared columns come from ResourceMixin
- Each kind links to events through its own association table, listed in
  RESOURCE_ASSOCIATIONS so timeline queries can be written once for every kind
- Only observers and SNGs take part in conflict validation; generators are
  tracked but never validated
"""

from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import ResourceMixin
from backend.src.models.event import event_observers, event_sngs, event_generators


class Observer(Base, ResourceMixin):
    """Field observer (OB). Schedulable at most once per calendar day."""

    __tablename__ = "observers"
    KIND = "observer"

    events = relationship(
        "Event", secondary=event_observers, back_populates="observers"
    )


class Sng(Base, ResourceMixin):
    """Satellite news-gathering unit. Limited by travel time between cities."""

    __tablename__ = "sngs"
    KIND = "sng"

    events = relationship(
        "Event", secondary=event_sngs, back_populates="sngs"
    )


class Generator(Base, ResourceMixin):
    """Power generator. Tracked on events without conflict validation."""

    __tablename__ = "generators"
    KIND = "generator"

    events = relationship(
        "Event", secondary=event_generators, back_populates="generators"
    )


# Resource kind -> model class
RESOURCE_MODELS = {
    Observer.KIND: Observer,
    Sng.KIND: Sng,
    Generator.KIND: Generator,
}

# Resource kind -> (association table, resource id column)
RESOURCE_ASSOCIATIONS = {
    Observer.KIND: (event_observers, "observer_id"),
    Sng.KIND: (event_sngs, "sng_id"),
    Generator.KIND: (event_generators, "generator_id"),
}
