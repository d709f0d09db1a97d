"""
SQLAlchemy models for the broadcast scheduling backend.

This module provides the declarative base class and imports all models
to ensure they are registered with SQLAlchemy's metadata.
"""

from sqlalchemy.orm import declarative_base

# Create the declarative base class
# All models will inherit from this Base class
Base = declarative_base()


# Import all models here so they are registered with Base.metadata
# This is required for Alembic autogenerate to detect models

# Location graph
from backend.src.models.city import City
from backend.src.models.city_distance import CityDistance
from backend.src.models.venue import Venue

# Scheduling
from backend.src.models.event_type import EventType
from backend.src.models.event import (
    Event,
    EventStatus,
    event_observers,
    event_sngs,
    event_generators,
)
from backend.src.models.resource import Observer, Sng, Generator, RESOURCE_MODELS, RESOURCE_ASSOCIATIONS

# Export Base and all models
__all__ = [
    "Base",
    "City",
    "CityDistance",
    "Venue",
    "EventType",
    "Event",
    "EventStatus",
    "event_observers",
    "event_sngs",
    "event_generators",
    "Observer",
    "Sng",
    "Generator",
    "RESOURCE_MODELS",
    "RESOURCE_ASSOCIATIONS",
]
