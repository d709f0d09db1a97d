"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.exceptions import (
    ServiceError,
    NotFoundError,
    ConflictError,
    ValidationError,
    ResourceConflictError,
    ResourceLockTimeoutError,
)
# Scheduling engine
from backend.src.services.distance_graph import CityDistanceGraph, canonical_pair
from backend.src.services.resource_timeline import ResourceTimeline, TimelineEntry
from backend.src.services.conflict_validator import ConflictValidator
from backend.src.services.resource_lock import ResourceLockArena, get_resource_lock_arena
from backend.src.services.notification_service import EventChangeNotifier, get_event_notifier
# Catalog and event services
from backend.src.services.resolution_service import ResolutionService
from backend.src.services.city_service import CityService
from backend.src.services.city_distance_service import CityDistanceService
from backend.src.services.resource_service import ResourceService
from backend.src.services.event_service import EventService

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "ResourceConflictError",
    "ResourceLockTimeoutError",
    # Scheduling engine
    "CityDistanceGraph",
    "canonical_pair",
    "ResourceTimeline",
    "TimelineEntry",
    "ConflictValidator",
    "ResourceLockArena",
    "get_resource_lock_arena",
    "EventChangeNotifier",
    "get_event_notifier",
    # Catalog and event services
    "ResolutionService",
    "CityService",
    "CityDistanceService",
    "ResourceService",
    "EventService",
]
