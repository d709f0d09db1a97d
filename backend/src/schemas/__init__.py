"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.conflict import (
    ResourceKind,
    ConflictReason,
    ConflictVerdict,
    ValidateAssignmentRequest,
)
from backend.src.schemas.city import (
    CityCreate,
    CityUpdate,
    CityResponse,
    CitySummary,
    MissingDistancePair,
    MissingDistancesResponse,
)
from backend.src.schemas.city_distance import (
    CityDistanceCreate,
    CityDistanceUpdate,
    CityDistanceResponse,
    CityDistanceBatchItem,
    CityDistanceBatchRequest,
    CityDistanceBatchResponse,
    DistanceMatrixResponse,
)
from backend.src.schemas.resource import (
    ResourceStatus,
    ResourceCreate,
    ResourceResponse,
    ResourceSummary,
)
from backend.src.schemas.event import (
    EventCreate,
    EventUpdate,
    EventStatusUpdate,
    EventResponse,
    EventListResponse,
    EventCalendarResponse,
)

__all__ = [
    # Conflict validation
    "ResourceKind",
    "ConflictReason",
    "ConflictVerdict",
    "ValidateAssignmentRequest",
    # Cities
    "CityCreate",
    "CityUpdate",
    "CityResponse",
    "CitySummary",
    "MissingDistancePair",
    "MissingDistancesResponse",
    # City distances
    "CityDistanceCreate",
    "CityDistanceUpdate",
    "CityDistanceResponse",
    "CityDistanceBatchItem",
    "CityDistanceBatchRequest",
    "CityDistanceBatchResponse",
    "DistanceMatrixResponse",
    # Resources
    "ResourceStatus",
    "ResourceCreate",
    "ResourceResponse",
    "ResourceSummary",
    # Events
    "EventCreate",
    "EventUpdate",
    "EventStatusUpdate",
    "EventResponse",
    "EventListResponse",
    "EventCalendarResponse",
]
