"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Event creation requests (entities referenced by name/code)
- Event update requests (entities referenced by id)
- Status-only updates
- Event responses, paginated lists and calendar views

Design:
- Resource assignments are always lists; the legacy single-value fields
  (observer/sng/generator on create, observer_id/sng_id/generator_id on
  update) are folded into those lists here and never reach the services
- Update requests only carry the fields the client sent, so services can
  tell "unchanged" from "cleared" via model_fields_set
"""

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.src.models.event import EventStatus
from backend.src.schemas.city import CitySummary
from backend.src.schemas.resource import ResourceSummary


# Legacy single-value field -> list field
_CREATE_LEGACY_FIELDS = {
    "observer": "observers",
    "sng": "sngs",
    "generator": "generators",
}

_UPDATE_LEGACY_FIELDS = {
    "observer_id": "observer_ids",
    "sng_id": "sng_ids",
    "generator_id": "generator_ids",
}


def _fold_legacy_fields(data: Any, mapping: Dict[str, str]) -> Any:
    """Move single-value legacy fields into their list counterparts."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for legacy, plural in mapping.items():
        if legacy not in data:
            continue
        value = data.pop(legacy)
        if plural in data:
            # Explicit list wins over the legacy field
            continue
        if value is None or value == "":
            data[plural] = []
        else:
            data[plural] = [value]
    return data


def _dedupe(values: List[Any]) -> List[Any]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


# ============================================================================
# Embedded Schemas
# ============================================================================


class EventTypeSummary(BaseModel):
    """Event type info embedded in event responses."""

    id: int
    name: str
    code: str
    color: str

    model_config = {"from_attributes": True}


class VenueSummary(BaseModel):
    """Venue info embedded in event responses."""

    id: int
    name: str
    city_id: int

    model_config = {"from_attributes": True}


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for creating an event.

    Entities are referenced by natural key and created on demand:
    the event type and city by name, the venue by name within the city,
    resources by code.

    Example:
        >>> EventCreate(
        ...     title="Al Hilal vs Al Nassr",
        ...     event_date="2024-01-10",
        ...     event_time="13:00",
        ...     event_type="Match",
        ...     city="Jeddah",
        ...     sng="SNG-1",
        ... ).sngs
        ['SNG-1']
    """

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: date
    event_time: Optional[time] = Field(
        default=None,
        description="Time of day (HH:MM); the configured default when omitted",
    )
    event_type: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=255)
    venue: Optional[str] = Field(default=None, max_length=255)
    status: EventStatus = EventStatus.SCHEDULED
    observers: List[str] = Field(default_factory=list)
    sngs: List[str] = Field(default_factory=list)
    generators: List[str] = Field(default_factory=list)
    teams: Optional[List[Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def fold_legacy_single_codes(cls, data: Any) -> Any:
        return _fold_legacy_fields(data, _CREATE_LEGACY_FIELDS)

    @field_validator("title", "event_type", "city")
    @classmethod
    def validate_not_whitespace(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()

    @field_validator("venue")
    @classmethod
    def normalize_venue(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("observers", "sngs", "generators")
    @classmethod
    def normalize_codes(cls, v: List[str]) -> List[str]:
        return _dedupe([code.strip() for code in v if code and code.strip()])


class EventUpdate(BaseModel):
    """
    Schema for updating an event. All fields optional.

    Only fields present in the request are applied; resource id lists
    replace the current assignments of that kind.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: Optional[date] = None
    event_time: Optional[time] = None
    event_type_id: Optional[int] = Field(default=None, gt=0)
    city_id: Optional[int] = Field(default=None, gt=0)
    venue_id: Optional[int] = Field(default=None, gt=0)
    status: Optional[EventStatus] = None
    observer_ids: Optional[List[int]] = None
    sng_ids: Optional[List[int]] = None
    generator_ids: Optional[List[int]] = None
    teams: Optional[List[Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def fold_legacy_single_ids(cls, data: Any) -> Any:
        return _fold_legacy_fields(data, _UPDATE_LEGACY_FIELDS)

    @field_validator("observer_ids", "sng_ids", "generator_ids")
    @classmethod
    def normalize_ids(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        if any(i <= 0 for i in v):
            raise ValueError("Resource ids must be positive integers")
        return _dedupe(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            if not v.strip():
                raise ValueError("Title cannot be empty or whitespace")
            return v.strip()
        return v


class EventStatusUpdate(BaseModel):
    """Schema for PATCH /api/events/{id}/status."""

    status: EventStatus


# ============================================================================
# Response Schemas
# ============================================================================


class EventResponse(BaseModel):
    """Event API response with embedded entities and assignments."""

    id: int
    title: str
    description: Optional[str] = None
    event_date: date
    event_time: time
    status: str
    event_type_id: Optional[int] = None
    city_id: Optional[int] = None
    venue_id: Optional[int] = None
    event_type: Optional[EventTypeSummary] = None
    city: Optional[CitySummary] = None
    venue: Optional[VenueSummary] = None
    observers: List[ResourceSummary] = Field(default_factory=list)
    sngs: List[ResourceSummary] = Field(default_factory=list)
    generators: List[ResourceSummary] = Field(default_factory=list)
    teams: Optional[List[Any]] = None
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias="event_metadata"
    )
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class EventListResponse(BaseModel):
    """Paginated event list."""

    items: List[EventResponse]
    total: int


class EventCalendarResponse(BaseModel):
    """Events of one month grouped by ISO date."""

    year: int
    month: int
    days: Dict[str, List[EventResponse]]
