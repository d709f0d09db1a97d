"""
Pydantic schemas for city distance API request/response validation.

Provides data validation and serialization for:
- Single edge create/update requests
- Batch upsert requests and counts
- Distance matrix responses

Design:
- travel_time_hours is limited to 0..999.99 (Decimal 5,2 column)
- Self-pairs are rejected at the schema boundary as well as in the graph
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from backend.src.schemas.city import CitySummary


MAX_TRAVEL_HOURS = Decimal("999.99")


class CityDistanceCreate(BaseModel):
    """
    Schema for creating a distance edge.

    Example:
        >>> CityDistanceCreate(from_city_id=1, to_city_id=2, travel_time_hours=5)
    """

    from_city_id: int = Field(..., gt=0)
    to_city_id: int = Field(..., gt=0)
    travel_time_hours: Decimal = Field(..., ge=0, le=MAX_TRAVEL_HOURS, decimal_places=2)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def validate_distinct_cities(self):
        if self.from_city_id == self.to_city_id:
            raise ValueError("A distance needs two different cities")
        return self


class CityDistanceUpdate(BaseModel):
    """Schema for updating a distance edge. The city pair cannot change."""

    travel_time_hours: Optional[Decimal] = Field(
        default=None, ge=0, le=MAX_TRAVEL_HOURS, decimal_places=2
    )
    notes: Optional[str] = Field(default=None, max_length=1000)


class CityDistanceResponse(BaseModel):
    """Distance edge API response."""

    id: int
    from_city_id: int
    to_city_id: int
    from_city: CitySummary
    to_city: CitySummary
    travel_time_hours: Decimal
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CityDistanceBatchItem(BaseModel):
    """One entry of a batch upsert."""

    from_city_id: int = Field(..., gt=0)
    to_city_id: int = Field(..., gt=0)
    travel_time_hours: Decimal = Field(..., ge=0, le=MAX_TRAVEL_HOURS, decimal_places=2)


class CityDistanceBatchRequest(BaseModel):
    """Schema for POST /api/city-distances/batch."""

    distances: List[CityDistanceBatchItem] = Field(..., min_length=1)


class CityDistanceBatchResponse(BaseModel):
    """Counts of edges touched by a batch upsert."""

    created: int
    updated: int


class DistanceMatrixResponse(BaseModel):
    """
    Symmetric travel-time matrix over active cities.

    ``matrix[i][j]`` is the travel time between ``cities[i]`` and
    ``cities[j]``; 0 on the diagonal and null where no edge exists.
    """

    cities: List[CitySummary]
    matrix: List[List[Optional[float]]]
