"""
Pydantic schemas for city API request/response validation.

Provides data validation and serialization for:
- City creation and update requests
- City API responses
- Missing-distance report
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class CityCreate(BaseModel):
    """
    Schema for creating a city.

    Example:
        >>> CityCreate(name="Riyadh", country="Saudi Arabia")
    """

    name: str = Field(..., min_length=1, max_length=255)
    country: Optional[str] = Field(default=None, max_length=100)
    latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180)
    is_active: bool = Field(default=True)

    @field_validator("name")
    @classmethod
    def validate_name_not_whitespace(cls, v: str) -> str:
        """Ensure name is not just whitespace."""
        if not v.strip():
            raise ValueError("City name cannot be empty or whitespace")
        return v.strip()


class CityUpdate(BaseModel):
    """Schema for updating a city. All fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    country: Optional[str] = Field(default=None, max_length=100)
    latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name_not_whitespace(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            if not v.strip():
                raise ValueError("City name cannot be empty or whitespace")
            return v.strip()
        return v


class CityResponse(BaseModel):
    """City API response."""

    id: int
    name: str
    country: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CitySummary(BaseModel):
    """Minimal city info embedded in other responses."""

    id: int
    name: str

    model_config = {"from_attributes": True}


class MissingDistancePair(BaseModel):
    """An unordered pair of active cities with no stored travel time."""

    from_city: CitySummary
    to_city: CitySummary


class MissingDistancesResponse(BaseModel):
    """Response for GET /api/cities/missing-distances."""

    data: List[MissingDistancePair]
    count: int
