"""
Pydantic schemas for resource catalog API (observers, SNGs, generators).
"""

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ResourceStatus(str, enum.Enum):
    """Operational status of a resource."""
    AVAILABLE = "available"
    BUSY = "busy"
    INACTIVE = "inactive"


class ResourceCreate(BaseModel):
    """
    Schema for creating a resource.

    Example:
        >>> ResourceCreate(code="SNG-1", name="SNG Truck 1")
    """

    code: str = Field(..., min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, max_length=255)
    status: ResourceStatus = Field(default=ResourceStatus.AVAILABLE)
    notes: Optional[str] = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Resource code cannot be empty or whitespace")
        return v.strip()


class ResourceResponse(BaseModel):
    """Resource API response."""

    id: int
    code: str
    name: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ResourceSummary(BaseModel):
    """Minimal resource info embedded in event responses."""

    id: int
    code: str
    name: Optional[str] = None

    model_config = {"from_attributes": True}
