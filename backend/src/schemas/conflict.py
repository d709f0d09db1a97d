"""
Pydantic schemas for resource conflict validation.

Provides data validation and serialization for:
- Conflict verdicts returned by the validator
- Dry-run validation requests (scheduler pre-checks)

Design:
- A verdict is either valid (reason "none") or carries exactly one reason
- Details hold the diagnostic payload (conflicting event, city, times,
  required/available hours and shortage) so a rejection can be acted on
  without a second lookup
"""

import enum
from datetime import date, time
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Enums
# ============================================================================


class ResourceKind(str, enum.Enum):
    """Kinds of assignable resources."""
    OBSERVER = "observer"
    SNG = "sng"
    GENERATOR = "generator"

    @property
    def is_validated(self) -> bool:
        """Generators are tracked but never conflict-checked."""
        return self in (ResourceKind.OBSERVER, ResourceKind.SNG)

    @property
    def label(self) -> str:
        return "Observer" if self is ResourceKind.OBSERVER else self.value.upper()


class ConflictReason(str, enum.Enum):
    """Machine-readable verdict reasons."""
    NONE = "none"
    EXACT_TIME_CONFLICT = "exact_time_conflict"
    DAILY_OBSERVER_LIMIT = "daily_observer_limit"
    INSUFFICIENT_TRAVEL_TIME_BEFORE = "insufficient_travel_time_before"
    INSUFFICIENT_TRAVEL_TIME_AFTER = "insufficient_travel_time_after"
    INTERNAL_ERROR = "internal_error"


# ============================================================================
# Verdict
# ============================================================================


class ConflictVerdict(BaseModel):
    """
    Accept/reject result for one resource on one proposed slot.

    Example:
        >>> ConflictVerdict.accept(existing_events_count=0, checked_date="2024-01-10")
        ConflictVerdict(valid=True, reason_code=<ConflictReason.NONE: 'none'>, ...)
    """

    valid: bool = Field(..., description="Whether the assignment is allowed")
    reason_code: ConflictReason = Field(
        default=ConflictReason.NONE,
        description="Reason for rejection, 'none' when valid",
    )
    message: str = Field(default="", description="Human-readable summary")
    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Diagnostic payload for the scheduler",
    )

    @classmethod
    def accept(cls, message: str = "No conflicts found", **details) -> "ConflictVerdict":
        return cls(valid=True, reason_code=ConflictReason.NONE, message=message, details=details)

    @classmethod
    def reject(cls, reason: ConflictReason, message: str, **details) -> "ConflictVerdict":
        details.setdefault("error_type", reason.value)
        return cls(valid=False, reason_code=reason, message=message, details=details)


# ============================================================================
# Dry-run validation
# ============================================================================


class ValidateAssignmentRequest(BaseModel):
    """
    Schema for POST /api/events/validate.

    Fields:
        resource_kind: observer or sng
        resource_id: Resource primary key
        city_id: Proposed city
        event_date: Proposed date
        event_time: Proposed time (midnight when omitted)
        exclude_event_id: Event to ignore (the event being edited)
    """

    resource_kind: ResourceKind
    resource_id: int = Field(..., gt=0)
    city_id: Optional[int] = Field(default=None, gt=0)
    event_date: date
    event_time: Optional[time] = None
    exclude_event_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("resource_kind")
    @classmethod
    def validate_kind_is_checked(cls, v: ResourceKind) -> ResourceKind:
        """Generators have no conflict rules to check."""
        if not v.is_validated:
            raise ValueError("Only observer and sng assignments can be validated")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "resource_kind": "sng",
                "resource_id": 1,
                "city_id": 2,
                "event_date": "2024-01-10",
                "event_time": "13:00",
            }
        }
    }
