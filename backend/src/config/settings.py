"""
Application settings configuration for the broadcast scheduling backend.

Centralized settings loaded from environment variables.
"""

from datetime import time
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        RESOURCE_LOCK_TIMEOUT_SECONDS: Seconds a mutation waits for the
            per-(resource, date) scheduling lock before failing with a
            retryable error (default: 10)
        DEFAULT_EVENT_TIME: Time-of-day used when an event has none (default: "00:00")
        DEFAULT_MISSING_DISTANCE_HOURS: Travel time used by the missing
            distance generator (default: 5.0)
        CORS_ALLOWED_ORIGINS: Comma-separated list of allowed origins
        BCAST_CREATE_TABLES: Create tables on startup (SQLite development only)
    """

    resource_lock_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="RESOURCE_LOCK_TIMEOUT_SECONDS",
        gt=0,
        le=120,
        description="Maximum wait for a resource scheduling lock, in seconds",
    )

    default_event_time: time = Field(
        default=time(0, 0),
        validation_alias="DEFAULT_EVENT_TIME",
        description="Time-of-day assigned to events created without one",
    )

    default_missing_distance_hours: float = Field(
        default=5.0,
        validation_alias="DEFAULT_MISSING_DISTANCE_HOURS",
        ge=0,
        le=999.99,
        description="Travel hours used when generating missing city distances",
    )

    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="CORS_ALLOWED_ORIGINS",
        description="Comma-separated list of origins allowed by CORS",
    )

    create_tables: bool = Field(
        default=False,
        validation_alias="BCAST_CREATE_TABLES",
        description="Create tables on startup instead of relying on Alembic",
    )

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("default_event_time", mode="before")
    @classmethod
    def parse_default_event_time(cls, v):
        """Accept HH:MM strings in addition to HH:MM:SS."""
        if isinstance(v, str) and len(v.strip()) == 5:
            return f"{v.strip()}:00"
        return v

    @property
    def cors_allowed_origins_list(self) -> List[str]:
        """Get the list of allowed CORS origins."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings instance.

    Returns:
        AppSettings: Configured application settings from environment
    """
    return AppSettings()
