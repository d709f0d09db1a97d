"""
Configuration module for the broadcast scheduling backend.

Provides centralized configuration for:
- Scheduling lock timeouts
- Event and distance defaults
- CORS origins
"""

from backend.src.config.settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
]
