"""
Utility modules for the broadcast scheduling backend.

This package contains shared utilities used across the application:
- logging_config: Structured logging setup
- websocket: Connection manager for live event updates
"""

from backend.src.utils.logging_config import get_logger, init_logging
from backend.src.utils.websocket import ConnectionManager, get_connection_manager

__all__ = [
    "get_logger",
    "init_logging",
    "ConnectionManager",
    "get_connection_manager",
]
