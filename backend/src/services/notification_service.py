"""
Event change notification.

Services run synchronously in FastAPI's threadpool while WebSocket clients
live on the application's event loop. EventChangeNotifier hands each
notification to the loop with ``asyncio.run_coroutine_threadsafe`` and
returns immediately.

Notification is best effort: a failure is logged and never propagates, so a
committed write is never reported as failed because a broadcast did not go
out.
"""

import asyncio
from typing import Any, Dict, Optional

from backend.src.utils.logging_config import get_logger
from backend.src.utils.websocket import ConnectionManager, get_connection_manager


logger = get_logger("websocket")

EVENT_ACTIONS = ("created", "updated", "deleted")


class EventChangeNotifier:
    """
    Fire-and-forget broadcaster for event changes.

    Usage:
        >>> notifier = get_event_notifier()
        >>> notifier.bind_loop(asyncio.get_running_loop())  # at startup
        >>> notifier.notify("created", event_payload)      # from a service
    """

    def __init__(self, manager: Optional[ConnectionManager] = None):
        self._manager = manager
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def manager(self) -> ConnectionManager:
        if self._manager is None:
            self._manager = get_connection_manager()
        return self._manager

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        """Attach the loop broadcasts run on (None detaches)."""
        self._loop = loop

    def notify(self, action: str, event: Dict[str, Any]) -> bool:
        """
        Schedule a broadcast of an event change.

        Args:
            action: created, updated or deleted
            event: Serialized event

        Returns:
            True if the broadcast was scheduled
        """
        if action not in EVENT_ACTIONS:
            logger.error(f"Unknown event action '{action}', notification dropped")
            return False

        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug(
                f"No event loop bound, skipping event.{action} notification",
                extra={"event_id": event.get("id")},
            )
            return False

        try:
            future = asyncio.run_coroutine_threadsafe(
                self.manager.broadcast_event_change(action, event), loop
            )
        except Exception as e:
            logger.warning(
                f"Failed to schedule event.{action} notification: {e}",
                extra={"event_id": event.get("id")},
            )
            return False

        future.add_done_callback(self._log_failure)
        return True

    @staticmethod
    def _log_failure(future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.warning(f"Event change broadcast failed: {error}")


_notifier: Optional[EventChangeNotifier] = None


def get_event_notifier() -> EventChangeNotifier:
    """Get the singleton EventChangeNotifier instance."""
    global _notifier
    if _notifier is None:
        _notifier = EventChangeNotifier()
    return _notifier
