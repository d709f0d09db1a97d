"""
WebSocket Connection Manager for live schedule updates.

This module provides a connection manager for WebSocket connections,
pushing event created/updated/deleted notifications to connected
schedulers so their calendars refresh without polling.

Usage:
    from backend.src.utils.websocket import get_connection_manager

    manager = get_connection_manager()

    # In WebSocket endpoint
    await manager.connect(ConnectionManager.EVENTS_CHANNEL, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(ConnectionManager.EVENTS_CHANNEL, websocket)

    # Broadcast a change
    await manager.broadcast_event_change("created", event_payload)
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Set, Any, Optional
from fastapi import WebSocket
from backend.src.utils.logging_config import get_logger

logger = get_logger("websocket")


class ConnectionManager:
    """
    Manages WebSocket connections grouped by channel.

    Maintains a mapping of channel names to sets of connected WebSocket
    clients. Event changes are published on EVENTS_CHANNEL.
    """

    # Channel for event created/updated/deleted notifications
    EVENTS_CHANNEL = "events"

    def __init__(self):
        """Initialize the connection manager with empty connection registry."""
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, channel: str, websocket: WebSocket) -> None:
        """
        Accept and register a WebSocket connection on a channel.

        Args:
            channel: Channel to subscribe to
            websocket: WebSocket connection to register
        """
        await websocket.accept()
        async with self._lock:
            if channel not in self._connections:
                self._connections[channel] = set()
            self._connections[channel].add(websocket)
            logger.debug(
                f"WebSocket registered for channel {channel}. "
                f"Total connections: {len(self._connections[channel])}"
            )

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        """
        Unregister a WebSocket connection.

        Note:
            This method is synchronous for use in exception handlers.
        """
        if channel in self._connections:
            self._connections[channel].discard(websocket)
            logger.debug(
                f"WebSocket disconnected from channel {channel}. "
                f"Remaining connections: {len(self._connections[channel])}"
            )
            # Clean up empty connection sets
            if not self._connections[channel]:
                del self._connections[channel]

    async def broadcast(self, channel: str, data: Dict[str, Any]) -> None:
        """
        Send a JSON message to every client on a channel.

        Note:
            Failed connections are removed; the broadcast continues to the
            remaining clients.
        """
        if channel not in self._connections:
            return

        # Copy set to avoid modification during iteration
        connections = self._connections[channel].copy()
        disconnected: Set[WebSocket] = set()

        for connection in connections:
            try:
                await connection.send_json(data)
            except Exception as e:
                logger.debug(f"Failed to send to WebSocket: {e}")
                disconnected.add(connection)

        for conn in disconnected:
            self.disconnect(channel, conn)

    async def broadcast_event_change(self, action: str, event: Dict[str, Any]) -> None:
        """
        Publish an event change on the events channel.

        Args:
            action: created, updated or deleted
            event: Serialized event (pre-deletion snapshot for deletes)
        """
        await self.broadcast(self.EVENTS_CHANNEL, {
            "type": f"event.{action}",
            "action": action,
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def get_connection_count(self, channel: Optional[str] = None) -> int:
        """
        Get the number of active connections.

        Args:
            channel: Optional channel; None counts every channel
        """
        if channel:
            return len(self._connections.get(channel, set()))
        return sum(len(conns) for conns in self._connections.values())


# Singleton instance
_connection_manager: Optional[ConnectionManager] = None


def get_connection_manager() -> ConnectionManager:
    """
    Get the singleton ConnectionManager instance.

    Note:
        Creates the instance on first call.
    """
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager
