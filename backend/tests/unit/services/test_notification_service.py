"""
Unit tests for EventChangeNotifier and the WebSocket ConnectionManager.
"""

import asyncio
import threading

import pytest
from freezegun import freeze_time
from unittest.mock import AsyncMock, Mock

from backend.src.services.notification_service import EventChangeNotifier, get_event_notifier
from backend.src.utils.websocket import ConnectionManager, get_connection_manager


class TestEventChangeNotifier:

    def test_no_loop_bound(self):
        notifier = EventChangeNotifier(manager=Mock())

        assert notifier.notify("created", {"id": 1}) is False

    def test_unknown_action(self):
        notifier = EventChangeNotifier(manager=Mock())

        assert notifier.notify("archived", {"id": 1}) is False

    def test_broadcast_scheduled_on_loop(self):
        manager = Mock()
        manager.broadcast_event_change = AsyncMock()
        notifier = EventChangeNotifier(manager=manager)

        loop = asyncio.new_event_loop()
        thread = threading.Thread(target=loop.run_forever)
        thread.start()
        try:
            notifier.bind_loop(loop)
            assert notifier.notify("deleted", {"id": 7}) is True

            # Wait for the loop to run the broadcast
            asyncio.run_coroutine_threadsafe(asyncio.sleep(0), loop).result(5)
            manager.broadcast_event_change.assert_awaited_once_with("deleted", {"id": 7})
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(5)
            loop.close()

        assert notifier.notify("created", {"id": 8}) is False

    def test_singleton(self):
        assert get_event_notifier() is get_event_notifier()


class TestConnectionManager:

    def _socket(self):
        websocket = Mock()
        websocket.accept = AsyncMock()
        websocket.send_json = AsyncMock()
        return websocket

    @freeze_time("2024-01-10 10:00:00", real_asyncio=True)
    def test_broadcast_event_change(self):
        manager = ConnectionManager()
        websocket = self._socket()

        async def scenario():
            await manager.connect(manager.EVENTS_CHANNEL, websocket)
            await manager.broadcast_event_change("created", {"id": 1, "title": "Derby"})

        asyncio.run(scenario())

        message = websocket.send_json.call_args[0][0]
        assert message["type"] == "event.created"
        assert message["action"] == "created"
        assert message["event"] == {"id": 1, "title": "Derby"}
        assert message["timestamp"] == "2024-01-10T10:00:00+00:00"

    def test_failed_socket_removed(self):
        manager = ConnectionManager()
        good = self._socket()
        bad = self._socket()
        bad.send_json.side_effect = RuntimeError("closed")

        async def scenario():
            await manager.connect("events", good)
            await manager.connect("events", bad)
            await manager.broadcast("events", {"type": "heartbeat"})

        asyncio.run(scenario())

        good.send_json.assert_awaited_once()
        assert manager.get_connection_count("events") == 1

    def test_disconnect_cleans_channel(self):
        manager = ConnectionManager()
        websocket = self._socket()

        asyncio.run(manager.connect("events", websocket))
        manager.disconnect("events", websocket)

        assert manager.get_connection_count() == 0

    def test_broadcast_without_listeners(self):
        asyncio.run(ConnectionManager().broadcast("events", {"type": "heartbeat"}))

    def test_singleton(self):
        assert get_connection_manager() is get_connection_manager()
