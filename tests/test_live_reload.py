"""Tests for the live-reload broadcaster, watchdog handler and SSE stream."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

from watchdog.events import DirModifiedEvent, FileClosedEvent, FileModifiedEvent

from agent_dashboard.live_reload import (
    LiveReloadBroadcaster,
    LiveReloadWatcher,
    ReloadEventHandler,
    event_stream,
    format_sse,
    is_ignored_path,
)


class FakeRequest:
    """Minimal stand-in for starlette's Request in the SSE generator."""

    def __init__(self) -> None:
        self.disconnected = False

    async def is_disconnected(self) -> bool:
        return self.disconnected


class TestIgnoredPaths:
    def test_editor_files(self):
        assert is_ignored_path("/app/static/.index.html.swp")
        assert is_ignored_path("/app/static/index.html~")
        assert is_ignored_path("/app/static/.#index.html")
        assert is_ignored_path("/app/static/4913")
        assert is_ignored_path("/app/agent_dashboard/__pycache__/server.cpython-312.pyc")

    def test_real_files(self):
        assert not is_ignored_path("/app/static/index.html")
        assert not is_ignored_path("/app/agent_dashboard/server.py")


class TestBroadcaster:
    async def test_broadcast_reaches_all_subscribers(self):
        broadcaster = LiveReloadBroadcaster()
        a = broadcaster.subscribe()
        b = broadcaster.subscribe()

        assert broadcaster.broadcast() == 2
        assert a.get_nowait() == "reload"
        assert b.get_nowait() == "reload"

    async def test_unsubscribe(self):
        broadcaster = LiveReloadBroadcaster()
        queue = broadcaster.subscribe()
        broadcaster.unsubscribe(queue)
        broadcaster.unsubscribe(queue)
        assert broadcaster.subscriber_count == 0
        assert broadcaster.broadcast() == 0
        assert queue.empty()

    async def test_notify_threadsafe(self):
        broadcaster = LiveReloadBroadcaster()
        broadcaster.bind(asyncio.get_running_loop())
        queue = broadcaster.subscribe()

        await asyncio.to_thread(broadcaster.notify_threadsafe)
        assert await asyncio.wait_for(queue.get(), timeout=1) == "reload"

    def test_notify_without_loop_is_dropped(self):
        LiveReloadBroadcaster().notify_threadsafe()


class TestReloadEventHandler:
    def test_file_change_notifies(self):
        broadcaster = MagicMock()
        handler = ReloadEventHandler(broadcaster)
        handler.dispatch(FileModifiedEvent("/app/static/index.html"))
        broadcaster.notify_threadsafe.assert_called_once_with("reload")

    def test_swap_file_ignored(self):
        broadcaster = MagicMock()
        handler = ReloadEventHandler(broadcaster)
        handler.dispatch(FileModifiedEvent("/app/static/.index.html.swp"))
        broadcaster.notify_threadsafe.assert_not_called()

    def test_directory_event_ignored(self):
        broadcaster = MagicMock()
        handler = ReloadEventHandler(broadcaster)
        handler.dispatch(DirModifiedEvent("/app/static"))
        broadcaster.notify_threadsafe.assert_not_called()

    def test_close_after_write_ignored(self):
        broadcaster = MagicMock()
        handler = ReloadEventHandler(broadcaster)
        handler.dispatch(FileClosedEvent("/app/static/index.html"))
        broadcaster.notify_threadsafe.assert_not_called()


class TestWatcher:
    def test_start_stop(self, tmp_path):
        watcher = LiveReloadWatcher(LiveReloadBroadcaster(), paths=[tmp_path])
        watcher.start()
        assert watcher.running
        watcher.stop()
        assert not watcher.running
        watcher.stop()

    async def test_file_write_reaches_subscriber(self, tmp_path):
        broadcaster = LiveReloadBroadcaster()
        broadcaster.bind(asyncio.get_running_loop())
        queue = broadcaster.subscribe()
        watcher = LiveReloadWatcher(broadcaster, paths=[tmp_path])
        watcher.start()
        try:
            await asyncio.sleep(0.2)
            (tmp_path / "index.html").write_text("<html></html>")
            assert await asyncio.wait_for(queue.get(), timeout=5) == "reload"
        finally:
            watcher.stop()


class TestEventStream:
    async def test_sends_reload_and_unsubscribes(self):
        broadcaster = LiveReloadBroadcaster()
        request = FakeRequest()
        stream = event_stream(request, broadcaster)

        assert await stream.__anext__() == ": connected\n\n"
        assert broadcaster.subscriber_count == 1

        broadcaster.broadcast()
        assert await stream.__anext__() == format_sse("reload")

        request.disconnected = True
        broadcaster.broadcast()
        await stream.aclose()
        assert broadcaster.subscriber_count == 0

    async def test_keepalive(self):
        broadcaster = LiveReloadBroadcaster()
        stream = event_stream(FakeRequest(), broadcaster, keepalive=0.01)
        await stream.__anext__()
        assert await stream.__anext__() == ": keep-alive\n\n"
        await stream.aclose()

    async def test_stops_on_disconnect(self):
        broadcaster = LiveReloadBroadcaster()
        request = FakeRequest()
        stream = event_stream(request, broadcaster, keepalive=0.01)
        await stream.__anext__()
        request.disconnected = True
        chunks = [chunk async for chunk in stream]
        assert chunks == []
        assert broadcaster.subscriber_count == 0

    def test_format(self):
        assert format_sse("reload") == "event: reload\ndata: reload\n\n"
