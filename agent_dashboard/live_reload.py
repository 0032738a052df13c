"""Live reload — tell open dashboards to reload when the service changes.

A watchdog observer watches the package's own source and static files.
Any change (editor swap files aside) pushes a ``reload`` event to every
connected ``/api/live-reload`` Server-Sent Events stream.  This is about
the dashboard itself changing, not about scan data.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, AsyncGenerator, Iterable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
STATIC_DIR = PACKAGE_DIR / "static"

RELOAD_EVENT = "reload"
KEEPALIVE_SECONDS = 15.0

_SWAP_SUFFIXES = (".swp", ".swx", ".swo", "~", ".tmp", ".pyc")


def is_ignored_path(path: str) -> bool:
    """True for editor swap/backup files and bytecode caches."""
    name = Path(path).name
    if name.startswith(".#") or name == "4913":
        return True
    if "__pycache__" in Path(path).parts:
        return True
    return name.endswith(_SWAP_SUFFIXES)


class LiveReloadBroadcaster:
    """Fan a reload signal out to every open subscriber queue."""

    def __init__(self) -> None:
        self._subscribers: set[asyncio.Queue[str]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach the event loop that owns the subscriber queues."""
        self._loop = loop

    def subscribe(self) -> asyncio.Queue[str]:
        queue: asyncio.Queue[str] = asyncio.Queue()
        self._subscribers.add(queue)
        logger.debug("Live-reload subscriber added (%d open)", len(self._subscribers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        self._subscribers.discard(queue)
        logger.debug("Live-reload subscriber removed (%d open)", len(self._subscribers))

    def broadcast(self, event: str = RELOAD_EVENT) -> int:
        """Queue *event* for every subscriber; returns how many got it."""
        for queue in list(self._subscribers):
            queue.put_nowait(event)
        return len(self._subscribers)

    def notify_threadsafe(self, event: str = RELOAD_EVENT) -> None:
        """Schedule :meth:`broadcast` from a non-event-loop thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("Live-reload notification dropped: no event loop bound")
            return
        loop.call_soon_threadsafe(self.broadcast, event)


class ReloadEventHandler(FileSystemEventHandler):
    """watchdog handler that forwards relevant file changes."""

    def __init__(self, broadcaster: LiveReloadBroadcaster) -> None:
        super().__init__()
        self.broadcaster = broadcaster

    def on_any_event(self, event: FileSystemEvent) -> None:
        # A single save also emits "closed"; the matching "modified" is enough.
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return
        path = event.src_path
        if isinstance(path, bytes):
            path = path.decode("utf-8", errors="replace")
        if is_ignored_path(path):
            return
        logger.info("File changed: %s, notifying %d client(s)", path,
                    self.broadcaster.subscriber_count)
        self.broadcaster.notify_threadsafe(RELOAD_EVENT)


class LiveReloadWatcher:
    """Owns the watchdog observer for the dashboard's own files."""

    def __init__(
        self,
        broadcaster: LiveReloadBroadcaster,
        paths: Iterable[Path] | None = None,
    ) -> None:
        self.broadcaster = broadcaster
        self.paths = [Path(p) for p in (paths or (PACKAGE_DIR,))]
        self._observer: Any = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        handler = ReloadEventHandler(self.broadcaster)
        for path in self.paths:
            if path.is_dir():
                observer.schedule(handler, str(path), recursive=True)
            else:
                logger.warning("Live-reload path %s does not exist, skipping", path)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("Watching %s for changes", ", ".join(str(p) for p in self.paths))

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None


def format_sse(event: str, data: str = "") -> str:
    return f"event: {event}\ndata: {data or event}\n\n"


async def event_stream(
    request: Any,
    broadcaster: LiveReloadBroadcaster,
    keepalive: float = KEEPALIVE_SECONDS,
) -> AsyncGenerator[str, None]:
    """Server-Sent Events body for ``/api/live-reload``.

    *request* only needs an awaitable ``is_disconnected()``.
    """
    queue = broadcaster.subscribe()
    try:
        yield ": connected\n\n"
        while True:
            if await request.is_disconnected():
                break
            try:
                event = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield format_sse(event)
    finally:
        broadcaster.unsubscribe(queue)
