"""Fan captured output out to every connected live-output client.

Each WebSocket client owns a bounded :class:`asyncio.Queue`. Runners write
from worker threads, so :meth:`Broadcaster.publish` hands every frame to the
event loop with :meth:`~asyncio.AbstractEventLoop.call_soon_threadsafe`;
delivery to the queues then happens on the loop. A client whose queue is
full misses that frame; the others are unaffected.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class Broadcaster:
    """Publish text frames to all subscribed clients.

    Args:
        queue_size: Frames buffered per client before new frames are
            dropped for that client.
    """

    def __init__(self, queue_size: int = 1000) -> None:
        self.queue_size = queue_size
        self._clients: set[asyncio.Queue[str]] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def subscribe(self) -> asyncio.Queue[str]:
        """Register a new client. Must be called from the event loop."""
        self._loop = asyncio.get_running_loop()
        queue: asyncio.Queue[str] = asyncio.Queue(maxsize=self.queue_size)
        self._clients.add(queue)
        logger.debug("Live client connected (%d total)", len(self._clients))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        self._clients.discard(queue)
        logger.debug("Live client disconnected (%d left)", len(self._clients))

    def publish(self, text: str) -> None:
        """Queue *text* for every client. Safe to call from any thread."""
        loop = self._loop
        if loop is None or not self._clients:
            return
        if loop.is_closed():
            logger.debug("Event loop closed; dropping %d characters of output", len(text))
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._deliver(text)
        else:
            loop.call_soon_threadsafe(self._deliver, text)

    def _deliver(self, text: str) -> None:
        for queue in list(self._clients):
            try:
                queue.put_nowait(text)
            except asyncio.QueueFull:
                logger.warning("Live client is not keeping up; dropped one output frame")
