"""Fan-out of session events to connected viewers.

One unbounded ``asyncio.Queue`` per connection. ``broadcast`` only enqueues,
so a slow or dead viewer never holds up the mutation that produced the
event or delivery to anyone else. Each websocket handler drains its own
queue, which keeps per-viewer delivery in emit order.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field

from faceoff.models.events import Event, encode_event

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ViewerConnection:
    """A registered viewer and its pending outbound frames."""

    id: int
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    closed: bool = False

    async def next_frame(self) -> str:
        """Wait for the next encoded event for this viewer."""
        return await self.queue.get()

    def pending(self) -> int:
        return self.queue.qsize()


class ChangeBroadcaster:
    """Registry of connected viewers with best-effort broadcast."""

    def __init__(self):
        self._connections: dict[int, ViewerConnection] = {}
        self._ids = itertools.count(1)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def register(self) -> ViewerConnection:
        """Add a viewer. It receives only events emitted after this call."""
        connection = ViewerConnection(id=next(self._ids))
        self._connections[connection.id] = connection
        logger.info(f"Viewer {connection.id} connected ({self.connection_count} total)")
        return connection

    def unregister(self, connection: ViewerConnection) -> None:
        """Remove a viewer. Safe to call more than once."""
        connection.closed = True
        if self._connections.pop(connection.id, None) is not None:
            logger.info(f"Viewer {connection.id} disconnected ({self.connection_count} total)")

    def broadcast(self, event: Event) -> int:
        """Queue an event for every open connection.

        At most once per viewer, no acknowledgment, no retry. Undelivered
        frames are dropped with their connection.

        Returns:
            Number of viewers the event was queued for
        """
        message = encode_event(event)
        delivered = 0
        for connection in list(self._connections.values()):
            if connection.closed:
                continue
            connection.queue.put_nowait(message)
            delivered += 1
        logger.debug(f"Broadcast {event.type} to {delivered} viewers")
        return delivered
