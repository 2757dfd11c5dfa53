"""Connection state held by the registry."""

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from infrastructure.logging import get_module_logger

logger = get_module_logger()

SendFunc = Callable[[str, Dict[str, Any]], Awaitable[None]]

# Sentinel put on the queue to stop ``drain``.
_CLOSE = object()


@dataclass(frozen=True)
class ConnectionContext:
    """Identity of an authenticated connection, fixed at handshake."""

    user_id: str
    tenant_id: str
    role: str


@dataclass
class Connection:
    """One authenticated realtime connection.

    Events are delivered through a bounded FIFO queue so publishing never
    waits on a slow client. ``drain`` forwards queued events to the
    transport in order until the connection is closed.

    Attributes:
        context: Identity bound at handshake
        connection_id: Opaque id used in logs
        rooms: Room keys the connection is joined to, in join order
        max_queue_size: Pending events kept before new ones are dropped
    """

    context: ConnectionContext
    connection_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    rooms: List[str] = field(default_factory=list)
    max_queue_size: int = 256
    dropped: int = 0
    closed: bool = False
    _queue: Optional[asyncio.Queue] = field(default=None, init=False, repr=False)

    @property
    def queue(self) -> asyncio.Queue:
        if self._queue is None:
            # One extra slot so the close sentinel always fits.
            self._queue = asyncio.Queue(maxsize=self.max_queue_size + 1)
        return self._queue

    @property
    def user_id(self) -> str:
        return self.context.user_id

    @property
    def tenant_id(self) -> str:
        return self.context.tenant_id

    def in_room(self, room: str) -> bool:
        return room in self.rooms

    def enqueue(self, event: str, payload: Dict[str, Any]) -> bool:
        """Queue an event for delivery.

        Returns:
            False when the connection is closed or its queue is full.
        """
        if self.closed:
            return False
        if self.queue.qsize() >= self.max_queue_size:
            self.dropped += 1
            logger.warning(
                "connection_queue_full",
                connection_id=self.connection_id,
                event=event,
                dropped=self.dropped,
            )
            return False
        self.queue.put_nowait((event, payload))
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.queue.put_nowait(_CLOSE)

    async def drain(self, send: SendFunc) -> None:
        """Forward queued events to ``send`` until the connection closes."""
        while True:
            item = await self.queue.get()
            if item is _CLOSE:
                return
            event, payload = item
            await send(event, payload)
