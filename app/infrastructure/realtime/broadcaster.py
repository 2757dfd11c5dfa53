"""Room broadcaster.

Publishes events to every connection joined to a room. Delivery is
best-effort and at-most-once: nothing is persisted, an empty room drops the
event, and a connection whose queue is full misses it.

Usage:
    broadcaster = Broadcaster(registry)
    broadcaster.start()

    broadcaster.publish(
        pharmacy_room("ph-1"),
        RealtimeEvent.INVENTORY_UPDATE,
        {"itemId": "item-1", "field": "quantity"},
    )

    broadcaster.close()
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from infrastructure.logging import get_module_logger
from infrastructure.realtime.registry import ConnectionRegistry
from infrastructure.realtime.rooms import RealtimeEvent

logger = get_module_logger()


def _default_id() -> str:
    return uuid.uuid4().hex


class Broadcaster:
    """Explicitly constructed event publisher.

    Created with the application, started once the transport accepts
    connections and closed at shutdown. Before ``start`` and after
    ``close`` every publish is a silent no-op.

    Attributes:
        registry: Source of room membership
        id_factory: Generates the opaque ``id`` added to each payload
        clock: Returns the current UTC time for the ``timestamp`` field
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.registry = registry
        self.id_factory = id_factory or _default_id
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._started = False
        self._closed = False

    @property
    def is_active(self) -> bool:
        return self._started and not self._closed

    def start(self) -> None:
        if self._closed:
            raise RuntimeError("Broadcaster has been closed")
        self._started = True
        logger.info("broadcaster_started")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.registry.disconnect_all()
        logger.info("broadcaster_closed")

    def enrich(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Add ``id`` and ``timestamp``; keys already in ``payload`` win."""
        return {
            "id": self.id_factory(),
            "timestamp": self.clock().isoformat(),
            **payload,
        }

    def publish(
        self,
        room: str,
        event: RealtimeEvent | str,
        payload: Dict[str, Any],
    ) -> int:
        """Enqueue ``event`` for every member of ``room``.

        Never raises.

        Returns:
            Number of connections the event was queued for.
        """
        if not self.is_active:
            return 0

        event_name = event.value if isinstance(event, RealtimeEvent) else event
        try:
            message = self.enrich(payload)
            members = self.registry.members(room)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("broadcast_failed", room=room, event=event_name, error=str(e))
            return 0

        delivered = 0
        for connection in members:
            try:
                if connection.enqueue(event_name, message):
                    delivered += 1
            except Exception as e:  # pylint: disable=broad-except
                logger.warning(
                    "broadcast_enqueue_failed",
                    room=room,
                    event=event_name,
                    connection_id=connection.connection_id,
                    error=str(e),
                )

        logger.debug(
            "event_broadcast",
            room=room,
            event=event_name,
            members=len(members),
            delivered=delivered,
        )
        return delivered
