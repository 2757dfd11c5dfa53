"""Realtime delivery: rooms, connections, broadcasting and scheduling.

Usage:
    from infrastructure.realtime import (
        Broadcaster,
        ConnectionRegistry,
        RealtimeEvent,
        user_room,
    )

    registry = ConnectionRegistry(user_store, token_verifier)
    broadcaster = Broadcaster(registry)
    broadcaster.start()

    connection = await registry.connect(token)
    broadcaster.publish(user_room(connection.user_id), RealtimeEvent.NOTIFICATION, {...})
"""

from infrastructure.realtime.broadcaster import Broadcaster
from infrastructure.realtime.models import Connection, ConnectionContext
from infrastructure.realtime.registry import ConnectionRegistry
from infrastructure.realtime.rooms import (
    RealtimeEvent,
    RoomKind,
    order_room,
    parse_room,
    pharmacy_room,
    tenant_room,
    user_room,
)
from infrastructure.realtime.scheduler import (
    AsyncioClock,
    Clock,
    ScheduledTask,
    TaskScheduler,
)

__all__ = [
    "Broadcaster",
    "Connection",
    "ConnectionContext",
    "ConnectionRegistry",
    "RealtimeEvent",
    "RoomKind",
    "order_room",
    "parse_room",
    "pharmacy_room",
    "tenant_room",
    "user_room",
    "AsyncioClock",
    "Clock",
    "ScheduledTask",
    "TaskScheduler",
]
