"""Room keys and event names of the realtime channel.

Room keys are the only addressing scheme of the broadcaster:

- ``user:<userId>``: one user's connections
- ``tenant:<tenantId>``: every connection of a tenant
- ``pharmacy:<pharmacyId>``: staff watching a pharmacy's inventory
- ``order:<orderId>``: parties tracking an order
"""

from enum import Enum
from typing import Tuple


class RoomKind(str, Enum):
    USER = "user"
    TENANT = "tenant"
    PHARMACY = "pharmacy"
    ORDER = "order"


# Rooms a client may join or leave after the handshake.
SUBSCRIBABLE_KINDS = frozenset({RoomKind.PHARMACY, RoomKind.ORDER})


class RealtimeEvent(str, Enum):
    """Event names delivered to clients."""

    NOTIFICATION = "notification"
    TENANT_NOTIFICATION = "tenant-notification"
    ORDER_UPDATE = "order-update"
    DELIVERY_LOCATION_UPDATE = "delivery-location-update"
    INVENTORY_UPDATE = "inventory-update"
    USER_EDITING_INVENTORY = "user-editing-inventory"


def room_key(kind: RoomKind, identifier: str) -> str:
    if not identifier:
        raise ValueError(f"{kind.value} room requires an id")
    return f"{kind.value}:{identifier}"


def user_room(user_id: str) -> str:
    return room_key(RoomKind.USER, user_id)


def tenant_room(tenant_id: str) -> str:
    return room_key(RoomKind.TENANT, tenant_id)


def pharmacy_room(pharmacy_id: str) -> str:
    return room_key(RoomKind.PHARMACY, pharmacy_id)


def order_room(order_id: str) -> str:
    return room_key(RoomKind.ORDER, order_id)


def parse_room(key: str) -> Tuple[RoomKind, str]:
    """Split a room key into its kind and id.

    Raises:
        ValueError: If the key is not ``<kind>:<id>`` with a known kind.
    """
    kind, sep, identifier = key.partition(":")
    if not sep or not identifier:
        raise ValueError(f"Malformed room key: {key!r}")
    try:
        return RoomKind(kind), identifier
    except ValueError:
        raise ValueError(f"Unknown room kind: {kind!r}") from None
