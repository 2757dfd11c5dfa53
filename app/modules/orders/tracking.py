"""Order tracking broadcasts.

Status changes and driver location points are published to the order's
room so the customer and pharmacy staff following the order see them live.
"""

from datetime import datetime
from typing import Optional

from infrastructure.exceptions import AggregateNotFound, PermissionDenied
from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import (
    DeliveryLocation,
    Order,
    UserProfile,
    UserRole,
)
from infrastructure.persistence.stores import OrderStore, UserStore
from infrastructure.realtime.broadcaster import Broadcaster
from infrastructure.realtime.rooms import RealtimeEvent, order_room

logger = get_module_logger()


class OrderTracker:
    """Publishes ``order-update`` and ``delivery-location-update`` events.

    Attributes:
        broadcaster: Publishes to order rooms
        order_store: Reads and writes orders and location history
        user_store: Resolves the delivery person's contact details
    """

    def __init__(
        self, broadcaster: Broadcaster, order_store: OrderStore, user_store: UserStore
    ):
        self.broadcaster = broadcaster
        self.order_store = order_store
        self.user_store = user_store

    async def _load(self, order_id: str, actor: UserProfile) -> Order:
        order = await self.order_store.find_by_id(order_id)
        if order is None or order.tenant_id != actor.tenant_id:
            raise AggregateNotFound("Order", order_id)
        return order

    async def update_order_status(
        self,
        order_id: str,
        status: str,
        actor: UserProfile,
        delivery_user_id: Optional[str] = None,
        estimated_delivery: Optional[datetime] = None,
    ) -> Order:
        """Change an order's status and broadcast it to the order room."""
        await self._load(order_id, actor)
        if actor.role == UserRole.CUSTOMER:
            raise PermissionDenied("Customers cannot change order status")

        changes = {"status": status}
        if delivery_user_id is not None:
            changes["delivery_user_id"] = delivery_user_id
        if estimated_delivery is not None:
            changes["estimated_delivery"] = estimated_delivery
        order = await self.order_store.update(order_id, changes)

        delivery_person = None
        if order.delivery_user_id:
            driver = await self.user_store.find_user_by_id(order.delivery_user_id)
            if driver is not None:
                delivery_person = {"name": driver.name, "phone": driver.phone}

        self.broadcaster.publish(
            order_room(order_id),
            RealtimeEvent.ORDER_UPDATE,
            {
                "orderId": order_id,
                "status": order.status,
                "deliveryPerson": delivery_person,
                "estimatedDelivery": (
                    order.estimated_delivery.isoformat()
                    if order.estimated_delivery
                    else None
                ),
            },
        )
        logger.info(
            "order_status_updated", order_id=order_id, status=status, user_id=actor.id
        )
        return order

    async def record_delivery_location(
        self,
        order_id: str,
        actor: UserProfile,
        latitude: float,
        longitude: float,
        accuracy: Optional[float] = None,
    ) -> DeliveryLocation:
        """Store a location point and broadcast it to the order room.

        Only the assigned driver or pharmacy staff may report locations.
        """
        order = await self._load(order_id, actor)
        if actor.role == UserRole.CUSTOMER or (
            actor.role == UserRole.DELIVERY and order.delivery_user_id != actor.id
        ):
            raise PermissionDenied("Only the assigned driver can report locations")

        location = await self.order_store.add_location(
            DeliveryLocation(
                order_id=order_id,
                latitude=latitude,
                longitude=longitude,
                accuracy=accuracy,
            )
        )
        self.broadcaster.publish(
            order_room(order_id),
            RealtimeEvent.DELIVERY_LOCATION_UPDATE,
            {
                "orderId": order_id,
                "latitude": location.latitude,
                "longitude": location.longitude,
                "accuracy": location.accuracy,
            },
        )
        return location
