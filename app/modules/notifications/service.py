"""Pharmacy notification service.

Domain-level entry points composed on top of the notification dispatcher:
staff fan-out, order, inventory, prescription and delivery notifications,
and tenant-wide broadcasts.

Referenced aggregates are looked up first; a missing order, pharmacy or
prescription raises ``AggregateNotFound`` to the caller.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from infrastructure.exceptions import AggregateNotFound
from infrastructure.logging import get_module_logger
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.models import (
    Channel,
    DispatchResult,
    NotificationIntent,
    NotificationPriority,
)
from infrastructure.persistence.models import (
    PHARMACIST_ROLES,
    STAFF_ROLES,
    UserProfile,
)
from infrastructure.persistence.stores import (
    OrderStore,
    PharmacyStore,
    PrescriptionStore,
    UserStore,
)
from infrastructure.realtime.broadcaster import Broadcaster
from infrastructure.realtime.rooms import RealtimeEvent, tenant_room
from infrastructure.realtime.scheduler import ScheduledTask, TaskScheduler
from modules.notifications.schemas import AggregateNotificationResult, FanOutResult

logger = get_module_logger()

CUSTOMER_CHANNELS = [Channel.SOCKET, Channel.SMS, Channel.EMAIL]


def staff_channels(user: UserProfile) -> List[Channel]:
    """Socket always, email when the staff member has an address."""
    channels = [Channel.SOCKET]
    if user.has_email:
        channels.append(Channel.EMAIL)
    return channels


class PharmacyNotificationService:
    """Pharmacy-domain notifications.

    Attributes:
        dispatcher: Sends and records individual notifications
        user_store: Staff and customer lookups
        pharmacy_store: Pharmacy lookups
        order_store: Order lookups
        prescription_store: Prescription lookups
        broadcaster: Used for tenant-wide broadcasts
        scheduler: Runs background fan-out
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        user_store: UserStore,
        pharmacy_store: PharmacyStore,
        order_store: OrderStore,
        prescription_store: PrescriptionStore,
        broadcaster: Broadcaster,
        scheduler: TaskScheduler,
    ):
        self.dispatcher = dispatcher
        self.user_store = user_store
        self.pharmacy_store = pharmacy_store
        self.order_store = order_store
        self.prescription_store = prescription_store
        self.broadcaster = broadcaster
        self.scheduler = scheduler

    async def send_notification(self, intent: NotificationIntent) -> DispatchResult:
        return await self.dispatcher.send_notification(intent)

    async def _fan_out(
        self,
        recipients: Sequence[UserProfile],
        tenant_id: str,
        pharmacy_id: str,
        type: str,
        title: str,
        message: str,
        data: Dict[str, Any],
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> FanOutResult:
        results = await asyncio.gather(
            *(
                self.dispatcher.send_notification(
                    NotificationIntent(
                        user_id=user.id,
                        tenant_id=tenant_id,
                        pharmacy_id=pharmacy_id,
                        type=type,
                        title=title,
                        message=message,
                        data=data,
                        channels=staff_channels(user),
                        priority=priority,
                    )
                )
                for user in recipients
            )
        )
        return FanOutResult(success=True, results=list(results))

    async def notify_pharmacists(
        self,
        tenant_id: str,
        pharmacy_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> FanOutResult:
        """Notify every active admin and pharmacist of a pharmacy.

        Zero recipients is not an error and yields an empty result list.
        """
        pharmacists = await self.user_store.find_active_users_by_pharmacy_and_roles(
            tenant_id, pharmacy_id, PHARMACIST_ROLES
        )
        logger.info(
            "notifying_pharmacists",
            tenant_id=tenant_id,
            pharmacy_id=pharmacy_id,
            notification_type=type,
            recipients=len(pharmacists),
        )
        return await self._fan_out(
            pharmacists, tenant_id, pharmacy_id, type, title, message, data or {}, priority
        )

    def notify_pharmacists_in_background(
        self,
        tenant_id: str,
        pharmacy_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> ScheduledTask:
        """Run ``notify_pharmacists`` off the caller's path."""
        return self.scheduler.run_soon(
            self.notify_pharmacists,
            tenant_id,
            pharmacy_id,
            type,
            title,
            message,
            data,
            name=f"notify_pharmacists:{type}",
        )

    async def send_order_notification(
        self,
        order_id: str,
        notification_type: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> AggregateNotificationResult:
        order = await self.order_store.find_by_id(order_id)
        if order is None:
            raise AggregateNotFound("Order", order_id)

        customer = await self.user_store.find_user_by_id(order.customer_id)
        pharmacy = await self.pharmacy_store.find_by_id(order.pharmacy_id)
        data = {
            "orderId": order.id,
            "total": order.total,
            "customer": customer.name if customer else None,
            "pharmacy": pharmacy.name if pharmacy else None,
            "items": len(order.items),
            **(extra or {}),
        }

        result = await self.dispatcher.send_notification(
            NotificationIntent(
                user_id=order.customer_id,
                tenant_id=order.tenant_id,
                pharmacy_id=order.pharmacy_id,
                type=f"ORDER_{notification_type}",
                title=f"Order {notification_type}",
                message=f"Your order is {notification_type.lower()}",
                data=data,
                channels=CUSTOMER_CHANNELS,
            )
        )
        return AggregateNotificationResult(aggregate_id=order_id, notifications=[result])

    async def send_inventory_notification(
        self,
        pharmacy_id: str,
        notification_type: str,
        item: Dict[str, Any],
    ) -> FanOutResult:
        """Notify every active admin, pharmacist and worker about an item.

        ``item`` is the item payload forwarded as notification data; its
        ``itemName`` is used in the message.
        """
        pharmacy = await self.pharmacy_store.find_by_id(pharmacy_id)
        if pharmacy is None:
            raise AggregateNotFound("Pharmacy", pharmacy_id)

        staff = await self.user_store.find_active_users_by_pharmacy_and_roles(
            pharmacy.tenant_id, pharmacy_id, STAFF_ROLES
        )
        item_name = item.get("itemName") or item.get("item_name") or "item"
        return await self._fan_out(
            staff,
            pharmacy.tenant_id,
            pharmacy_id,
            f"INVENTORY_{notification_type}",
            f"Inventory {notification_type}",
            f"Item {item_name} is {notification_type.lower()}",
            item,
        )

    async def send_prescription_notification(
        self, prescription_id: str, notification_type: str
    ) -> AggregateNotificationResult:
        prescription = await self.prescription_store.find_by_id(prescription_id)
        if prescription is None:
            raise AggregateNotFound("Prescription", prescription_id)

        patient = await self.user_store.find_user_by_id(prescription.patient_id)
        result = await self.dispatcher.send_notification(
            NotificationIntent(
                user_id=prescription.patient_id,
                tenant_id=prescription.tenant_id,
                pharmacy_id=prescription.pharmacy_id,
                type=f"PRESCRIPTION_{notification_type}",
                title=f"Prescription {notification_type}",
                message=f"Your prescription is {notification_type.lower()}",
                data={
                    "prescriptionId": prescription_id,
                    "patient": patient.name if patient else None,
                    "doctor": prescription.doctor_name,
                    "items": len(prescription.items),
                    "status": prescription.status,
                },
                channels=CUSTOMER_CHANNELS,
            )
        )
        return AggregateNotificationResult(
            aggregate_id=prescription_id, notifications=[result]
        )

    async def send_delivery_notification(
        self,
        order_id: str,
        status: str,
        delivery_data: Optional[Dict[str, Any]] = None,
    ) -> AggregateNotificationResult:
        """Notify the customer and, when assigned, the delivery driver."""
        order = await self.order_store.find_by_id(order_id)
        if order is None:
            raise AggregateNotFound("Order", order_id)

        data = {"orderId": order_id, **(delivery_data or {})}
        notifications = [
            await self.dispatcher.send_notification(
                NotificationIntent(
                    user_id=order.customer_id,
                    tenant_id=order.tenant_id,
                    pharmacy_id=order.pharmacy_id,
                    type=f"DELIVERY_{status}",
                    title=f"Delivery {status}",
                    message=f"Your order is {status.lower()}",
                    data=data,
                    channels=[Channel.SOCKET, Channel.SMS],
                )
            )
        ]

        if order.delivery_user_id:
            notifications.append(
                await self.dispatcher.send_notification(
                    NotificationIntent(
                        user_id=order.delivery_user_id,
                        tenant_id=order.tenant_id,
                        pharmacy_id=order.pharmacy_id,
                        type=f"DELIVERY_{status}_DRIVER",
                        title=f"Delivery {status}",
                        message="You have a delivery update",
                        data=data,
                        channels=[Channel.SOCKET],
                    )
                )
            )

        return AggregateNotificationResult(
            aggregate_id=order_id, notifications=notifications
        )

    def broadcast_to_tenant(
        self, tenant_id: str, type: str, data: Optional[Dict[str, Any]] = None
    ) -> int:
        """Publish a ``tenant-notification`` to every connection of a tenant."""
        data = data or {}
        return self.broadcaster.publish(
            tenant_room(tenant_id),
            RealtimeEvent.TENANT_NOTIFICATION,
            {
                "type": type,
                "message": data.get("message", ""),
                "data": data,
                "language": "en",
            },
        )


__all__ = [
    "PharmacyNotificationService",
    "CUSTOMER_CHANNELS",
    "staff_channels",
]
