"""Application service container.

Wires stores, the realtime layer and the notification services together.
The container is built by the application lifespan and stored on
``app.state.services``; nothing in the service graph is a module-level
global.
"""

from dataclasses import dataclass, field
from typing import Optional

from infrastructure.auth.security import TokenVerifier
from infrastructure.configuration import Settings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels import (
    EmailChannel,
    EmailSender,
    SMSChannel,
    SmsSender,
    SocketChannel,
)
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.inbox import NotificationInbox
from infrastructure.persistence.dynamodb import DynamoDBNotificationStore
from infrastructure.persistence.memory import (
    InMemoryInventoryStore,
    InMemoryNotificationStore,
    InMemoryOrderStore,
    InMemoryPharmacyStore,
    InMemoryPrescriptionStore,
    InMemoryUserStore,
)
from infrastructure.persistence.stores import (
    InventoryStore,
    NotificationStore,
    OrderStore,
    PharmacyStore,
    PrescriptionStore,
    UserStore,
)
from infrastructure.realtime.broadcaster import Broadcaster
from infrastructure.realtime.registry import ConnectionRegistry
from infrastructure.realtime.scheduler import Clock, TaskScheduler
from integrations.notify.client import NotifyClient
from modules.collaboration.coordinator import CollaborationCoordinator
from modules.notifications.service import PharmacyNotificationService
from modules.orders.tracking import OrderTracker

logger = get_module_logger()


@dataclass
class Stores:
    """Store implementations used by the services."""

    users: UserStore = field(default_factory=InMemoryUserStore)
    pharmacies: PharmacyStore = field(default_factory=InMemoryPharmacyStore)
    orders: OrderStore = field(default_factory=InMemoryOrderStore)
    prescriptions: PrescriptionStore = field(default_factory=InMemoryPrescriptionStore)
    inventory: InventoryStore = field(default_factory=InMemoryInventoryStore)
    notifications: NotificationStore = field(default_factory=InMemoryNotificationStore)


@dataclass
class ServiceContainer:
    settings: Settings
    stores: Stores
    token_verifier: TokenVerifier
    registry: ConnectionRegistry
    broadcaster: Broadcaster
    scheduler: TaskScheduler
    dispatcher: NotificationDispatcher
    inbox: NotificationInbox
    notifications: PharmacyNotificationService
    collaboration: CollaborationCoordinator
    orders: OrderTracker

    def start(self) -> None:
        self.broadcaster.start()

    async def close(self) -> None:
        self.broadcaster.close()
        await self.scheduler.shutdown()


def build_notification_store(settings: Settings) -> NotificationStore:
    """Notification store selected by ``NOTIFICATION_STORE_BACKEND``."""
    persistence = settings.persistence
    if persistence.NOTIFICATION_STORE_BACKEND == "dynamodb":
        logger.info(
            "notification_store_selected",
            backend="dynamodb",
            table=persistence.NOTIFICATIONS_TABLE,
        )
        return DynamoDBNotificationStore(
            table_name=persistence.NOTIFICATIONS_TABLE,
            region_name=settings.aws.AWS_REGION,
            endpoint_url=persistence.DYNAMODB_ENDPOINT_URL,
        )
    logger.info("notification_store_selected", backend="memory")
    return InMemoryNotificationStore()


def build_container(
    settings: Settings,
    stores: Optional[Stores] = None,
    token_verifier: Optional[TokenVerifier] = None,
    email_sender: Optional[EmailSender] = None,
    sms_sender: Optional[SmsSender] = None,
    clock: Optional[Clock] = None,
) -> ServiceContainer:
    """Build the full service graph.

    Args:
        settings: Application settings.
        stores: Store implementations. In-memory stores (and the configured
            notification store) are used when omitted.
        token_verifier: Defaults to one built from ``settings.server``.
        email_sender: Defaults to the GC Notify client.
        sms_sender: Defaults to the GC Notify client.
        clock: Clock for the task scheduler. Real time when omitted.
    """
    if stores is None:
        stores = Stores(notifications=build_notification_store(settings))

    token_verifier = token_verifier or TokenVerifier(
        secret=settings.server.JWT_SECRET,
        algorithms=[settings.server.JWT_ALGORITHM],
    )
    if email_sender is None or sms_sender is None:
        notify = NotifyClient.from_settings(settings)
        email_sender = email_sender or notify
        sms_sender = sms_sender or notify

    registry = ConnectionRegistry(
        user_store=stores.users,
        token_verifier=token_verifier,
        pharmacy_store=stores.pharmacies,
        order_store=stores.orders,
        queue_size=settings.realtime.REALTIME_CONNECTION_QUEUE_SIZE,
    )
    broadcaster = Broadcaster(registry)
    scheduler = TaskScheduler(clock)
    dispatcher = NotificationDispatcher(
        user_store=stores.users,
        notification_store=stores.notifications,
        channels=[
            SocketChannel(broadcaster),
            SMSChannel(sms_sender),
            EmailChannel(email_sender),
        ],
    )

    return ServiceContainer(
        settings=settings,
        stores=stores,
        token_verifier=token_verifier,
        registry=registry,
        broadcaster=broadcaster,
        scheduler=scheduler,
        dispatcher=dispatcher,
        inbox=NotificationInbox(stores.notifications),
        notifications=PharmacyNotificationService(
            dispatcher=dispatcher,
            user_store=stores.users,
            pharmacy_store=stores.pharmacies,
            order_store=stores.orders,
            prescription_store=stores.prescriptions,
            broadcaster=broadcaster,
            scheduler=scheduler,
        ),
        collaboration=CollaborationCoordinator(
            broadcaster=broadcaster,
            inventory_store=stores.inventory,
            scheduler=scheduler,
            editing_signal_seconds=settings.realtime.REALTIME_EDITING_SIGNAL_SECONDS,
        ),
        orders=OrderTracker(
            broadcaster=broadcaster,
            order_store=stores.orders,
            user_store=stores.users,
        ),
    )
