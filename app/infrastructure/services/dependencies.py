"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for infrastructure and service dependencies.
Services are read from the container the lifespan stores on
``app.state.services``.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from infrastructure.configuration import Settings
from infrastructure.notifications.inbox import NotificationInbox
from infrastructure.services.container import ServiceContainer
from infrastructure.services.providers import get_settings
from modules.collaboration.coordinator import CollaborationCoordinator
from modules.notifications.service import PharmacyNotificationService
from modules.orders.tracking import OrderTracker


def get_services(request: Request) -> ServiceContainer:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return services


def get_inbox(services: "ServicesDep") -> NotificationInbox:
    return services.inbox


def get_collaboration(services: "ServicesDep") -> CollaborationCoordinator:
    return services.collaboration


def get_order_tracker(services: "ServicesDep") -> OrderTracker:
    return services.orders


def get_notification_service(services: "ServicesDep") -> PharmacyNotificationService:
    return services.notifications


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Application service container
ServicesDep = Annotated[ServiceContainer, Depends(get_services)]

InboxDep = Annotated[NotificationInbox, Depends(get_inbox)]
CollaborationDep = Annotated[CollaborationCoordinator, Depends(get_collaboration)]
OrderTrackerDep = Annotated[OrderTracker, Depends(get_order_tracker)]
NotificationServiceDep = Annotated[
    PharmacyNotificationService, Depends(get_notification_service)
]

__all__ = [
    "SettingsDep",
    "ServicesDep",
    "InboxDep",
    "CollaborationDep",
    "OrderTrackerDep",
    "NotificationServiceDep",
    "get_services",
]
