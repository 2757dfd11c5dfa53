"""Persistence layer: domain aggregates, store interfaces and backends."""

from infrastructure.persistence.memory import (
    InMemoryInventoryStore,
    InMemoryNotificationStore,
    InMemoryOrderStore,
    InMemoryPharmacyStore,
    InMemoryPrescriptionStore,
    InMemoryUserStore,
)
from infrastructure.persistence.models import (
    PHARMACIST_ROLES,
    STAFF_ROLES,
    DeliveryLocation,
    InventoryItem,
    Order,
    Pharmacy,
    Prescription,
    UserProfile,
    UserRole,
)
from infrastructure.persistence.stores import (
    InventoryStore,
    NotificationStore,
    OrderStore,
    PharmacyStore,
    PrescriptionStore,
    UserStore,
)

__all__ = [
    "InMemoryInventoryStore",
    "InMemoryNotificationStore",
    "InMemoryOrderStore",
    "InMemoryPharmacyStore",
    "InMemoryPrescriptionStore",
    "InMemoryUserStore",
    "PHARMACIST_ROLES",
    "STAFF_ROLES",
    "DeliveryLocation",
    "InventoryItem",
    "Order",
    "Pharmacy",
    "Prescription",
    "UserProfile",
    "UserRole",
    "InventoryStore",
    "NotificationStore",
    "OrderStore",
    "PharmacyStore",
    "PrescriptionStore",
    "UserStore",
]
