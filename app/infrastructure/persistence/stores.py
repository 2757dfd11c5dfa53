"""Store interfaces consumed by the realtime and notification services.

Every method is a coroutine. Implementations backed by blocking clients run
them through ``asyncio.to_thread``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from infrastructure.notifications.models import NotificationFilter, NotificationRecord
from infrastructure.persistence.models import (
    DeliveryLocation,
    InventoryItem,
    Order,
    Pharmacy,
    Prescription,
    UserProfile,
    UserRole,
)


class UserStore(ABC):
    @abstractmethod
    async def find_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        """Return the user or None."""

    @abstractmethod
    async def find_active_users_by_pharmacy_and_roles(
        self,
        tenant_id: str,
        pharmacy_id: str,
        roles: Sequence[UserRole],
    ) -> List[UserProfile]:
        """Return active users of ``pharmacy_id`` in ``tenant_id`` holding one of ``roles``."""


class PharmacyStore(ABC):
    @abstractmethod
    async def find_by_id(self, pharmacy_id: str) -> Optional[Pharmacy]:
        pass


class OrderStore(ABC):
    @abstractmethod
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def update(self, order_id: str, changes: Dict[str, Any]) -> Order:
        """Apply ``changes`` and return the updated order."""

    @abstractmethod
    async def add_location(self, location: DeliveryLocation) -> DeliveryLocation:
        """Append a point to the order's delivery location history."""


class PrescriptionStore(ABC):
    @abstractmethod
    async def find_by_id(self, prescription_id: str) -> Optional[Prescription]:
        pass


class InventoryStore(ABC):
    @abstractmethod
    async def find_by_id(self, item_id: str) -> Optional[InventoryItem]:
        pass

    @abstractmethod
    async def update(
        self, item_id: str, changes: Dict[str, Any]
    ) -> Tuple[InventoryItem, InventoryItem]:
        """Apply ``changes`` (last write wins).

        Returns:
            The item as it was before the write and as it is after.
        """


class NotificationStore(ABC):
    """Durable notification records.

    Append-mostly; updates and deletes are always scoped by a
    ``NotificationFilter`` and therefore by user.
    """

    @abstractmethod
    async def create(self, record: NotificationRecord) -> NotificationRecord:
        pass

    @abstractmethod
    async def find_one(self, filter: NotificationFilter) -> Optional[NotificationRecord]:
        pass

    @abstractmethod
    async def find_many(
        self,
        filter: NotificationFilter,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NotificationRecord]:
        """Matching records, newest first."""

    @abstractmethod
    async def count(self, filter: NotificationFilter) -> int:
        pass

    @abstractmethod
    async def update_many(
        self, filter: NotificationFilter, changes: Dict[str, Any]
    ) -> int:
        """Apply ``changes`` to every match and return how many were touched."""

    @abstractmethod
    async def delete_many(self, filter: NotificationFilter) -> int:
        pass
