"""In-memory store implementations.

Suitable for single-instance deployments, development and tests. Records
are copied on the way in and out so callers never share mutable state with
the store.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from infrastructure.exceptions import AggregateNotFound
from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import NotificationFilter, NotificationRecord
from infrastructure.persistence.models import (
    DeliveryLocation,
    InventoryItem,
    Order,
    Pharmacy,
    Prescription,
    UserProfile,
    UserRole,
    utc_now,
)
from infrastructure.persistence.stores import (
    InventoryStore,
    NotificationStore,
    OrderStore,
    PharmacyStore,
    PrescriptionStore,
    UserStore,
)

logger = get_module_logger()


class _KeyedStore:
    """Dict-backed storage shared by the aggregate stores."""

    def __init__(self, records: Optional[Iterable[Any]] = None) -> None:
        self._records: Dict[str, Any] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: Any) -> None:
        self._records[record.id] = record.model_copy(deep=True)

    def _get(self, record_id: str) -> Optional[Any]:
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record is not None else None


class InMemoryUserStore(_KeyedStore, UserStore):
    async def find_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        return self._get(user_id)

    async def find_active_users_by_pharmacy_and_roles(
        self,
        tenant_id: str,
        pharmacy_id: str,
        roles: Sequence[UserRole],
    ) -> List[UserProfile]:
        return [
            user.model_copy(deep=True)
            for user in self._records.values()
            if user.tenant_id == tenant_id
            and user.pharmacy_id == pharmacy_id
            and user.role in roles
            and user.is_active
        ]


class InMemoryPharmacyStore(_KeyedStore, PharmacyStore):
    async def find_by_id(self, pharmacy_id: str) -> Optional[Pharmacy]:
        return self._get(pharmacy_id)


class InMemoryPrescriptionStore(_KeyedStore, PrescriptionStore):
    async def find_by_id(self, prescription_id: str) -> Optional[Prescription]:
        return self._get(prescription_id)


class InMemoryOrderStore(_KeyedStore, OrderStore):
    def __init__(self, records: Optional[Iterable[Order]] = None) -> None:
        super().__init__(records)
        self.locations: Dict[str, List[DeliveryLocation]] = {}

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        return self._get(order_id)

    async def update(self, order_id: str, changes: Dict[str, Any]) -> Order:
        current = self._records.get(order_id)
        if current is None:
            raise AggregateNotFound("Order", order_id)
        updated = Order.model_validate(
            {**current.model_dump(), **changes, "updated_at": utc_now()}
        )
        self._records[order_id] = updated
        return updated.model_copy(deep=True)

    async def add_location(self, location: DeliveryLocation) -> DeliveryLocation:
        if location.order_id not in self._records:
            raise AggregateNotFound("Order", location.order_id)
        self.locations.setdefault(location.order_id, []).append(location)
        return location.model_copy()


class InMemoryInventoryStore(_KeyedStore, InventoryStore):
    async def find_by_id(self, item_id: str) -> Optional[InventoryItem]:
        return self._get(item_id)

    async def update(
        self, item_id: str, changes: Dict[str, Any]
    ) -> Tuple[InventoryItem, InventoryItem]:
        current = self._records.get(item_id)
        if current is None:
            raise AggregateNotFound("Inventory item", item_id)
        unknown = set(changes) - InventoryItem.EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {sorted(unknown)}")
        updated = InventoryItem.model_validate(
            {**current.model_dump(), **changes, "updated_at": utc_now()}
        )
        self._records[item_id] = updated
        return current.model_copy(deep=True), updated.model_copy(deep=True)


class InMemoryNotificationStore(NotificationStore):
    """Notification records kept in insertion order."""

    def __init__(self) -> None:
        self._records: List[NotificationRecord] = []

    def _matching(self, filter: NotificationFilter) -> List[NotificationRecord]:
        matches = [r for r in reversed(self._records) if filter.matches(r)]
        matches.sort(key=lambda r: r.created_at, reverse=True)
        return matches

    async def create(self, record: NotificationRecord) -> NotificationRecord:
        self._records.append(record.model_copy(deep=True))
        logger.debug(
            "notification_record_created",
            notification_id=record.id,
            status=record.status.value,
        )
        return record

    async def find_one(self, filter: NotificationFilter) -> Optional[NotificationRecord]:
        matches = self._matching(filter)
        return matches[0].model_copy(deep=True) if matches else None

    async def find_many(
        self,
        filter: NotificationFilter,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NotificationRecord]:
        matches = self._matching(filter)
        end = None if limit is None else offset + limit
        return [r.model_copy(deep=True) for r in matches[offset:end]]

    async def count(self, filter: NotificationFilter) -> int:
        return sum(1 for r in self._records if filter.matches(r))

    async def update_many(
        self, filter: NotificationFilter, changes: Dict[str, Any]
    ) -> int:
        updated = 0
        for index, record in enumerate(self._records):
            if filter.matches(record):
                self._records[index] = NotificationRecord.model_validate(
                    {**record.model_dump(), **changes}
                )
                updated += 1
        return updated

    async def delete_many(self, filter: NotificationFilter) -> int:
        kept = [r for r in self._records if not filter.matches(r)]
        deleted = len(self._records) - len(kept)
        self._records = kept
        return deleted
