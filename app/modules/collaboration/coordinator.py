"""Collaborative inventory editing.

While a user changes an inventory item, everyone watching the pharmacy
sees an "is editing" indicator. The indicator is a pair of broadcasts, not
a lock: ``isEditing=true`` before the write and ``isEditing=false`` once
the editing window has elapsed. Writes are last-write-wins.

Sequence for one update, all on ``pharmacy:<pharmacyId>``:

1. ``user-editing-inventory`` with ``isEditing=true``
2. ``inventory-update`` describing the change
3. ``user-editing-inventory`` with ``isEditing=false`` after the window
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from infrastructure.exceptions import AggregateNotFound, PermissionDenied
from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import (
    STAFF_ROLES,
    InventoryItem,
    UserProfile,
    UserRole,
)
from infrastructure.persistence.stores import InventoryStore
from infrastructure.realtime.broadcaster import Broadcaster
from infrastructure.realtime.rooms import RealtimeEvent, pharmacy_room
from infrastructure.realtime.scheduler import ScheduledTask, TaskScheduler

logger = get_module_logger()

INVENTORY_UPDATED = "INVENTORY_UPDATED"
BULK_INVENTORY_UPDATE = "BULK_INVENTORY_UPDATE"


class BulkUpdate(BaseModel):
    id: str
    changes: Dict[str, Any]


class BulkUpdateResult(BaseModel):
    updated: int
    items: List[InventoryItem]


def _editor(user: UserProfile) -> Dict[str, str]:
    return {"id": user.id, "name": user.name}


def _diff(
    previous: InventoryItem, updated: InventoryItem, changes: Dict[str, Any]
) -> List[Dict[str, Any]]:
    before = previous.model_dump(mode="json")
    after = updated.model_dump(mode="json")
    return [
        {"field": field, "oldValue": before.get(field), "newValue": after.get(field)}
        for field in changes
    ]


class CollaborationCoordinator:
    """Editing presence and collaborative inventory updates.

    Attributes:
        broadcaster: Publishes to pharmacy rooms
        inventory_store: Reads and writes inventory items
        scheduler: Runs the delayed ``isEditing=false`` signal
        editing_signal_seconds: Length of the editing window
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        inventory_store: InventoryStore,
        scheduler: TaskScheduler,
        editing_signal_seconds: float = 2.0,
    ):
        self.broadcaster = broadcaster
        self.inventory_store = inventory_store
        self.scheduler = scheduler
        self.editing_signal_seconds = editing_signal_seconds
        self._pending_clears: Dict[Tuple[str, str], ScheduledTask] = {}

    def announce_editing(
        self,
        pharmacy_id: str,
        item_id: str,
        editor: Dict[str, Any],
        is_editing: bool,
    ) -> int:
        return self.broadcaster.publish(
            pharmacy_room(pharmacy_id),
            RealtimeEvent.USER_EDITING_INVENTORY,
            {"itemId": item_id, "user": editor, "isEditing": is_editing},
        )

    async def _load(self, item_id: str, user: UserProfile) -> InventoryItem:
        if user.role not in STAFF_ROLES and user.role != UserRole.SUPER_ADMIN:
            raise PermissionDenied("Only pharmacy staff can edit inventory")
        item = await self.inventory_store.find_by_id(item_id)
        if item is None or item.tenant_id != user.tenant_id:
            raise AggregateNotFound("Inventory item", item_id)
        return item

    def _schedule_clear(self, item: InventoryItem, user: UserProfile) -> ScheduledTask:
        key = (item.id, user.id)
        previous = self._pending_clears.pop(key, None)
        if previous is not None:
            # a newer edit by the same user restarts the window
            previous.cancel()

        def clear() -> None:
            self._pending_clears.pop(key, None)
            self.announce_editing(item.pharmacy_id, item.id, _editor(user), False)

        handle = self.scheduler.schedule(
            self.editing_signal_seconds, clear, name=f"editing_clear:{item.id}"
        )
        self._pending_clears[key] = handle
        return handle

    async def update_inventory(
        self,
        item_id: str,
        changes: Dict[str, Any],
        user: UserProfile,
    ) -> InventoryItem:
        """Apply ``changes`` to an item with editing presence.

        Raises:
            PermissionDenied: The user is not pharmacy staff.
            AggregateNotFound: The item does not exist in the user's tenant.
                Nothing is broadcast.
            ValueError: ``changes`` is empty or touches non-editable fields.
        """
        if not changes:
            raise ValueError("No changes supplied")
        unknown = set(changes) - InventoryItem.EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {sorted(unknown)}")

        item = await self._load(item_id, user)
        editor = _editor(user)
        self.announce_editing(item.pharmacy_id, item.id, editor, True)

        try:
            previous, updated = await self.inventory_store.update(item_id, changes)
        except Exception:
            self.announce_editing(item.pharmacy_id, item.id, editor, False)
            raise

        diff = _diff(previous, updated, changes)
        self.broadcaster.publish(
            pharmacy_room(updated.pharmacy_id),
            RealtimeEvent.INVENTORY_UPDATE,
            {
                "type": INVENTORY_UPDATED,
                "itemId": updated.id,
                "field": diff[0]["field"],
                "oldValue": diff[0]["oldValue"],
                "newValue": diff[0]["newValue"],
                "changes": diff,
                "updatedBy": user.id,
                "userName": user.name,
            },
        )
        self._schedule_clear(updated, user)

        logger.info(
            "inventory_item_updated",
            item_id=item_id,
            pharmacy_id=updated.pharmacy_id,
            user_id=user.id,
            fields=list(changes),
        )
        return updated

    async def bulk_update_inventory(
        self, updates: List[BulkUpdate], user: UserProfile
    ) -> BulkUpdateResult:
        """Apply several item updates, broadcasting each one.

        Items are updated in order; the first failure stops the batch and
        propagates, leaving earlier updates applied.
        """
        items: List[InventoryItem] = []
        for update in updates:
            await self._load(update.id, user)
            previous, item = await self.inventory_store.update(update.id, update.changes)
            self.broadcaster.publish(
                pharmacy_room(item.pharmacy_id),
                RealtimeEvent.INVENTORY_UPDATE,
                {
                    "type": BULK_INVENTORY_UPDATE,
                    "itemId": item.id,
                    "changes": _diff(previous, item, update.changes),
                    "updatedBy": user.id,
                    "userName": user.name,
                },
            )
            items.append(item)

        logger.info("inventory_bulk_updated", user_id=user.id, updated=len(items))
        return BulkUpdateResult(updated=len(items), items=items)

    def pending_clear(self, item_id: str, user_id: str) -> Optional[ScheduledTask]:
        return self._pending_clears.get((item_id, user_id))
