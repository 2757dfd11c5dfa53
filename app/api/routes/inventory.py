from typing import Any, Dict, List

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from api.dependencies.auth import CurrentUserDep
from api.dependencies.rate_limits import get_limiter
from infrastructure.persistence.models import InventoryItem
from infrastructure.services.dependencies import CollaborationDep
from modules.collaboration.coordinator import BulkUpdate, BulkUpdateResult

router = APIRouter(prefix="/inventory", tags=["Inventory"])
limiter = get_limiter()


class InventoryUpdateRequest(BaseModel):
    changes: Dict[str, Any]


class BulkInventoryUpdateRequest(BaseModel):
    updates: List[BulkUpdate] = Field(min_length=1)


@router.patch("/bulk", response_model=BulkUpdateResult)
@limiter.limit("10/minute")
async def bulk_update_inventory(
    request: Request,  # pylint: disable=unused-argument
    body: BulkInventoryUpdateRequest,
    user: CurrentUserDep,
    collaboration: CollaborationDep,
):
    """Apply several item updates in order."""
    return await collaboration.bulk_update_inventory(body.updates, user)


@router.patch("/{item_id}", response_model=InventoryItem)
@limiter.limit("120/minute")
async def update_inventory_item(
    request: Request,  # pylint: disable=unused-argument
    item_id: str,
    body: InventoryUpdateRequest,
    user: CurrentUserDep,
    collaboration: CollaborationDep,
):
    """
    Update an inventory item.

    Staff watching the item's pharmacy see the editing indicator, the change
    itself, and the indicator clearing shortly after.
    """
    return await collaboration.update_inventory(item_id, body.changes, user)
