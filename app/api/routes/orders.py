from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field

from api.dependencies.auth import CurrentUserDep
from api.dependencies.rate_limits import get_limiter
from infrastructure.persistence.models import DeliveryLocation
from infrastructure.services.dependencies import NotificationServiceDep, OrderTrackerDep

router = APIRouter(prefix="/orders", tags=["Orders"])
limiter = get_limiter()


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(min_length=1)
    delivery_user_id: Optional[str] = Field(default=None, alias="deliveryUserId")
    estimated_delivery: Optional[datetime] = Field(
        default=None, alias="estimatedDelivery"
    )


class LocationUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = Field(default=None, ge=0)


@router.patch("/{order_id}/status")
@limiter.limit("60/minute")
async def update_order_status(
    request: Request,  # pylint: disable=unused-argument
    order_id: str,
    body: OrderStatusUpdate,
    user: CurrentUserDep,
    tracker: OrderTrackerDep,
    notifications: NotificationServiceDep,
):
    """Change an order's status, broadcast it and notify the customer."""
    order = await tracker.update_order_status(
        order_id,
        body.status.upper(),
        user,
        delivery_user_id=body.delivery_user_id,
        estimated_delivery=body.estimated_delivery,
    )
    result = await notifications.send_order_notification(order_id, order.status)
    return {"order": order, "notification": result.primary}


@router.post("/{order_id}/location", response_model=DeliveryLocation)
@limiter.limit("240/minute")
async def record_location(
    request: Request,  # pylint: disable=unused-argument
    order_id: str,
    body: LocationUpdate,
    user: CurrentUserDep,
    tracker: OrderTrackerDep,
):
    """Report the delivery driver's current position."""
    return await tracker.record_delivery_location(
        order_id,
        user,
        latitude=body.latitude,
        longitude=body.longitude,
        accuracy=body.accuracy,
    )
