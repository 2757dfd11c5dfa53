"""Notification inbox endpoints.

Every route acts on the authenticated user's own notifications.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, Request, Response

from api.dependencies.auth import CurrentUserDep
from api.dependencies.rate_limits import get_limiter
from infrastructure.notifications.inbox import (
    MAX_PAGE_SIZE,
    NotificationPage,
    NotificationStats,
)
from infrastructure.notifications.models import NotificationPriority, NotificationRecord
from infrastructure.services.dependencies import InboxDep

router = APIRouter(prefix="/notifications", tags=["Notifications"])
limiter = get_limiter()


@router.get("", response_model=NotificationPage)
@limiter.limit("60/minute")
async def list_notifications(
    request: Request,  # pylint: disable=unused-argument
    user: CurrentUserDep,
    inbox: InboxDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    read: Optional[bool] = None,
    type: Optional[str] = None,
    priority: Optional[NotificationPriority] = None,
    pharmacy_id: Optional[str] = Query(None, alias="pharmacyId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
):
    """List the user's notifications, newest first."""
    return await inbox.get_user_notifications(
        user.id,
        page=page,
        limit=limit,
        read=read,
        type=type,
        priority=priority,
        pharmacy_id=pharmacy_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/unread")
@limiter.limit("120/minute")
async def get_unread_count(
    request: Request,  # pylint: disable=unused-argument
    user: CurrentUserDep,
    inbox: InboxDep,
    pharmacy_id: Optional[str] = Query(None, alias="pharmacyId"),
    type: Optional[str] = None,
):
    count = await inbox.get_unread_count(user.id, pharmacy_id=pharmacy_id, type=type)
    return {"unread": count}


@router.get("/stats", response_model=NotificationStats)
@limiter.limit("30/minute")
async def get_stats(
    request: Request,  # pylint: disable=unused-argument
    user: CurrentUserDep,
    inbox: InboxDep,
    days: int = Query(30, ge=1, le=365),
    pharmacy_id: Optional[str] = Query(None, alias="pharmacyId"),
):
    return await inbox.get_notification_stats(
        user.id, days=days, pharmacy_id=pharmacy_id
    )


@router.get("/types")
@limiter.limit("30/minute")
async def get_types(
    request: Request,  # pylint: disable=unused-argument
    user: CurrentUserDep,
    inbox: InboxDep,
):
    """Notification types the user has received, most frequent first."""
    return {"types": await inbox.get_notification_types(user.id)}


@router.patch("/read-all")
@limiter.limit("30/minute")
async def mark_all_as_read(
    request: Request,  # pylint: disable=unused-argument
    user: CurrentUserDep,
    inbox: InboxDep,
    pharmacy_id: Optional[str] = Query(None, alias="pharmacyId"),
    type: Optional[str] = None,
):
    updated = await inbox.mark_all_as_read(user.id, pharmacy_id=pharmacy_id, type=type)
    return {"updated": updated}


@router.get("/{notification_id}", response_model=NotificationRecord)
@limiter.limit("60/minute")
async def get_notification(
    request: Request,  # pylint: disable=unused-argument
    notification_id: str,
    user: CurrentUserDep,
    inbox: InboxDep,
):
    return await inbox.get_notification(user.id, notification_id)


@router.patch("/{notification_id}/read", response_model=NotificationRecord)
@limiter.limit("60/minute")
async def mark_as_read(
    request: Request,  # pylint: disable=unused-argument
    notification_id: str,
    user: CurrentUserDep,
    inbox: InboxDep,
):
    return await inbox.mark_as_read(user.id, notification_id)


@router.delete("/{notification_id}", status_code=204)
@limiter.limit("60/minute")
async def delete_notification(
    request: Request,  # pylint: disable=unused-argument
    notification_id: str,
    user: CurrentUserDep,
    inbox: InboxDep,
):
    await inbox.delete_notification(user.id, notification_id)
    return Response(status_code=204)


@router.delete("")
@limiter.limit("10/minute")
async def clear_notifications(
    request: Request,  # pylint: disable=unused-argument
    user: CurrentUserDep,
    inbox: InboxDep,
    pharmacy_id: Optional[str] = Query(None, alias="pharmacyId"),
    type: Optional[str] = None,
    read: Optional[bool] = None,
):
    deleted = await inbox.clear_notifications(
        user.id, pharmacy_id=pharmacy_id, type=type, read=read
    )
    return {"deleted": deleted}
