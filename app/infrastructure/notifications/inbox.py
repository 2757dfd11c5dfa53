"""Notification inbox: read-state operations and queries.

Every operation takes the acting ``user_id`` and builds its store filter
from it, so a user can only ever see or change their own notifications.
"""

import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from infrastructure.exceptions import NotificationNotFound
from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    NotificationFilter,
    NotificationPriority,
    NotificationRecord,
)
from infrastructure.persistence.stores import NotificationStore

logger = get_module_logger()

MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    unread: int


class NotificationPage(BaseModel):
    notifications: List[NotificationRecord]
    pagination: Pagination


class NotificationStats(BaseModel):
    """Aggregate counts over a trailing window of days."""

    days: int
    total: int
    unread: int
    read: int
    unread_percentage: float
    by_type: Dict[str, int]
    by_priority: Dict[str, int]


class NotificationInbox:
    """User-scoped notification queries and read-state changes.

    Attributes:
        store: Notification store
    """

    def __init__(self, store: NotificationStore):
        self.store = store

    async def get_user_notifications(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        read: Optional[bool] = None,
        type: Optional[str] = None,
        priority: Optional[NotificationPriority] = None,
        pharmacy_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> NotificationPage:
        """Newest-first page of the user's notifications.

        ``pagination.unread`` counts every unread notification of the user,
        independent of the filters.
        """
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        filter = NotificationFilter(
            user_id=user_id,
            read=read,
            type=type,
            priority=priority,
            pharmacy_id=pharmacy_id,
            created_after=start_date,
            created_before=end_date,
        )

        notifications = await self.store.find_many(
            filter, offset=(page - 1) * limit, limit=limit
        )
        total = await self.store.count(filter)
        unread = await self.store.count(NotificationFilter(user_id=user_id, read=False))

        return NotificationPage(
            notifications=notifications,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if total else 0,
                unread=unread,
            ),
        )

    async def get_notification(
        self, user_id: str, notification_id: str
    ) -> NotificationRecord:
        record = await self.store.find_one(
            NotificationFilter(user_id=user_id, id=notification_id)
        )
        if record is None:
            raise NotificationNotFound(notification_id)
        return record

    async def get_unread_count(
        self,
        user_id: str,
        pharmacy_id: Optional[str] = None,
        type: Optional[str] = None,
    ) -> int:
        return await self.store.count(
            NotificationFilter(
                user_id=user_id, read=False, pharmacy_id=pharmacy_id, type=type
            )
        )

    async def get_notification_stats(
        self,
        user_id: str,
        days: int = 30,
        pharmacy_id: Optional[str] = None,
    ) -> NotificationStats:
        since = datetime.now(timezone.utc) - timedelta(days=days)
        records = await self.store.find_many(
            NotificationFilter(
                user_id=user_id, pharmacy_id=pharmacy_id, created_after=since
            )
        )
        total = len(records)
        unread = sum(1 for r in records if not r.read)
        return NotificationStats(
            days=days,
            total=total,
            unread=unread,
            read=total - unread,
            unread_percentage=round(unread / total * 100, 2) if total else 0.0,
            by_type=dict(Counter(r.type for r in records)),
            by_priority=dict(Counter(r.priority.value for r in records)),
        )

    async def mark_as_read(
        self, user_id: str, notification_id: str
    ) -> NotificationRecord:
        """Mark one notification read.

        Idempotent: a notification that is already read keeps its original
        ``read_at``.

        Raises:
            NotificationNotFound: The id does not exist for this user.
        """
        record = await self.get_notification(user_id, notification_id)
        if record.read:
            return record

        read_at = datetime.now(timezone.utc)
        await self.store.update_many(
            NotificationFilter(user_id=user_id, id=notification_id, read=False),
            {"read": True, "read_at": read_at},
        )
        logger.info("notification_marked_read", user_id=user_id, notification_id=notification_id)
        return await self.get_notification(user_id, notification_id)

    async def mark_all_as_read(
        self,
        user_id: str,
        pharmacy_id: Optional[str] = None,
        type: Optional[str] = None,
    ) -> int:
        """Mark every unread match read and return how many changed."""
        updated = await self.store.update_many(
            NotificationFilter(
                user_id=user_id, read=False, pharmacy_id=pharmacy_id, type=type
            ),
            {"read": True, "read_at": datetime.now(timezone.utc)},
        )
        logger.info("notifications_marked_read", user_id=user_id, updated=updated)
        return updated

    async def delete_notification(self, user_id: str, notification_id: str) -> None:
        deleted = await self.store.delete_many(
            NotificationFilter(user_id=user_id, id=notification_id)
        )
        if not deleted:
            raise NotificationNotFound(notification_id)
        logger.info("notification_deleted", user_id=user_id, notification_id=notification_id)

    async def clear_notifications(
        self,
        user_id: str,
        pharmacy_id: Optional[str] = None,
        type: Optional[str] = None,
        read: Optional[bool] = None,
    ) -> int:
        deleted = await self.store.delete_many(
            NotificationFilter(
                user_id=user_id, pharmacy_id=pharmacy_id, type=type, read=read
            )
        )
        logger.info("notifications_cleared", user_id=user_id, deleted=deleted)
        return deleted

    async def get_notification_types(self, user_id: str) -> Dict[str, Any]:
        """Notification types seen by the user with their counts."""
        records = await self.store.find_many(NotificationFilter(user_id=user_id))
        counts = Counter(r.type for r in records)
        return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))
