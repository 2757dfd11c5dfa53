"""Notification system core models.

Uses Pydantic BaseModel for:
- Runtime input validation of notification intents
- Enforcing record invariants (failed records carry an error, read records
  carry a read timestamp)
- Consistency with the API layer response models
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Channel(str, Enum):
    """Delivery channels.

    Results are always reported in declaration order.
    """

    SOCKET = "socket"
    SMS = "sms"
    EMAIL = "email"


CHANNEL_ORDER = (Channel.SOCKET, Channel.SMS, Channel.EMAIL)


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class NotificationStatus(str, Enum):
    """Outcome stored on the notification record."""

    SENT = "SENT"
    FAILED = "FAILED"


class NotificationIntent(BaseModel):
    """A logical notification addressed to one user.

    Attributes:
        user_id: Recipient user id
        tenant_id: Recipient tenant
        pharmacy_id: Pharmacy the notification relates to, if any
        type: Machine type such as ``ORDER_CONFIRMED``; also the template key
        title: Short title stored on the record
        message: Human readable message
        data: Opaque JSON payload forwarded to every channel
        channels: Requested channels (default: socket only)
        priority: NotificationPriority (default: NORMAL)

    Example:
        intent = NotificationIntent(
            user_id="u-1",
            tenant_id="t-1",
            type="ORDER_CONFIRMED",
            title="Order CONFIRMED",
            message="Your order is confirmed",
            channels=[Channel.SOCKET, Channel.EMAIL],
        )
    """

    user_id: str
    tenant_id: str
    pharmacy_id: Optional[str] = None
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    channels: List[Channel] = Field(default_factory=lambda: [Channel.SOCKET])
    priority: NotificationPriority = NotificationPriority.NORMAL

    @field_validator("channels")
    @classmethod
    def dedupe_channels(cls, v: List[Channel]) -> List[Channel]:
        """Drop duplicate channels, keeping the first occurrence."""
        seen: List[Channel] = []
        for channel in v:
            if channel not in seen:
                seen.append(channel)
        return seen


class ChannelResult(BaseModel):
    """Outcome of one delivery attempt on one channel."""

    channel: Channel
    success: bool
    error: Optional[str] = None


class DispatchResult(BaseModel):
    """Return value of ``NotificationDispatcher.send_notification``."""

    success: bool
    channels: List[ChannelResult] = Field(default_factory=list)
    timestamp: Optional[datetime] = None
    error: Optional[str] = None
    notification_id: Optional[str] = None

    def result_for(self, channel: Channel) -> Optional[ChannelResult]:
        return next((r for r in self.channels if r.channel == channel), None)


class NotificationRecord(BaseModel):
    """Durable notification as stored in the notification store.

    Mutated only by read-state operations of the owning user.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    tenant_id: str
    pharmacy_id: Optional[str] = None
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    channels: List[Channel] = Field(default_factory=list)
    priority: NotificationPriority = NotificationPriority.NORMAL
    status: NotificationStatus = NotificationStatus.SENT
    error: Optional[str] = None
    read: bool = False
    read_at: Optional[datetime] = None
    language: str = "en"
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_state(self) -> "NotificationRecord":
        if self.status == NotificationStatus.FAILED and not self.error:
            raise ValueError("FAILED notifications must carry an error")
        if self.read and self.read_at is None:
            raise ValueError("read notifications must carry read_at")
        return self

    @classmethod
    def from_intent(
        cls,
        intent: NotificationIntent,
        status: NotificationStatus = NotificationStatus.SENT,
        error: Optional[str] = None,
    ) -> "NotificationRecord":
        return cls(
            user_id=intent.user_id,
            tenant_id=intent.tenant_id,
            pharmacy_id=intent.pharmacy_id,
            type=intent.type,
            title=intent.title,
            message=intent.message,
            data=intent.data,
            channels=intent.channels,
            priority=intent.priority,
            status=status,
            error=error,
        )


class NotificationFilter(BaseModel):
    """Selection of a user's notifications.

    Every query is scoped to ``user_id``; the remaining fields narrow it.
    """

    user_id: str
    id: Optional[str] = None
    read: Optional[bool] = None
    type: Optional[str] = None
    priority: Optional[NotificationPriority] = None
    pharmacy_id: Optional[str] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None

    @field_validator("created_after", "created_before")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Bounds without an offset are read as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def matches(self, record: NotificationRecord) -> bool:
        if record.user_id != self.user_id:
            return False
        if self.id is not None and record.id != self.id:
            return False
        if self.read is not None and record.read != self.read:
            return False
        if self.type is not None and record.type != self.type:
            return False
        if self.priority is not None and record.priority != self.priority:
            return False
        if self.pharmacy_id is not None and record.pharmacy_id != self.pharmacy_id:
            return False
        if self.created_after is not None and record.created_at < self.created_after:
            return False
        if self.created_before is not None and record.created_at > self.created_before:
            return False
        return True
