"""Notification delivery and inbox.

Usage:
    from infrastructure.notifications import Channel, NotificationIntent
    from infrastructure.notifications.dispatcher import NotificationDispatcher

    result = await dispatcher.send_notification(
        NotificationIntent(
            user_id="u-1",
            tenant_id="t-1",
            type="PRESCRIPTION_READY",
            title="Prescription READY",
            message="Your prescription is ready",
            channels=[Channel.SOCKET, Channel.SMS],
        )
    )
    failed = [r.channel for r in result.channels if not r.success]

The dispatcher, inbox and channels are imported from their modules; only
the models are re-exported here so the store layer can depend on them.
"""

from infrastructure.notifications.models import (
    CHANNEL_ORDER,
    Channel,
    ChannelResult,
    DispatchResult,
    NotificationFilter,
    NotificationIntent,
    NotificationPriority,
    NotificationRecord,
    NotificationStatus,
)

__all__ = [
    "CHANNEL_ORDER",
    "Channel",
    "ChannelResult",
    "DispatchResult",
    "NotificationFilter",
    "NotificationIntent",
    "NotificationPriority",
    "NotificationRecord",
    "NotificationStatus",
]
