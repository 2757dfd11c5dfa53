"""Socket channel: pushes the notification to the recipient's user room."""

from typing import TYPE_CHECKING

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import (
    Channel,
    ChannelResult,
    NotificationIntent,
)
from infrastructure.realtime.rooms import RealtimeEvent, user_room

if TYPE_CHECKING:
    from infrastructure.realtime.broadcaster import Broadcaster
    from infrastructure.persistence.models import UserProfile

logger = get_module_logger()


class SocketChannel(NotificationChannel):
    """Realtime channel backed by the room broadcaster.

    Publishing is fire-and-forget, so the socket channel always reports
    success, whether or not the user has a live connection.
    """

    def __init__(self, broadcaster: "Broadcaster"):
        self.broadcaster = broadcaster

    @property
    def channel(self) -> Channel:
        return Channel.SOCKET

    async def send(
        self, recipient: "UserProfile", intent: NotificationIntent
    ) -> ChannelResult:
        delivered = self.broadcaster.publish(
            user_room(recipient.id),
            RealtimeEvent.NOTIFICATION,
            {
                "type": intent.type,
                "title": intent.title,
                "message": intent.message,
                "data": {"message": intent.message, **intent.data},
                "priority": intent.priority.value,
                "language": "en",
            },
        )
        logger.debug(
            "socket_notification_published",
            user_id=recipient.id,
            notification_type=intent.type,
            connections=delivered,
        )
        return ChannelResult(channel=self.channel, success=True)
