"""Email channel implementation using GC Notify."""

from typing import TYPE_CHECKING, Any, Dict, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import (
    Channel,
    ChannelResult,
    NotificationIntent,
)
from infrastructure.operations import OperationResult

if TYPE_CHECKING:
    from infrastructure.persistence.models import UserProfile

logger = get_module_logger()


class EmailSender(Protocol):
    async def send_email(
        self, to: str, template_key: str, variables: Dict[str, Any]
    ) -> OperationResult:
        ...


class EmailChannel(NotificationChannel):
    """Email notification channel.

    Only recipients with an email address are eligible. Template variables
    are the notification data plus the recipient's display name.
    """

    def __init__(self, sender: EmailSender):
        self.sender = sender

    @property
    def channel(self) -> Channel:
        return Channel.EMAIL

    def is_eligible(self, recipient: "UserProfile") -> bool:
        return recipient.has_email

    async def send(
        self, recipient: "UserProfile", intent: NotificationIntent
    ) -> ChannelResult:
        result = await self.sender.send_email(
            recipient.email,
            intent.type,
            {
                "title": intent.title,
                "message": intent.message,
                **intent.data,
                "userName": recipient.name,
            },
        )
        if result.is_success:
            logger.info(
                "email_sent", user_id=recipient.id, notification_type=intent.type
            )
            return ChannelResult(channel=self.channel, success=True)

        logger.error(
            "email_failed",
            user_id=recipient.id,
            notification_type=intent.type,
            error=result.message,
            error_code=result.error_code,
        )
        return ChannelResult(channel=self.channel, success=False, error=result.message)
