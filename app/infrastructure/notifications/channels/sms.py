"""SMS channel implementation using GC Notify."""

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


class SmsSender(Protocol):
    async def send_sms(
        self, to: str, template_key: str, variables: Dict[str, Any]
    ) -> OperationResult:
        ...


class SMSChannel(NotificationChannel):
    """SMS notification channel.

    Only recipients with a phone number are eligible. The notification type
    is the template key; the message and data are the template variables.
    """

    def __init__(self, sender: SmsSender):
        self.sender = sender

    @property
    def channel(self) -> Channel:
        return Channel.SMS

    def is_eligible(self, recipient: "UserProfile") -> bool:
        return recipient.has_phone

    async def send(
        self, recipient: "UserProfile", intent: NotificationIntent
    ) -> ChannelResult:
        result = await self.sender.send_sms(
            recipient.phone,
            intent.type,
            {"message": intent.message, **intent.data},
        )
        if result.is_success:
            logger.info("sms_sent", user_id=recipient.id, notification_type=intent.type)
            return ChannelResult(channel=self.channel, success=True)

        logger.error(
            "sms_failed",
            user_id=recipient.id,
            notification_type=intent.type,
            error=result.message,
            error_code=result.error_code,
        )
        return ChannelResult(channel=self.channel, success=False, error=result.message)
