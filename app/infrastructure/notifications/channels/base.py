"""Notification channel abstract base class.

Every channel (socket, SMS, email) implements this interface. The
dispatcher asks each requested channel whether the recipient is eligible,
then calls ``send`` for the eligible ones concurrently.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from infrastructure.notifications.models import (
    Channel,
    ChannelResult,
    NotificationIntent,
)

if TYPE_CHECKING:
    from infrastructure.persistence.models import UserProfile


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    Example Implementation:
        class PagerChannel(NotificationChannel):

            @property
            def channel(self) -> Channel:
                return Channel.SMS

            def is_eligible(self, recipient: UserProfile) -> bool:
                return recipient.has_phone

            async def send(self, recipient, intent) -> ChannelResult:
                result = await self.client.page(recipient.phone, intent.message)
                return ChannelResult(channel=self.channel, success=result.is_success)
    """

    @property
    @abstractmethod
    def channel(self) -> Channel:
        """Channel this implementation delivers on."""

    def is_eligible(self, recipient: "UserProfile") -> bool:
        """Whether the recipient can be reached on this channel.

        Ineligible channels are skipped silently and produce no result.
        """
        return True

    @abstractmethod
    async def send(
        self, recipient: "UserProfile", intent: NotificationIntent
    ) -> ChannelResult:
        """Deliver ``intent`` to ``recipient``.

        Delivery failures should be returned as ``success=False``. Anything
        raised is caught by the dispatcher and recorded the same way.
        """
