"""Notification dispatcher with per-channel failure isolation.

Sends one logical notification over every requested channel and records
the outcome exactly once:

- The recipient is resolved first. An unknown recipient aborts before any
  channel is attempted and before anything is written.
- Eligible channels run concurrently. A channel that fails or raises is
  reported as ``success=False`` and never stops the others.
- A single ``SENT`` record is written once the channels have run. Channel
  failures do not turn it into ``FAILED``; only an exception escaping the
  dispatch itself produces a ``FAILED`` record.
- A failure to write the record is logged and swallowed.

Usage Example:
    dispatcher = NotificationDispatcher(
        user_store=user_store,
        notification_store=notification_store,
        channels=[SocketChannel(broadcaster), SMSChannel(notify), EmailChannel(notify)],
    )

    result = await dispatcher.send_notification(
        NotificationIntent(
            user_id="u-1",
            tenant_id="t-1",
            type="ORDER_CONFIRMED",
            title="Order CONFIRMED",
            message="Your order is confirmed",
            channels=[Channel.SOCKET, Channel.EMAIL],
        )
    )
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from infrastructure.exceptions import RecipientNotFound
from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import (
    CHANNEL_ORDER,
    Channel,
    ChannelResult,
    DispatchResult,
    NotificationIntent,
    NotificationRecord,
    NotificationStatus,
)
from infrastructure.persistence.models import UserProfile
from infrastructure.persistence.stores import NotificationStore, UserStore

logger = get_module_logger()


class NotificationDispatcher:
    """Multi-channel notification dispatcher.

    Attributes:
        user_store: Resolves recipient contact details
        notification_store: Receives exactly one record per dispatch
        channels: Channel implementations keyed by Channel
    """

    def __init__(
        self,
        user_store: UserStore,
        notification_store: NotificationStore,
        channels: Iterable[NotificationChannel],
    ):
        self.user_store = user_store
        self.notification_store = notification_store
        self.channels: Dict[Channel, NotificationChannel] = {
            c.channel: c for c in channels
        }

        logger.info(
            "initialized_notification_dispatcher",
            channels=[c.value for c in self.channels],
        )

    def get_available_channels(self) -> List[Channel]:
        return [c for c in CHANNEL_ORDER if c in self.channels]

    async def send_notification(self, intent: NotificationIntent) -> DispatchResult:
        """Deliver ``intent`` on every requested channel and record it.

        Args:
            intent: Recipient, content and requested channels.

        Returns:
            ``DispatchResult(success=True, channels=[...])`` once the record
            step has run, or ``DispatchResult(success=False, error=...)``
            when the dispatch itself failed.
        """
        log = logger.bind(user_id=intent.user_id, notification_type=intent.type)
        try:
            recipient = await self.user_store.find_user_by_id(intent.user_id)
            if recipient is None:
                raise RecipientNotFound(intent.user_id)

            results = await self._deliver(recipient, intent)
            record = NotificationRecord.from_intent(intent, NotificationStatus.SENT)
        except RecipientNotFound as e:
            log.warning("notification_recipient_not_found")
            return DispatchResult(success=False, error=str(e))
        except Exception as e:  # pylint: disable=broad-except
            log.error("notification_dispatch_failed", error=str(e))
            await self._record_failure(intent, e)
            return DispatchResult(success=False, error=str(e))

        await self._persist(record)
        log.info(
            "notification_sent",
            notification_id=record.id,
            channels={r.channel.value: r.success for r in results},
        )
        return DispatchResult(
            success=True,
            channels=results,
            timestamp=datetime.now(timezone.utc),
            notification_id=record.id,
        )

    async def _deliver(
        self, recipient: UserProfile, intent: NotificationIntent
    ) -> List[ChannelResult]:
        selected: List[NotificationChannel] = []
        for channel in CHANNEL_ORDER:
            if channel not in intent.channels:
                continue
            implementation = self.channels.get(channel)
            if implementation is None:
                logger.warning(
                    "notification_channel_unavailable",
                    channel=channel.value,
                    user_id=recipient.id,
                )
                continue
            if implementation.is_eligible(recipient):
                selected.append(implementation)

        outcomes = await asyncio.gather(
            *(c.send(recipient, intent) for c in selected),
            return_exceptions=True,
        )

        results: List[ChannelResult] = []
        for implementation, outcome in zip(selected, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.error(
                    "notification_channel_error",
                    channel=implementation.channel.value,
                    user_id=recipient.id,
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                )
                results.append(
                    ChannelResult(
                        channel=implementation.channel,
                        success=False,
                        error=str(outcome),
                    )
                )
            else:
                results.append(outcome)
        return results

    async def _persist(self, record: NotificationRecord) -> Optional[NotificationRecord]:
        try:
            return await self.notification_store.create(record)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "notification_record_write_failed",
                notification_id=record.id,
                user_id=record.user_id,
                status=record.status.value,
                error=str(e),
            )
            return None

    async def _record_failure(self, intent: NotificationIntent, error: Exception) -> None:
        if not intent.user_id:
            return
        try:
            record = NotificationRecord.from_intent(
                intent,
                NotificationStatus.FAILED,
                error=str(error) or type(error).__name__,
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "notification_failure_record_invalid",
                user_id=intent.user_id,
                error=str(e),
            )
            return
        await self._persist(record)
