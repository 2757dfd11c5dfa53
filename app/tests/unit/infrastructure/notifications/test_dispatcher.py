"""Unit tests for NotificationDispatcher.

Tests cover:
- Channel selection by request, availability and eligibility
- Per-channel failure isolation
- Exactly one record per dispatch
- Unknown recipients and record write failures
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from infrastructure.notifications.channels import EmailChannel, SMSChannel, SocketChannel
from infrastructure.notifications.models import (
    Channel,
    NotificationFilter,
    NotificationStatus,
)
from infrastructure.operations import OperationResult
from tests.factories.pharmacy import make_intent
from tests.fixtures.senders import RecordingSender


def _results(result):
    return [(r.channel, r.success) for r in result.channels]


@pytest.mark.unit
class TestChannelSelection:
    def test_available_channels_in_canonical_order(self, dispatcher_factory):
        assert dispatcher_factory().get_available_channels() == [
            Channel.SOCKET,
            Channel.SMS,
            Channel.EMAIL,
        ]

    @pytest.mark.asyncio
    async def test_ineligible_channel_is_skipped(self, dispatcher_factory, sender):
        # driver-1 has a phone but no email
        result = await dispatcher_factory().send_notification(
            make_intent(user_id="driver-1", channels=[Channel.SOCKET, Channel.EMAIL])
        )

        assert result.success is True
        assert _results(result) == [(Channel.SOCKET, True)]
        assert sender.emails == []

    @pytest.mark.asyncio
    async def test_results_follow_canonical_order(self, dispatcher_factory):
        result = await dispatcher_factory().send_notification(
            make_intent(channels=[Channel.EMAIL, Channel.SMS, Channel.SOCKET])
        )

        assert [r.channel for r in result.channels] == [
            Channel.SOCKET,
            Channel.SMS,
            Channel.EMAIL,
        ]

    @pytest.mark.asyncio
    async def test_unavailable_channel_is_skipped(self, dispatcher_factory, broadcaster):
        dispatcher = dispatcher_factory(channels=[SocketChannel(broadcaster)])

        result = await dispatcher.send_notification(
            make_intent(channels=[Channel.SOCKET, Channel.SMS])
        )

        assert _results(result) == [(Channel.SOCKET, True)]

    @pytest.mark.asyncio
    async def test_unrequested_channels_are_not_attempted(
        self, dispatcher_factory, sender
    ):
        await dispatcher_factory().send_notification(make_intent())

        assert sender.sms == []
        assert sender.emails == []


@pytest.mark.unit
class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_raising_channel_does_not_stop_others(
        self, stores, broadcaster, dispatcher_factory
    ):
        sender = RecordingSender(sms_error=RuntimeError("SMS gateway down"))
        dispatcher = dispatcher_factory(
            channels=[SocketChannel(broadcaster), SMSChannel(sender), EmailChannel(sender)]
        )

        result = await dispatcher.send_notification(
            make_intent(channels=[Channel.SMS, Channel.EMAIL])
        )

        assert result.success is True
        assert _results(result) == [(Channel.SMS, False), (Channel.EMAIL, True)]
        assert result.result_for(Channel.SMS).error == "SMS gateway down"

        records = await stores.notifications.find_many(
            NotificationFilter(user_id="customer-1")
        )
        assert len(records) == 1
        assert records[0].status == NotificationStatus.SENT
        assert records[0].id == result.notification_id

    @pytest.mark.asyncio
    async def test_channel_failures_keep_record_sent(self, stores, dispatcher_factory):
        sender = RecordingSender(
            email_result=OperationResult.permanent_error("rejected")
        )
        dispatcher = dispatcher_factory(channels=[EmailChannel(sender)])

        result = await dispatcher.send_notification(
            make_intent(channels=[Channel.EMAIL])
        )

        assert _results(result) == [(Channel.EMAIL, False)]
        record = await stores.notifications.find_one(
            NotificationFilter(user_id="customer-1")
        )
        assert record.status == NotificationStatus.SENT

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, dispatcher_factory):
        channel = AsyncMock()
        channel.channel = Channel.SMS
        channel.is_eligible = lambda recipient: True
        channel.send.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await dispatcher_factory(channels=[channel]).send_notification(
                make_intent(channels=[Channel.SMS])
            )


@pytest.mark.unit
class TestRecording:
    @pytest.mark.asyncio
    async def test_unknown_recipient_writes_nothing(self, stores, dispatcher_factory):
        result = await dispatcher_factory().send_notification(
            make_intent(user_id="ghost", channels=[Channel.SOCKET, Channel.EMAIL])
        )

        assert result.success is False
        assert "ghost" in result.error
        assert result.channels == []
        assert await stores.notifications.count(NotificationFilter(user_id="ghost")) == 0

    @pytest.mark.asyncio
    async def test_record_mirrors_intent(self, stores, dispatcher_factory):
        result = await dispatcher_factory().send_notification(
            make_intent(data={"orderId": "o-1"}, channels=[Channel.SOCKET])
        )

        record = await stores.notifications.find_one(
            NotificationFilter(user_id="customer-1", id=result.notification_id)
        )
        assert record.type == "ORDER_CONFIRMED"
        assert record.pharmacy_id == "ph-1"
        assert record.data == {"orderId": "o-1"}
        assert record.channels == [Channel.SOCKET]
        assert record.read is False

    @pytest.mark.asyncio
    async def test_record_write_failure_is_swallowed(self, dispatcher_factory):
        store = AsyncMock()
        store.create.side_effect = RuntimeError("table unavailable")

        result = await dispatcher_factory(notification_store=store).send_notification(
            make_intent()
        )

        assert result.success is True
        store.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dispatch_failure_records_failed(self, stores, dispatcher_factory):
        stores.users.find_user_by_id = AsyncMock(side_effect=RuntimeError("db down"))

        result = await dispatcher_factory().send_notification(make_intent())

        assert result.success is False
        assert result.error == "db down"
        [record] = await stores.notifications.find_many(
            NotificationFilter(user_id="customer-1")
        )
        assert record.status == NotificationStatus.FAILED
        assert record.error == "db down"
