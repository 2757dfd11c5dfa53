"""Fixtures for notification infrastructure tests."""

import pytest

from infrastructure.notifications.channels import EmailChannel, SMSChannel, SocketChannel
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.inbox import NotificationInbox
from infrastructure.realtime.broadcaster import Broadcaster
from infrastructure.realtime.registry import ConnectionRegistry


@pytest.fixture
def broadcaster(stores, token_verifier):
    registry = ConnectionRegistry(
        user_store=stores.users,
        token_verifier=token_verifier,
        pharmacy_store=stores.pharmacies,
        order_store=stores.orders,
    )
    broadcaster = Broadcaster(registry)
    broadcaster.start()
    return broadcaster


@pytest.fixture
def dispatcher_factory(stores, broadcaster, sender):
    """Factory for dispatchers over the seeded stores.

    Example:
        dispatcher = dispatcher_factory()
        socket_only = dispatcher_factory(channels=[SocketChannel(broadcaster)])
    """

    def _factory(channels=None, notification_store=None):
        return NotificationDispatcher(
            user_store=stores.users,
            notification_store=notification_store or stores.notifications,
            channels=(
                channels
                if channels is not None
                else [
                    SocketChannel(broadcaster),
                    SMSChannel(sender),
                    EmailChannel(sender),
                ]
            ),
        )

    return _factory


@pytest.fixture
def inbox(stores):
    return NotificationInbox(stores.notifications)
