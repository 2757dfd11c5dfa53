"""Fixtures for realtime tests."""

from datetime import datetime, timezone

import pytest

from infrastructure.realtime.broadcaster import Broadcaster
from infrastructure.realtime.registry import ConnectionRegistry


@pytest.fixture
def registry(stores, token_verifier):
    return ConnectionRegistry(
        user_store=stores.users,
        token_verifier=token_verifier,
        pharmacy_store=stores.pharmacies,
        order_store=stores.orders,
        queue_size=8,
    )


@pytest.fixture
def broadcaster(registry):
    """Started broadcaster with deterministic ids and timestamps."""
    ids = iter(f"evt-{n}" for n in range(1000))
    broadcaster = Broadcaster(
        registry,
        id_factory=lambda: next(ids),
        clock=lambda: datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )
    broadcaster.start()
    return broadcaster
