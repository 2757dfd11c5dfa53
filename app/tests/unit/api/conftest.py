import asyncio

import pytest

from tests.factories.pharmacy import make_record


@pytest.fixture
def seed_notifications(stores):
    """Store records directly, bypassing the dispatcher."""

    def _seed(*records):
        for record in records:
            asyncio.run(stores.notifications.create(record))
        return records

    return _seed


@pytest.fixture
def inbox_records(seed_notifications):
    return seed_notifications(
        make_record(type="ORDER_CONFIRMED"),
        make_record(type="ORDER_CONFIRMED", read=True),
        make_record(type="PRESCRIPTION_READY"),
        make_record(user_id="customer-2", type="ORDER_CONFIRMED"),
    )
