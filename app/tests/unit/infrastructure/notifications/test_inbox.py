"""Unit tests for the user-scoped notification inbox."""

from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.exceptions import NotificationNotFound
from infrastructure.notifications.models import NotificationPriority
from tests.factories.pharmacy import make_record

NOW = datetime.now(timezone.utc)


async def _seed(store, *records):
    for record in records:
        await store.create(record)
    return records


@pytest.mark.unit
class TestListing:
    @pytest.mark.asyncio
    async def test_newest_first_with_pagination(self, stores, inbox):
        await _seed(
            stores.notifications,
            *[
                make_record(type=f"T{n}", created_at=NOW - timedelta(minutes=n))
                for n in range(5)
            ],
        )

        page = await inbox.get_user_notifications("customer-1", page=2, limit=2)

        assert [r.type for r in page.notifications] == ["T2", "T3"]
        assert page.pagination.model_dump() == {
            "page": 2,
            "limit": 2,
            "total": 5,
            "pages": 3,
            "unread": 5,
        }

    @pytest.mark.asyncio
    async def test_unread_count_ignores_filters(self, stores, inbox):
        await _seed(
            stores.notifications,
            make_record(type="ORDER_READY"),
            make_record(type="ORDER_READY", read=True),
            make_record(type="PRESCRIPTION_READY"),
        )

        page = await inbox.get_user_notifications("customer-1", type="ORDER_READY")

        assert page.pagination.total == 2
        assert page.pagination.unread == 2

    @pytest.mark.asyncio
    async def test_filters(self, stores, inbox):
        await _seed(
            stores.notifications,
            make_record(priority=NotificationPriority.HIGH, pharmacy_id="ph-1"),
            make_record(priority=NotificationPriority.LOW, pharmacy_id="ph-9"),
            make_record(created_at=NOW - timedelta(days=10)),
        )

        high = await inbox.get_user_notifications(
            "customer-1", priority=NotificationPriority.HIGH
        )
        other_pharmacy = await inbox.get_user_notifications(
            "customer-1", pharmacy_id="ph-9"
        )
        recent = await inbox.get_user_notifications(
            "customer-1", start_date=NOW - timedelta(days=1)
        )

        assert high.pagination.total == 1
        assert other_pharmacy.pagination.total == 1
        assert recent.pagination.total == 2

    @pytest.mark.asyncio
    async def test_other_users_are_invisible(self, stores, inbox):
        await _seed(stores.notifications, make_record(user_id="admin-1"))

        page = await inbox.get_user_notifications("customer-1")

        assert page.notifications == []
        assert page.pagination.pages == 0

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, inbox):
        page = await inbox.get_user_notifications("customer-1", limit=1000, page=0)

        assert page.pagination.limit == 100
        assert page.pagination.page == 1


@pytest.mark.unit
class TestLookup:
    @pytest.mark.asyncio
    async def test_get_notification(self, stores, inbox):
        [record] = await _seed(stores.notifications, make_record())

        found = await inbox.get_notification("customer-1", record.id)

        assert found.id == record.id

    @pytest.mark.asyncio
    async def test_cross_user_lookup_raises(self, stores, inbox):
        [record] = await _seed(stores.notifications, make_record(user_id="admin-1"))

        with pytest.raises(NotificationNotFound):
            await inbox.get_notification("customer-1", record.id)

    @pytest.mark.asyncio
    async def test_unread_count(self, stores, inbox):
        await _seed(
            stores.notifications,
            make_record(type="ORDER_READY"),
            make_record(type="ORDER_READY", read=True),
            make_record(type="INVENTORY_LOW_STOCK", pharmacy_id="ph-2"),
        )

        assert await inbox.get_unread_count("customer-1") == 2
        assert await inbox.get_unread_count("customer-1", pharmacy_id="ph-2") == 1
        assert await inbox.get_unread_count("customer-1", type="ORDER_READY") == 1

    @pytest.mark.asyncio
    async def test_stats(self, stores, inbox):
        await _seed(
            stores.notifications,
            make_record(type="ORDER_READY", priority=NotificationPriority.HIGH),
            make_record(type="ORDER_READY", read=True),
            make_record(type="PRESCRIPTION_READY"),
            make_record(type="OLD", created_at=NOW - timedelta(days=45)),
        )

        stats = await inbox.get_notification_stats("customer-1", days=30)

        assert stats.total == 3
        assert stats.unread == 2
        assert stats.read == 1
        assert stats.unread_percentage == 66.67
        assert stats.by_type == {"ORDER_READY": 2, "PRESCRIPTION_READY": 1}
        assert stats.by_priority == {"high": 1, "normal": 2}

    @pytest.mark.asyncio
    async def test_stats_without_notifications(self, inbox):
        stats = await inbox.get_notification_stats("customer-1")

        assert stats.total == 0
        assert stats.unread_percentage == 0.0

    @pytest.mark.asyncio
    async def test_notification_types_by_frequency(self, stores, inbox):
        await _seed(
            stores.notifications,
            make_record(type="A"),
            make_record(type="B"),
            make_record(type="B"),
        )

        assert await inbox.get_notification_types("customer-1") == {"B": 2, "A": 1}


@pytest.mark.unit
class TestReadState:
    @pytest.mark.asyncio
    async def test_mark_as_read(self, stores, inbox):
        [record] = await _seed(stores.notifications, make_record())

        updated = await inbox.mark_as_read("customer-1", record.id)

        assert updated.read is True
        assert updated.read_at is not None

    @pytest.mark.asyncio
    async def test_mark_as_read_twice_keeps_first_read_at(self, stores, inbox):
        [record] = await _seed(stores.notifications, make_record())

        first = await inbox.mark_as_read("customer-1", record.id)
        second = await inbox.mark_as_read("customer-1", record.id)

        assert second.read is True
        assert second.read_at == first.read_at

    @pytest.mark.asyncio
    async def test_mark_as_read_other_user_raises(self, stores, inbox):
        [record] = await _seed(stores.notifications, make_record(user_id="admin-1"))

        with pytest.raises(NotificationNotFound):
            await inbox.mark_as_read("customer-1", record.id)

        untouched = await inbox.get_notification("admin-1", record.id)
        assert untouched.read is False

    @pytest.mark.asyncio
    async def test_mark_all_touches_only_unread(self, stores, inbox):
        earlier = NOW - timedelta(hours=1)
        [_, already_read, _] = await _seed(
            stores.notifications,
            make_record(),
            make_record(read=True, read_at=earlier),
            make_record(),
        )

        assert await inbox.mark_all_as_read("customer-1") == 2
        assert await inbox.mark_all_as_read("customer-1") == 0
        kept = await inbox.get_notification("customer-1", already_read.id)
        assert kept.read_at == earlier

    @pytest.mark.asyncio
    async def test_mark_all_by_type(self, stores, inbox):
        await _seed(
            stores.notifications,
            make_record(type="ORDER_READY"),
            make_record(type="INVENTORY_LOW_STOCK"),
        )

        assert await inbox.mark_all_as_read("customer-1", type="ORDER_READY") == 1
        assert await inbox.get_unread_count("customer-1") == 1


@pytest.mark.unit
class TestDeletion:
    @pytest.mark.asyncio
    async def test_delete_notification(self, stores, inbox):
        [record] = await _seed(stores.notifications, make_record())

        await inbox.delete_notification("customer-1", record.id)

        with pytest.raises(NotificationNotFound):
            await inbox.get_notification("customer-1", record.id)

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, inbox):
        with pytest.raises(NotificationNotFound):
            await inbox.delete_notification("customer-1", "missing")

    @pytest.mark.asyncio
    async def test_clear_read_notifications(self, stores, inbox):
        await _seed(
            stores.notifications,
            make_record(read=True),
            make_record(),
            make_record(user_id="admin-1", read=True),
        )

        assert await inbox.clear_notifications("customer-1", read=True) == 1
        assert await inbox.get_unread_count("customer-1") == 1
        assert await inbox.get_unread_count("admin-1") == 0
        assert (await inbox.get_user_notifications("admin-1")).pagination.total == 1
