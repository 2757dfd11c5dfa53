import pytest

from infrastructure.realtime.models import ConnectionContext


@pytest.fixture
def users(seeded_users):
    return {user.id: user for user in seeded_users}


@pytest.fixture
def watch(services):
    """Admit a connection for ``user_id`` and join it to ``room``."""

    async def _watch(room, user_id="pharmacist-1", tenant_id="t-1", role="PHARMACIST"):
        connection = services.registry.admit(
            ConnectionContext(user_id=user_id, tenant_id=tenant_id, role=role)
        )
        assert await services.registry.subscribe(connection, room)
        return connection

    return _watch
