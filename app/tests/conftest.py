"""Shared fixtures: seeded in-memory stores, fake senders and a service graph."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import limiter
from infrastructure.auth.security import TokenVerifier
from infrastructure.configuration import Settings
from infrastructure.configuration.infrastructure import ServerSettings
from infrastructure.persistence.memory import (
    InMemoryInventoryStore,
    InMemoryNotificationStore,
    InMemoryOrderStore,
    InMemoryPharmacyStore,
    InMemoryPrescriptionStore,
    InMemoryUserStore,
)
from infrastructure.persistence.models import UserRole
from infrastructure.services.container import Stores, build_container
from server.server import create_app
from tests.factories.pharmacy import (
    make_inventory_item,
    make_order,
    make_pharmacy,
    make_prescription,
    make_user,
)
from tests.fixtures.clock import ManualClock
from tests.fixtures.senders import RecordingSender
from tests.fixtures.tokens import JWT_SECRET


@pytest.fixture
def seeded_users():
    return [
        make_user(
            id="admin-1",
            role=UserRole.ADMIN,
            name="Ada Admin",
            email="admin@example.com",
        ),
        make_user(
            id="pharmacist-1",
            role=UserRole.PHARMACIST,
            name="Pat Pharmacist",
            email="pharmacist@example.com",
            phone=None,
        ),
        make_user(
            id="pharmacist-2",
            role=UserRole.PHARMACIST,
            name="No Mail",
            email=None,
            phone=None,
        ),
        make_user(
            id="pharmacist-inactive",
            role=UserRole.PHARMACIST,
            name="Gone",
            is_active=False,
        ),
        make_user(
            id="worker-1",
            role=UserRole.WORKER,
            name="Wes Worker",
            email="worker@example.com",
            phone=None,
        ),
        make_user(
            id="customer-1",
            role=UserRole.CUSTOMER,
            pharmacy_id=None,
            name="Cora Customer",
            email="customer@example.com",
        ),
        make_user(
            id="customer-2",
            role=UserRole.CUSTOMER,
            pharmacy_id=None,
            name="Carl Customer",
            email=None,
            phone=None,
        ),
        make_user(
            id="driver-1",
            role=UserRole.DELIVERY,
            pharmacy_id=None,
            name="Dee Driver",
            email=None,
            phone="+16135550123",
        ),
        make_user(
            id="other-pharmacist",
            tenant_id="t-2",
            pharmacy_id="ph-2",
            role=UserRole.PHARMACIST,
            name="Other Tenant",
        ),
    ]


@pytest.fixture
def stores(seeded_users):
    """In-memory stores seeded with two tenants.

    Tenant ``t-1`` owns pharmacy ``ph-1``, order ``o-1`` (customer-1,
    driver-1), prescription ``rx-1`` and item ``item-1``. Tenant ``t-2``
    owns ``ph-2``, ``o-2`` and ``item-2``.
    """
    return Stores(
        users=InMemoryUserStore(seeded_users),
        pharmacies=InMemoryPharmacyStore(
            [make_pharmacy(), make_pharmacy(id="ph-2", tenant_id="t-2", name="Other")]
        ),
        orders=InMemoryOrderStore(
            [
                make_order(delivery_user_id="driver-1"),
                make_order(
                    id="o-2",
                    tenant_id="t-2",
                    pharmacy_id="ph-2",
                    customer_id="other-customer",
                ),
            ]
        ),
        prescriptions=InMemoryPrescriptionStore([make_prescription()]),
        inventory=InMemoryInventoryStore(
            [
                make_inventory_item(),
                make_inventory_item(id="item-2", tenant_id="t-2", pharmacy_id="ph-2"),
            ]
        ),
        notifications=InMemoryNotificationStore(),
    )


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def settings():
    return Settings(PREFIX="test-", server=ServerSettings(JWT_SECRET=JWT_SECRET))


@pytest.fixture
def token_verifier():
    return TokenVerifier(JWT_SECRET)


@pytest.fixture
def issue_token():
    """Factory for signed access tokens.

    Example:
        token = issue_token("customer-1")
        expired = issue_token("customer-1", expires_in=-60)
    """

    def _factory(sub="customer-1", expires_in=3600, secret=JWT_SECRET, **claims):
        payload = {
            "sub": sub,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            **claims,
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    return _factory


@pytest.fixture
def services(settings, stores, token_verifier, sender, manual_clock):
    """Started service container over the seeded stores and virtual time."""
    container = build_container(
        settings,
        stores=stores,
        token_verifier=token_verifier,
        email_sender=sender,
        sms_sender=sender,
        clock=manual_clock,
    )
    container.start()
    return container


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def client(services):
    """TestClient over the seeded container; runs the application lifespan."""
    with TestClient(create_app(services)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(issue_token):
    def _headers(user_id="customer-1"):
        return {"Authorization": f"Bearer {issue_token(user_id)}"}

    return _headers
