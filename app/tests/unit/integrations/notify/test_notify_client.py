"""Unit tests for the GC Notify client."""

import json
from unittest.mock import MagicMock, patch

import jwt
import pytest
import requests

from infrastructure.configuration import Settings
from infrastructure.configuration.integrations import NotifySettings
from infrastructure.operations import OperationStatus
from integrations.notify.client import (
    EMAIL_ENDPOINT,
    SMS_ENDPOINT,
    NotifyClient,
    create_jwt_token,
)


@pytest.fixture
def client():
    return NotifyClient(
        api_url="https://api.notification.canada.ca/",
        client_id="service-id",
        secret="service-secret",
        email_templates={"ORDER_CONFIRMED": "tmpl-email-order"},
        sms_templates={"order_confirmed": "tmpl-sms-order"},
        default_email_template="tmpl-email-default",
        timeout=5,
    )


def _response(status_code, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if body is not None else b""
    response.json.return_value = body or {}
    response.headers = {}
    response.text = ""
    return response


@pytest.mark.unit
class TestCreateJwtToken:
    def test_claims(self):
        token = create_jwt_token("service-secret", "service-id")

        claims = jwt.decode(token, "service-secret", algorithms=["HS256"])
        assert claims["iss"] == "service-id"
        assert isinstance(claims["iat"], int)

    @pytest.mark.parametrize("secret,client_id", [("", "id"), ("secret", None)])
    def test_missing_values(self, secret, client_id):
        with pytest.raises(ValueError):
            create_jwt_token(secret, client_id)


@pytest.mark.unit
class TestSendEmail:
    @pytest.mark.asyncio
    @patch("integrations.notify.client.requests.post")
    async def test_posts_mapped_template(self, mock_post, client):
        mock_post.return_value = _response(201, {"id": "notify-1"})

        result = await client.send_email(
            "customer@example.com",
            "ORDER_CONFIRMED",
            {"orderId": "o-1", "total": 42.5, "items": [1], "note": None},
        )

        assert result.is_success
        assert result.data == {"notification_id": "notify-1"}
        url = mock_post.call_args.args[0]
        kwargs = mock_post.call_args.kwargs
        assert url == "https://api.notification.canada.ca" + EMAIL_ENDPOINT
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["Authorization"].startswith("Bearer ")
        assert json.loads(kwargs["data"]) == {
            "email_address": "customer@example.com",
            "template_id": "tmpl-email-order",
            "personalisation": {
                "orderId": "o-1",
                "total": "42.5",
                "items": "[1]",
                "note": "",
            },
        }

    @pytest.mark.asyncio
    @patch("integrations.notify.client.requests.post")
    async def test_unmapped_key_uses_default(self, mock_post, client):
        mock_post.return_value = _response(201, {"id": "notify-2"})

        await client.send_email("a@example.com", "INVENTORY_LOW_STOCK", {})

        payload = json.loads(mock_post.call_args.kwargs["data"])
        assert payload["template_id"] == "tmpl-email-default"

    @pytest.mark.asyncio
    @patch("integrations.notify.client.requests.post")
    async def test_rejected_response_is_classified(self, mock_post, client):
        mock_post.return_value = _response(500)

        result = await client.send_email("a@example.com", "ORDER_CONFIRMED", {})

        assert result.status == OperationStatus.TRANSIENT_ERROR

    @pytest.mark.asyncio
    @patch("integrations.notify.client.requests.post")
    async def test_timeout_is_transient(self, mock_post, client):
        mock_post.side_effect = requests.Timeout("slow")

        result = await client.send_email("a@example.com", "ORDER_CONFIRMED", {})

        assert result.error_code == "TIMEOUT"

    @pytest.mark.asyncio
    @patch("integrations.notify.client.requests.post")
    async def test_missing_credentials(self, mock_post):
        client = NotifyClient(
            api_url="https://notify",
            client_id=None,
            secret=None,
            default_email_template="tmpl",
        )

        result = await client.send_email("a@example.com", "ORDER_CONFIRMED", {})

        assert result.error_code == "NOTIFY_NOT_CONFIGURED"
        mock_post.assert_not_called()


@pytest.mark.unit
class TestSendSms:
    @pytest.mark.asyncio
    @patch("integrations.notify.client.requests.post")
    async def test_lowercase_template_key(self, mock_post, client):
        mock_post.return_value = _response(201, {"id": "notify-3"})

        result = await client.send_sms("+16135550100", "ORDER_CONFIRMED", {"message": "hi"})

        assert result.is_success
        assert mock_post.call_args.args[0].endswith(SMS_ENDPOINT)
        payload = json.loads(mock_post.call_args.kwargs["data"])
        assert payload["phone_number"] == "+16135550100"
        assert payload["template_id"] == "tmpl-sms-order"

    @pytest.mark.asyncio
    @patch("integrations.notify.client.requests.post")
    async def test_no_template_is_permanent(self, mock_post, client):
        result = await client.send_sms("+16135550100", "DELIVERY_FAILED", {})

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "TEMPLATE_NOT_FOUND"
        mock_post.assert_not_called()


@pytest.mark.unit
def test_from_settings():
    settings = Settings(
        notify=NotifySettings(
            NOTIFY_API_URL="https://notify.example",
            NOTIFY_CLIENT_ID="id",
            NOTIFY_CLIENT_SECRET="secret",
            NOTIFY_TIMEOUT_SECONDS=7,
        )
    )

    client = NotifyClient.from_settings(settings)

    assert client.api_url == "https://notify.example"
    assert client.timeout == 7
