"""GC Notify client.

Sends template emails and SMS through the GC Notify REST API. Template
keys (the notification type, e.g. ``ORDER_CONFIRMED``) are mapped to Notify
template ids from settings; keys without a mapping use the default template
of the channel.

Calls never raise for delivery problems. They return an OperationResult
so the notification dispatcher can record per-channel outcomes.
"""

import asyncio
import calendar
import json
import time
from typing import TYPE_CHECKING, Any, Dict, Optional

import jwt
import requests

from infrastructure.logging import get_module_logger
from infrastructure.operations import (
    OperationResult,
    classify_http_response,
    classify_request_exception,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = get_module_logger()

EMAIL_ENDPOINT = "/v2/notifications/email"
SMS_ENDPOINT = "/v2/notifications/sms"


# generate the epoch seconds for the jwt token
def epoch_seconds():
    return calendar.timegm(time.gmtime())


def create_jwt_token(secret, client_id):
    """
    Generate a JWT Token for the Notify API

    Tokens have a header consisting of:
    {
        "typ": "JWT",
        "alg": "HS256"
    }

    Claims are:
    iss: identifier for the client (service id)
    iat: epoch seconds for the token (UTC)

    Returns a JWT token for this request
    """
    if not secret:
        raise ValueError("Missing secret key")
    if not client_id:
        raise ValueError("Missing client id")

    headers = {"typ": "JWT", "alg": "HS256"}
    claims = {"iss": client_id, "iat": epoch_seconds()}
    return jwt.encode(payload=claims, key=secret, headers=headers)


def _personalisation(variables: Dict[str, Any]) -> Dict[str, str]:
    # Notify placeholders are plain text
    values = {}
    for key, value in variables.items():
        if value is None:
            values[key] = ""
        elif isinstance(value, (dict, list)):
            values[key] = json.dumps(value, default=str)
        else:
            values[key] = str(value)
    return values


class NotifyClient:
    """GC Notify email and SMS sender.

    Attributes:
        api_url: Notify API base URL
        client_id: Service id (JWT issuer)
        secret: Service API secret
        email_templates: Template key to email template id
        sms_templates: Template key to SMS template id
        default_email_template: Template used for unmapped email keys
        default_sms_template: Template used for unmapped SMS keys
        timeout: HTTP timeout in seconds
    """

    def __init__(
        self,
        api_url: str,
        client_id: Optional[str],
        secret: Optional[str],
        email_templates: Optional[Dict[str, str]] = None,
        sms_templates: Optional[Dict[str, str]] = None,
        default_email_template: Optional[str] = None,
        default_sms_template: Optional[str] = None,
        timeout: int = 30,
    ):
        self.api_url = api_url.rstrip("/")
        self.client_id = client_id
        self.secret = secret
        self.email_templates = email_templates or {}
        self.sms_templates = sms_templates or {}
        self.default_email_template = default_email_template
        self.default_sms_template = default_sms_template
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: "Settings") -> "NotifyClient":
        notify = settings.notify
        return cls(
            api_url=notify.NOTIFY_API_URL,
            client_id=notify.NOTIFY_CLIENT_ID,
            secret=notify.NOTIFY_CLIENT_SECRET,
            email_templates=notify.NOTIFY_EMAIL_TEMPLATES,
            sms_templates=notify.NOTIFY_SMS_TEMPLATES,
            default_email_template=notify.NOTIFY_DEFAULT_EMAIL_TEMPLATE_ID,
            default_sms_template=notify.NOTIFY_DEFAULT_SMS_TEMPLATE_ID,
            timeout=notify.NOTIFY_TIMEOUT_SECONDS,
        )

    def create_authorization_header(self) -> Dict[str, str]:
        token = create_jwt_token(secret=self.secret, client_id=self.client_id)
        return {
            "Authorization": "Bearer {}".format(token),
            "Content-Type": "application/json",
        }

    @staticmethod
    def _resolve_template(
        template_key: str, templates: Dict[str, str], default: Optional[str]
    ) -> Optional[str]:
        return templates.get(template_key) or templates.get(template_key.lower()) or default

    def post_notification(self, endpoint: str, payload: Dict[str, Any]) -> OperationResult:
        """Blocking POST to Notify. A successful response has status 201."""
        if not (self.client_id and self.secret):
            logger.error("notify_not_configured", endpoint=endpoint)
            return OperationResult.permanent_error(
                "GC Notify credentials are missing", error_code="NOTIFY_NOT_CONFIGURED"
            )

        try:
            response = requests.post(
                self.api_url + endpoint,
                data=json.dumps(payload),
                headers=self.create_authorization_header(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("notify_request_failed", endpoint=endpoint, error=str(e))
            return classify_request_exception(e)

        if response.status_code == 201:
            body = response.json() if response.content else {}
            return OperationResult.success(
                data={"notification_id": body.get("id")}, message="sent"
            )

        logger.error(
            "notify_request_rejected",
            endpoint=endpoint,
            response_code=response.status_code,
        )
        return classify_http_response(response, provider="GC Notify")

    async def send_email(
        self, to: str, template_key: str, variables: Dict[str, Any]
    ) -> OperationResult:
        template_id = self._resolve_template(
            template_key, self.email_templates, self.default_email_template
        )
        if template_id is None:
            return OperationResult.permanent_error(
                f"No email template for {template_key}", error_code="TEMPLATE_NOT_FOUND"
            )
        payload = {
            "email_address": to,
            "template_id": template_id,
            "personalisation": _personalisation(variables),
        }
        return await asyncio.to_thread(self.post_notification, EMAIL_ENDPOINT, payload)

    async def send_sms(
        self, to: str, template_key: str, variables: Dict[str, Any]
    ) -> OperationResult:
        template_id = self._resolve_template(
            template_key, self.sms_templates, self.default_sms_template
        )
        if template_id is None:
            return OperationResult.permanent_error(
                f"No SMS template for {template_key}", error_code="TEMPLATE_NOT_FOUND"
            )
        payload = {
            "phone_number": to,
            "template_id": template_id,
            "personalisation": _personalisation(variables),
        }
        return await asyncio.to_thread(self.post_notification, SMS_ENDPOINT, payload)
