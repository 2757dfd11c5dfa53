"""GC Notify integration settings."""

from typing import Dict

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class NotifySettings(IntegrationSettings):
    """GC Notify API configuration used by the email and SMS channels.

    Template keys are resolved to Notify template ids through
    ``NOTIFY_EMAIL_TEMPLATES`` and ``NOTIFY_SMS_TEMPLATES`` (JSON objects).
    Keys without a mapping fall back to the default template, which receives
    the notification title and message as personalisation.

    Environment Variables:
        NOTIFY_API_URL: GC Notify API endpoint URL
        NOTIFY_CLIENT_ID: Service id used as the JWT issuer
        NOTIFY_CLIENT_SECRET: Service API secret used to sign requests
        NOTIFY_DEFAULT_EMAIL_TEMPLATE_ID: Fallback email template
        NOTIFY_DEFAULT_SMS_TEMPLATE_ID: Fallback SMS template
        NOTIFY_EMAIL_TEMPLATES: JSON mapping of template key to template id
        NOTIFY_SMS_TEMPLATES: JSON mapping of template key to template id
        NOTIFY_TIMEOUT_SECONDS: HTTP timeout per request (default: 30)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        api_url = settings.notify.NOTIFY_API_URL
        ```
    """

    NOTIFY_API_URL: str = Field(
        default="https://api.notification.canada.ca", alias="NOTIFY_API_URL"
    )
    NOTIFY_CLIENT_ID: str | None = Field(default=None, alias="NOTIFY_CLIENT_ID")
    NOTIFY_CLIENT_SECRET: str | None = Field(
        default=None, alias="NOTIFY_CLIENT_SECRET"
    )
    NOTIFY_DEFAULT_EMAIL_TEMPLATE_ID: str | None = Field(
        default=None, alias="NOTIFY_DEFAULT_EMAIL_TEMPLATE_ID"
    )
    NOTIFY_DEFAULT_SMS_TEMPLATE_ID: str | None = Field(
        default=None, alias="NOTIFY_DEFAULT_SMS_TEMPLATE_ID"
    )
    NOTIFY_EMAIL_TEMPLATES: Dict[str, str] = Field(
        default_factory=dict, alias="NOTIFY_EMAIL_TEMPLATES"
    )
    NOTIFY_SMS_TEMPLATES: Dict[str, str] = Field(
        default_factory=dict, alias="NOTIFY_SMS_TEMPLATES"
    )
    NOTIFY_TIMEOUT_SECONDS: int = Field(default=30, alias="NOTIFY_TIMEOUT_SECONDS")

    @property
    def is_configured(self) -> bool:
        """True when both the client id and secret are set."""
        return bool(self.NOTIFY_CLIENT_ID and self.NOTIFY_CLIENT_SECRET)
