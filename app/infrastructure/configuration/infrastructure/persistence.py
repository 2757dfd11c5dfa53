"""Notification store settings."""

from typing import Literal

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class PersistenceSettings(InfrastructureSettings):
    """Notification store configuration.

    Environment Variables:
        NOTIFICATION_STORE_BACKEND: ``memory`` or ``dynamodb`` (default: memory)
        NOTIFICATIONS_TABLE: DynamoDB table holding notification records
        DYNAMODB_ENDPOINT_URL: Optional endpoint override (local DynamoDB)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        if settings.persistence.NOTIFICATION_STORE_BACKEND == "dynamodb":
            table = settings.persistence.NOTIFICATIONS_TABLE
        ```
    """

    NOTIFICATION_STORE_BACKEND: Literal["memory", "dynamodb"] = Field(
        default="memory", alias="NOTIFICATION_STORE_BACKEND"
    )
    NOTIFICATIONS_TABLE: str = Field(
        default="pharmacy_notifications", alias="NOTIFICATIONS_TABLE"
    )
    DYNAMODB_ENDPOINT_URL: str | None = Field(
        default=None, alias="DYNAMODB_ENDPOINT_URL"
    )
