"""Realtime collaboration feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class RealtimeSettings(FeatureSettings):
    """WebSocket broadcaster and collaboration configuration.

    Environment Variables:
        REALTIME_EDITING_SIGNAL_SECONDS: Seconds before an editing indicator
            is cleared (default: 2.0)
        REALTIME_CONNECTION_QUEUE_SIZE: Maximum pending events per connection
            before new events are dropped (default: 256)
        REALTIME_TOKEN_QUERY_PARAM: Query parameter carrying the access token
            on the WebSocket handshake (default: token)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        expiry = settings.realtime.REALTIME_EDITING_SIGNAL_SECONDS
        ```
    """

    REALTIME_EDITING_SIGNAL_SECONDS: float = Field(
        default=2.0, alias="REALTIME_EDITING_SIGNAL_SECONDS"
    )
    REALTIME_CONNECTION_QUEUE_SIZE: int = Field(
        default=256, alias="REALTIME_CONNECTION_QUEUE_SIZE"
    )
    REALTIME_TOKEN_QUERY_PARAM: str = Field(
        default="token", alias="REALTIME_TOKEN_QUERY_PARAM"
    )
