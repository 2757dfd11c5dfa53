"""Pharmacy realtime service configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    AwsSettings,
    NotifySettings,
)

# Feature settings
from infrastructure.configuration.features import RealtimeSettings

# Infrastructure settings
from infrastructure.configuration.infrastructure import (
    PersistenceSettings,
    ServerSettings,
)


class Settings(BaseSettings):
    """Service configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: External services (GC Notify, AWS)
    - **Features**: Realtime collaboration behaviour
    - **Infrastructure**: Token verification, CORS, notification storage

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        secret = settings.server.JWT_SECRET
        expiry = settings.realtime.REALTIME_EDITING_SIGNAL_SECONDS

        if settings.is_production:
            # Production-specific logic...
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    aws: AwsSettings
    notify: NotifySettings

    # Feature settings
    realtime: RealtimeSettings

    # Infrastructure settings
    server: ServerSettings
    persistence: PersistenceSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "aws": AwsSettings,
            "notify": NotifySettings,
            # Features
            "realtime": RealtimeSettings,
            # Infrastructure
            "server": ServerSettings,
            "persistence": PersistenceSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)
