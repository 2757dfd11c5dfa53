"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure
services.
"""

from functools import lru_cache

from infrastructure.auth.security import TokenVerifier
from infrastructure.configuration import Settings
from integrations.notify.client import NotifyClient


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep

        @router.get("/version")
        def get_version(settings: SettingsDep):
            return {"version": settings.GIT_SHA}

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_token_verifier() -> TokenVerifier:
    """Get the access token verifier configured from ``settings.server``."""
    settings = get_settings()
    return TokenVerifier(
        secret=settings.server.JWT_SECRET,
        algorithms=[settings.server.JWT_ALGORITHM],
    )


@lru_cache
def get_notify_client() -> NotifyClient:
    """Get the GC Notify client used by the email and SMS channels."""
    return NotifyClient.from_settings(get_settings())
