"""
Dependency injection services.

Provides the service container, provider functions and type aliases for
FastAPI dependency injection.
"""

from infrastructure.services.providers import (
    get_notify_client,
    get_settings,
    get_token_verifier,
)

__all__ = [
    "get_notify_client",
    "get_settings",
    "get_token_verifier",
]
