"""Authentication helpers."""

from infrastructure.auth.security import TokenVerifier

__all__ = ["TokenVerifier"]
