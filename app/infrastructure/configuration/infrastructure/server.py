"""Server infrastructure settings."""

from typing import List

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """Server and application runtime configuration.

    Environment Variables:
        BACKEND_URL: Backend API base URL (default: http://127.0.0.1:8000)
        JWT_SECRET: Shared secret used to verify HS256 access tokens
        JWT_ALGORITHM: Accepted signing algorithm (default: HS256)
        CORS_ALLOW_ORIGINS: Comma separated list of allowed origins

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        secret = settings.server.JWT_SECRET
        origins = settings.server.cors_origins
        ```
    """

    BACKEND_URL: str = Field(default="http://127.0.0.1:8000", alias="BACKEND_URL")
    JWT_SECRET: str | None = Field(default=None, alias="JWT_SECRET")
    JWT_ALGORITHM: str = Field(default="HS256", alias="JWT_ALGORITHM")
    CORS_ALLOW_ORIGINS: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        alias="CORS_ALLOW_ORIGINS",
    )

    @property
    def cors_origins(self) -> List[str]:
        """Allowed CORS origins as a list."""
        return [
            origin.strip()
            for origin in self.CORS_ALLOW_ORIGINS.split(",")
            if origin.strip()
        ]
