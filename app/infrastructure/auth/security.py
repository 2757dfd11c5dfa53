"""Access token verification.

Access tokens are HS256 JWTs signed with the shared ``JWT_SECRET``. The
``sub`` claim carries the user id; tenant and role are always read from the
user store so a stale token cannot widen a user's scope.
"""

from typing import Any, Dict, List, Optional

import jwt

from infrastructure.exceptions import AuthError
from infrastructure.logging import get_module_logger

logger = get_module_logger()


class TokenVerifier:
    """Verify access tokens and return their claims.

    Attributes:
        secret: Shared signing secret. A verifier without a secret rejects
            every token.
        algorithms: Accepted signing algorithms.
    """

    def __init__(self, secret: Optional[str], algorithms: Optional[List[str]] = None):
        self.secret = secret
        self.algorithms = algorithms or ["HS256"]

    def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """Decode and validate ``token``.

        Args:
            token: Raw JWT, with or without a ``Bearer`` prefix.

        Returns:
            The verified claims. ``sub`` is guaranteed to be present.

        Raises:
            AuthError: When the token is missing, malformed, expired, signed
                with another key, or the verifier has no secret configured.
        """
        if not self.secret:
            logger.error("token_verification_unconfigured")
            raise AuthError("Token verification is not configured")
        if not token:
            raise AuthError("Missing access token")

        if token.lower().startswith("bearer "):
            token = token[7:].strip()

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("token_expired")
            raise AuthError("Access token expired") from e
        except jwt.PyJWTError as e:
            logger.info("token_invalid", error=str(e))
            raise AuthError("Invalid access token") from e

        return claims
