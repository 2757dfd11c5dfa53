"""Bearer token authentication for REST routes."""

from typing import Annotated, Optional

import structlog
from fastapi import Depends, Request

from infrastructure.exceptions import AuthError
from infrastructure.persistence.models import UserProfile
from infrastructure.services.dependencies import ServicesDep


def get_bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("authorization")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(request: Request, services: ServicesDep) -> UserProfile:
    """
    Resolve the authenticated user from the ``Authorization: Bearer`` header.

    Raises:
        AuthError: If the token is missing or invalid, or the user is
            unknown or inactive. Mapped to a 401 response.
    """
    claims = services.token_verifier.verify(get_bearer_token(request))
    user = await services.stores.users.find_user_by_id(str(claims["sub"]))
    if user is None or not user.is_active:
        raise AuthError("User not found or inactive")

    structlog.contextvars.bind_contextvars(user_id=user.id, tenant_id=user.tenant_id)
    return user


CurrentUserDep = Annotated[UserProfile, Depends(get_current_user)]
