from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.services.dependencies import ServicesDep, SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()


# The load balancer polls these every few seconds, hence the generous limit.
@router.get("/version")
@limiter.limit("50/minute")
def get_version(request: Request, settings: SettingsDep):  # pylint: disable=unused-argument
    """Get the version of the application."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit("50/minute")
def get_health(request: Request, services: ServicesDep):  # pylint: disable=unused-argument
    """Healthcheck endpoint."""
    return {
        "status": "ok" if services.broadcaster.is_active else "starting",
        "connections": services.registry.connection_count,
    }
