from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies.rate_limits import setup_rate_limiter
from api.dependencies.errors import setup_exception_handlers
from api.router import api_router
from infrastructure.logging import bind_request_context, get_correlation_id
from infrastructure.services import get_settings
from infrastructure.services.container import ServiceContainer
from server.lifespan import lifespan
from server.websocket import router as websocket_router

CORRELATION_HEADER = "X-Correlation-ID"


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        services: Prebuilt service container. Built by the lifespan from the
            environment when omitted.
    """
    settings = services.settings if services is not None else get_settings()

    app = FastAPI(title="Pharmacy Realtime", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    setup_rate_limiter(app)
    setup_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        with bind_request_context(
            correlation_id=request.headers.get(CORRELATION_HEADER),
            request_path=request.url.path,
            request_method=request.method,
        ):
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = get_correlation_id() or ""
            return response

    app.include_router(api_router)
    app.include_router(websocket_router)
    return app


handler = create_app()
