from contextlib import asynccontextmanager
from typing import AsyncIterator, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import get_settings
from infrastructure.services.container import ServiceContainer, build_container

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build (or reuse) the service container and run the realtime layer.

    A container placed on ``app.state.services`` before startup is used as
    is, which is how tests inject stores and senders.
    """
    services: ServiceContainer | None = getattr(app.state, "services", None)
    settings = services.settings if services is not None else get_settings()
    logger = configure_logging(settings=settings)

    if services is None:
        services = build_container(settings)

    app.state.settings = settings
    app.state.services = services

    logger.info("application_startup")
    _list_configs(settings, logger)

    services.start()

    yield

    logger.info("application_shutdown")
    await services.close()
