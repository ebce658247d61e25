"""FastAPI application factory."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from .api import health_router
from .bootstrap import ServiceContainer, bootstrap_libraries
from .logging_config import configure_logging
from .settings import Settings, get_settings
from runtimelibs.modules.libraries import libraries_router


def create_app(settings: Optional[Settings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    services = container or ServiceContainer(settings)
    # libraries are activated before any route can run
    bootstrap_libraries(services)

    app = FastAPI(title=settings.app_name, version=settings.version)
    app.include_router(health_router)
    app.include_router(libraries_router)
    app.state.container = services

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        services.artifact_cache.close()

    return app
