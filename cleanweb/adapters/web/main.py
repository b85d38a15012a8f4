# cleanweb/adapters/web/main.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable, Optional, Type

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from cleanweb import __version__
from cleanweb.adapters.web.components import (
    ComponentEndpoints,
    ComponentRegistry,
    ComponentRenderer,
    RenderMode,
)
from cleanweb.adapters.web.components.base import Component
from cleanweb.adapters.web.components.pages import DEFAULT_PAGES, NotFound
from cleanweb.adapters.web.errors import PipelineConfigurationError
from cleanweb.adapters.web.pipeline import build_pipeline
from cleanweb.adapters.web.routers import health, products
from cleanweb.core.domain.exceptions import (
    DomainError,
    DuplicateProductError,
    InvalidProductError,
    ProductNotFoundError,
)
from cleanweb.shared.config import Settings, settings as default_settings
from cleanweb.shared.container import Container
from cleanweb.shared.telemetry import instrument_fastapi, setup_telemetry

logger = structlog.get_logger()

_DOMAIN_STATUS = (
    (ProductNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateProductError, status.HTTP_409_CONFLICT),
    (InvalidProductError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application Lifecycle Manager.
    Handles startup (telemetry) and shutdown (open circuits).
    """
    settings: Settings = app.state.settings
    setup_telemetry(settings)
    logger.info("app_startup", app=settings.APP_NAME, env=settings.APP_ENV.value)

    yield

    dropped = app.state.container.circuit_registry().close_all()
    logger.info("app_shutdown", dropped_circuits=dropped)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        """
        Maps domain errors raised by API routes to the standard error envelope.
        """
        code = status.HTTP_400_BAD_REQUEST
        for error_type, mapped in _DOMAIN_STATUS:
            if isinstance(exc, error_type):
                code = mapped
                break
        return JSONResponse(
            status_code=code,
            content={"status": "error", "code": code, "message": exc.message},
        )


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[Container] = None,
    pages: Iterable[Type[Component]] = DEFAULT_PAGES,
) -> FastAPI:
    """
    Factory function to create the FastAPI application.

    1. Registers services (DI container, component registry, renderer).
    2. Builds the ordered middleware pipeline for the environment.
    3. Mounts API routers, then the component endpoints in server-interactive mode.

    Raises:
        PipelineConfigurationError: a pipeline stage could not be built, or
            ERROR_PATH does not route to a component.
    """
    settings = settings or default_settings
    container = container or Container()
    container.settings.override(settings)

    # 1. Services
    registry = ComponentRegistry(tuple(pages), not_found=NotFound)
    renderer = ComponentRenderer(registry, container, settings, render_mode=RenderMode.SERVER)
    circuits = container.circuit_registry()

    # 2. Pipeline
    pipeline = build_pipeline(settings)
    if "exception_handler" in pipeline.names and registry.match(settings.ERROR_PATH) is None:
        raise PipelineConfigurationError(
            "exception_handler",
            f"ERROR_PATH '{settings.ERROR_PATH}' does not match any component route",
        )

    app = FastAPI(
        title=settings.APP_NAME,
        version=__version__,
        description="Clean Architecture web host",
        lifespan=lifespan,
        middleware=pipeline.middleware,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )
    app.state.settings = settings
    app.state.container = container
    app.state.pipeline = pipeline
    app.state.components = registry
    app.state.renderer = renderer

    instrument_fastapi(app, settings)
    _register_exception_handlers(app)

    # 3. Endpoints (the component catch-all must come last)
    app.include_router(health.router)
    app.include_router(products.router)
    endpoints = ComponentEndpoints(renderer, circuits, settings.INTERACTIVE_ENDPOINT)
    app.include_router(endpoints.router())

    return app
