"""FastAPI application initialization and configuration module.

This module wires the canonical logging middleware into a FastAPI
application. It handles:
- Logging setup before the application is built
- Canonical logging middleware registration with the Loguru sink
- Health check and information endpoints

Endpoints annotate the request's canonical log through
``clog.core.context``; the middleware emits it once the response is ready.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI
from loguru import logger

from clog.api.middleware.canonical_logging import CanonicalLoggingMiddleware
from clog.core.config import Settings, get_settings
from clog.core.context import add_int, set_string
from clog.core.logging import make_loguru_sink, setup_logging
from clog.core.types import LogFn


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None, log_fn: LogFn | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        log_fn: Optional canonical log sink. Defaults to a Loguru sink at the
            configured canonical log level.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        lifespan=lifespan,
    )

    canonical_log_config = settings.canonical_log_config
    if canonical_log_config.enabled:
        if log_fn is None:
            log_fn = make_loguru_sink(canonical_log_config.log_level)
        application.add_middleware(
            CanonicalLoggingMiddleware,
            log_fn=log_fn,
            config=canonical_log_config,
        )

    @application.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning a hello world message.

        Returns:
            dict[str, str]: A dictionary containing a welcome message.
        """
        set_string("app.greeting", "hello")
        add_int("app.handlers", 1)
        return {"message": f"Hello from {settings.app_name}!"}

    @application.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for monitoring and container orchestration.

        Returns:
            dict[str, str]: A dictionary with the service status.
        """
        return {"status": "healthy"}

    @application.get("/info")
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
    ) -> dict[str, Any]:
        """Get application information.

        Args:
            app_settings: Application settings injected via dependency.

        Returns:
            dict[str, Any]: Application information including name, version,
                and environment.
        """
        set_string("app.environment", app_settings.environment)
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
        }

    return application


app = create_app()
