"""Main entry point for running the clog FastAPI application."""

import os

import uvicorn
from loguru import logger

from clog.api.main import app
from clog.core.config import get_settings
from clog.core.logging import setup_logging


def main() -> None:
    """Main entry point for the clog application."""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    # PORT from the environment overrides the configured port
    port = int(os.environ.get("PORT", settings.api_port))

    # Route uvicorn's stdlib loggers through Loguru
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {
                "class": "clog.core.logging.InterceptHandler",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }

    # When reload is enabled, we must pass the app as an import string
    if settings.debug:
        logger.info(
            f"Starting Uvicorn on http://{settings.api_host}:{port} "
            "(development mode with auto-reload)"
        )
        uvicorn.run(
            "clog.api.main:app",
            host=settings.api_host,
            port=port,
            reload=True,
            log_config=log_config,
        )
    else:
        logger.info(
            f"Starting Uvicorn on http://{settings.api_host}:{port} (production mode)"
        )
        uvicorn.run(
            app,
            host=settings.api_host,
            port=port,
            reload=False,
            log_config=log_config,
        )


if __name__ == "__main__":
    main()
