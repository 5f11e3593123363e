"""Command line entrypoint that serves the API with uvicorn."""

import logging
import sys

import uvicorn
from pydantic import ValidationError

from recipe_finder.api.app import create_app
from recipe_finder.app_logging import configure_logging
from recipe_finder.config import Settings
from recipe_finder.containers import build_container

logger = logging.getLogger(__name__)


def load_settings() -> Settings:
    """Load settings, exiting the process when required values are missing."""
    try:
        return Settings()
    except ValidationError as exc:
        missing = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in exc.errors()
        )
        logger.error(  # noqa: TRY400
            "Invalid configuration, check environment: %s", missing
        )
        sys.exit(1)


def main() -> None:
    """Start the API server."""
    configure_logging()
    settings = load_settings()
    app = create_app(build_container(settings))
    logger.info("Backend listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
