"""Command-line entrypoint that serves the emulator with uvicorn."""

import logging

import uvicorn

from pylon_emulator.api.app import create_app
from pylon_emulator.app_logging import configure_logging
from pylon_emulator.config import Settings
from pylon_emulator.containers import build_container

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the emulator on the configured host and port."""
    settings = Settings()
    configure_logging()
    app = create_app(build_container(settings))
    logger.info("Pylon emulator starting on http://%s:%s", settings.host, settings.port)
    logger.info("Fake wallet: %s/scan/<id>", settings.public_base_url.rstrip("/"))
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
