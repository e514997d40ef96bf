"""Process entry point: ``signups-api`` / ``python -m signups.server``."""
from __future__ import annotations

import sys

import uvicorn

from .config import get_settings
from .logging_config import install_process_hooks, logger, setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    install_process_hooks()
    if not settings.database_url:
        logger.critical("app.start_failed", reason="DATABASE_URL is not set")
        sys.exit(1)
    uvicorn.run("signups.app:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":  # pragma: no cover
    main()
