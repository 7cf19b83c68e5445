"""Logging setup for the API process."""

import logging
import sys

from defyshield.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: Settings) -> None:
    """Configure stdout logging for the application loggers.

    Development runs log at DEBUG; other environments use ``settings.log_level``.
    Existing root handlers (e.g. installed by a test runner) are left alone.
    """
    level = logging.DEBUG if settings.app_env == "development" else settings.log_level

    logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, stream=sys.stdout)
    logging.getLogger("defyshield").setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
