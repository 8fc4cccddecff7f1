"""Logging setup for the marketplace API and its background sweep."""
import logging
import sys
from typing import Optional

from app.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Client libraries that log every request at INFO
QUIET_LOGGERS = ("apscheduler", "stripe", "httpx")


def setup_logging(level: Optional[str] = None) -> None:
    """
    Route application logs to stdout.

    ``level`` overrides ``settings.LOG_LEVEL``. SQL statements are only
    logged when ``DATABASE_ECHO`` is on; checkout and sweep messages from
    ``app.services`` follow the chosen level.
    """
    log_level = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in ("uvicorn", "uvicorn.access", "app"):
        logging.getLogger(name).setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DATABASE_ECHO else logging.WARNING
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
