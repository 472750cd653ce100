"""
Logging setup for the application.
"""

import logging

from app.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure the root logger from settings (or an explicit level)."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    # Engine debug output (fallbacks taken, schedules built) in debug mode
    logging.getLogger("app").setLevel(logging.DEBUG if settings.debug else log_level)
