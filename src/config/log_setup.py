"""
Incredicer - Logging Configuration

Root logger setup driven by Settings. Modules log through
``logging.getLogger(__name__)`` and never configure handlers themselves.
"""

import logging

from src.config.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> int:
    """Configure the root logger and return the effective level."""
    level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(level))
    return level
