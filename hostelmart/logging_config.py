"""
Centralized logging configuration.

Modules log through logging.getLogger(__name__); this only sets up the
root handler once at startup.
"""

import logging
import sys
from typing import Optional

from hostelmart.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Root handler installed by setup_logging; reused when create_app() runs again
_handler: Optional[logging.Handler] = None


def setup_logging(settings: Settings) -> None:
    global _handler

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _handler not in root.handlers:
        root.addHandler(_handler)

    # SQL echo is noisy; only surface it in debug mode
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )
