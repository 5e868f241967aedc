# app/logger.py
#
# Handlers live on the "app" logger only; modules under app.* propagate to
# it, the root logger (uvicorn, sqlalchemy) is left alone.

import logging
import sys

from .config import LOG_LEVEL

APP_LOGGER = "app"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Attach the stdout handler to the app logger; safe to call again."""
    log = logging.getLogger(APP_LOGGER)
    log.setLevel(level)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(handler)
    return log


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
