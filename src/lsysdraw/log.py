from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV_VAR = "LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    ``level`` falls back to ``$LOG_LEVEL`` and then ``WARNING``. Loggers that
    already carry handlers are left alone apart from their level.
    """

    logger = logging.getLogger("lsysdraw")
    level_name = (level or os.getenv(LOG_LEVEL_ENV_VAR) or "WARNING").upper()
    logger.setLevel(getattr(logging, level_name, logging.WARNING))

    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
