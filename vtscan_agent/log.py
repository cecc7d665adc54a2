from __future__ import annotations

import logging
import os

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a console logger; handlers are attached only once per name."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = os.getenv("VTSCAN_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    logger.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)

    return logger
