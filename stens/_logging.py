from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "STENS_LOG_LEVEL"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # WARNING for library use, INFO for the CLI; STENS_LOG_LEVEL overrides.
    default_level = logging.WARNING
    if name.endswith("._cli"):
        default_level = logging.INFO

    level_name = os.getenv(LOG_LEVEL_ENV, logging.getLevelName(default_level))
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = default_level

    logger.setLevel(level)
    return logger
