# vttpreview/common/logging.py
from __future__ import annotations

import logging

DEFAULT_LOGGER_NAME = "vttpreview"


def get_logger(name: str = DEFAULT_LOGGER_NAME, level: int | str | None = None) -> logging.Logger:
    """
    Return a named logger for the package.
    If nothing has configured the root logger yet, we add a basicConfig once.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(
            level=_coerce_level(level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if level is not None:
        logger.setLevel(_coerce_level(level, logging.INFO))
    return logger


def _coerce_level(level: int | str | None, default: int) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else default
