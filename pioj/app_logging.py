"""Structured logging for the application."""

import logging
from typing import Union

from pythonjsonlogger import jsonlogger


def setup_logger(level: Union[int, str] = logging.INFO) -> None:
    """Send JSON log records to stderr from the root logger."""
    logHandler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    logHandler.setFormatter(formatter)
    logger = logging.getLogger()
    if not any(isinstance(h.formatter, jsonlogger.JsonFormatter)
               for h in logger.handlers):
        logger.addHandler(logHandler)
    if isinstance(level, str):
        level = int(level) if level.isdigit() else level.upper()
    logger.setLevel(level)
