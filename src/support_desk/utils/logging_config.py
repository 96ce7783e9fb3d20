"""Structured logger setup shared across the service."""

import logging

from pythonjsonlogger.json import JsonFormatter

from support_desk.config.settings import Settings


def get_logger(name: str) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    The level comes from ``Settings.log_level`` (LOG_LEVEL), so tests and
    local runs can turn it down without touching code.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = JsonFormatter("%(levelname)s %(name)s %(message)s %(asctime)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(Settings.from_environment().log_level)
    logger.propagate = False
    return logger
