"""Logging setup for the package loggers."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Route the ``openapi_guard`` loggers to the current stdout.

    Repeated calls replace the handler installed by the previous call.
    """
    logger = logging.getLogger("openapi_guard")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_openapi_guard", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    handler._openapi_guard = True
    logger.addHandler(handler)
    return logger
