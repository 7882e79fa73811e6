"""Logger helpers. The package never installs handlers on import."""

import logging

from . import config


def get_logger(name=None):
    if not name:
        return logging.getLogger(config.LOGGER_NAME)
    if name.startswith(config.LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{config.LOGGER_NAME}.{name}")


def configure_logging(level=None):
    """Attach a stream handler to the package logger.

    Args:
        level: logging level name or number, defaults to config.LOG_LEVEL.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(config.LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level or config.LOG_LEVEL)
    return logger
