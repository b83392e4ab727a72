import logging
import sys

logger = logging.getLogger("chat_markdown")


def log_debug(msg):
    logger.debug(msg)


def log_warn(msg):
    logger.warning(msg)


def configure_logging(debug: bool = False) -> logging.Logger:
    """Send diagnostics to stderr as ``DEBUG: ...`` / ``WARNING: ...`` lines."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    return logger
