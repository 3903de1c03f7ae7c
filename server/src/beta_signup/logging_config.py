"""Common logging configuration for the beta signup service"""

import logging
import sys

from beta_signup.config import config

# httpx logs every request URL at INFO; Airtable lookup URLs embed verification tokens
QUIET_LOGGERS = ("httpx", "httpcore")


class InfoFilter(logging.Filter):
    """Pass INFO and DEBUG records only, leaving WARNING and above to stderr"""

    def filter(self, record):
        return record.levelno < logging.WARNING


def setup_logging(log_level: str | None = None):
    """
    Route INFO/DEBUG to stdout and WARNING/ERROR to stderr.

    Args:
        log_level: Level name overriding the configured LOG_LEVEL
    """
    log_level = log_level or config.get("log_level", "INFO")
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter("%(levelname)s:%(name)s:%(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(InfoFilter())
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module name (usually __name__)"""
    return logging.getLogger(name)
