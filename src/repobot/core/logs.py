"""Logging setup for repobot.

Verbosity uses numeric thresholds: 50 and above shows debug output, 40 info,
30 warnings; anything lower shows errors only. Debug and info lines go to
stdout, warnings and errors to stderr.
"""

import logging
import sys

from repobot.gateway.github.types import GitHubApiError

LOGGER_NAME = "repobot"

VERBOSITY_DEBUG = 50
VERBOSITY_INFO = 40
VERBOSITY_WARN = 30
DEFAULT_VERBOSITY = VERBOSITY_INFO


def verbosity_to_level(verbosity: int) -> int:
    """Map a repobot verbosity number to a logging level."""
    if verbosity >= VERBOSITY_DEBUG:
        return logging.DEBUG
    if verbosity >= VERBOSITY_INFO:
        return logging.INFO
    if verbosity >= VERBOSITY_WARN:
        return logging.WARNING
    return logging.ERROR


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def configure_logging(verbosity: int) -> logging.Logger:
    """Configure and return the repobot logger.

    Safe to call repeatedly; previously installed handlers are replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(verbosity_to_level(verbosity))
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(levelname)s - %(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_BelowWarning())
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    logger.addHandler(stdout_handler)
    logger.addHandler(stderr_handler)
    return logger


def log_remote_error(logger: logging.Logger, context: str, error: GitHubApiError) -> None:
    """Log a failed API call as a structured name/status/message line."""
    logger.error(
        "%s; name: %s, status: %s, msg: %s", context, error.name, error.status, error.message
    )
    logger.debug("%r", error)
