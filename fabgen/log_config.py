"""Logging setup shared by the fabgen modules and the CLI.

Every module logs through ``get_logger(__name__)``, so all records land
under the ``fabgen`` logger. Validation findings are logged at the level
matching their severity (see ``severity_level``).
"""

import logging
import sys

PACKAGE_LOGGER = "fabgen"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

_SEVERITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a fabgen module.

    Args:
        name: Module name, normally ``__name__``.
    """
    return logging.getLogger(name)


def severity_level(severity: str) -> int:
    """Map a finding severity to a logging level (INFO when unknown)."""
    return _SEVERITY_LEVELS.get(severity, logging.INFO)


def set_global_log_level(level: int) -> None:
    """Send log records to stderr and set the level of the fabgen loggers.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
