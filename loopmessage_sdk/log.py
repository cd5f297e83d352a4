"""Log level control for the ``loopmessage_sdk`` logger tree."""

from __future__ import annotations

import logging

from loopmessage_sdk.exceptions import LoopMessageError

PACKAGE_LOGGER = "loopmessage_sdk"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "none": logging.CRITICAL + 1,
}


def set_log_level(level: str) -> None:
    """Set the SDK log level by name; ``none`` silences the SDK entirely."""
    try:
        value = LOG_LEVELS[level.lower()]
    except KeyError:
        raise LoopMessageError.invalid_param_error(
            "log_level", f"Log level must be one of: {', '.join(LOG_LEVELS)}"
        ) from None
    logging.getLogger(PACKAGE_LOGGER).setLevel(value)
