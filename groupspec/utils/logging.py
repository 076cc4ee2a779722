# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Logging setup for the groupspec command line."""

import logging
import sys
from enum import Enum

import errorhandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class VerbosityLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def configure_logging(
    level: VerbosityLevel | str, error_handler: errorhandler.ErrorHandler
) -> None:
    """Install a single stream handler on the root logger.

    Args:
        level: Minimum level of records that are printed.
        error_handler: Handler whose ``fired`` flag decides the exit code;
            reset so that a previous run in the same process does not leak.
    """
    level_name = level.value if isinstance(level, VerbosityLevel) else str(level).upper()
    logger = logging.getLogger()
    for handler in list(logger.handlers):
        if not isinstance(handler, errorhandler.ErrorHandler):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level_name)
    logger.addHandler(handler)
    logger.setLevel(level_name)
    error_handler.reset()
