# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for logging setup."""

import logging
from collections.abc import Iterator

import errorhandler
import pytest

from groupspec.utils.logging import VerbosityLevel, configure_logging


@pytest.fixture()
def root_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger()
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


class TestConfigureLogging:
    """Test configure_logging()."""

    def test_single_stream_handler(self, root_logger: logging.Logger) -> None:
        """Repeated setup keeps one stream handler at the requested level."""
        handler = errorhandler.ErrorHandler()

        configure_logging(VerbosityLevel.INFO, handler)
        configure_logging("debug", handler)

        streams = [h for h in root_logger.handlers if type(h) is logging.StreamHandler]
        assert len(streams) == 1
        assert streams[0].level == logging.DEBUG
        assert root_logger.level == logging.DEBUG

    def test_error_handler_is_reset(self, root_logger: logging.Logger) -> None:
        """A fired error handler starts clean after setup."""
        handler = errorhandler.ErrorHandler()
        configure_logging(VerbosityLevel.WARNING, handler)
        logging.getLogger("groupspec.test").error("boom")
        assert handler.fired

        configure_logging(VerbosityLevel.WARNING, handler)

        assert not handler.fired
