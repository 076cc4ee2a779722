# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Utility modules for the groupspec framework."""

from groupspec.utils.logging import VerbosityLevel, configure_logging
from groupspec.utils.strings import constant_name
from groupspec.utils.terminal import TerminalColors, terminal

__all__ = [
    "TerminalColors",
    "VerbosityLevel",
    "configure_logging",
    "constant_name",
    "terminal",
]
