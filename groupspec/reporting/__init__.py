# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Reporters consuming the run notifications."""

from groupspec.reporting.console import ConsoleReporter
from groupspec.reporting.reporter import Notification, RecordingReporter, Reporter

__all__ = [
    "ConsoleReporter",
    "Notification",
    "RecordingReporter",
    "Reporter",
]
