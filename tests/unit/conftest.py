# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Shared fixtures for unit tests."""

import pytest

from groupspec.groups.world import World
from groupspec.reporting.reporter import RecordingReporter
from groupspec.runner.configuration import Configuration


@pytest.fixture()
def diagnostics() -> list[str]:
    """Messages sent to the configuration's diagnostic sink."""
    return []


@pytest.fixture()
def configuration(diagnostics: list[str]) -> Configuration:
    """Configuration whose diagnostics are collected instead of logged."""
    return Configuration(warn=diagnostics.append)


@pytest.fixture()
def world(configuration: Configuration) -> World:
    """Fresh World bound to the collecting configuration."""
    return World(configuration)


@pytest.fixture()
def reporter() -> RecordingReporter:
    """Reporter keeping every notification in order."""
    return RecordingReporter()
