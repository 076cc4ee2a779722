# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Fixtures for command line tests."""

import os
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch


@pytest.fixture()
def isolated_cwd(tmp_path: Path, monkeypatch: MonkeyPatch) -> Path:
    """Run in an empty directory with an empty home and no GROUPSPEC_* variables.

    Keeps the user's ~/.groupspec.yaml and environment out of the tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in [key for key in os.environ if key.startswith("GROUPSPEC_")]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
