# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""YAML options files.

An options file is a YAML mapping using the keys understood by
ConfigurationOptions. ``include`` / ``exclude`` lists of ``tag[:value]``
expressions are accepted as a shorthand for the filter mappings:

    order: random
    fail_fast: 3
    include:
      - focus
    exclusion_filter:
      speed: slow
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from groupspec.core.constants import GLOBAL_OPTIONS_FILENAME, LOCAL_OPTIONS_FILENAME
from groupspec.core.errors import InvalidOptionError
from groupspec.runner.configuration_options import merge_options, tag_options

logger = logging.getLogger(__name__)


def global_options_file() -> Path | None:
    try:
        return Path.home() / GLOBAL_OPTIONS_FILENAME
    except RuntimeError:
        logger.warning(
            f"Unable to find ~/{GLOBAL_OPTIONS_FILENAME} because the home directory "
            f"cannot be determined"
        )
        return None


def local_options_file() -> Path:
    return Path(LOCAL_OPTIONS_FILENAME)


def load_options_file(path: Path | None) -> dict[str, Any]:
    """Read one options file; missing files yield an empty mapping.

    Raises:
        InvalidOptionError: If the file is not valid YAML or not a mapping.
    """
    if path is None or not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise InvalidOptionError(f"Invalid options file {path}: {exc}") from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidOptionError(f"Options file {path} must contain a mapping")
    logger.debug(f"Loaded options from {path}: {data}")

    include = data.pop("include", None) or []
    exclude = data.pop("exclude", None) or []
    if include or exclude:
        merge_options(data, tag_options(include, exclude))
    return data


def file_options(custom_options_file: Path | None = None) -> list[dict[str, Any]]:
    """Options from files in priority order (lowest first).

    A custom options file replaces both the global and the local file.
    """
    if custom_options_file is not None:
        return [load_options_file(custom_options_file)]
    return [load_options_file(global_options_file()), load_options_file(local_options_file())]
