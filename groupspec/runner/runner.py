# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Spec file discovery, loading and the top-level run.

Spec files are plain Python modules exposing ``register(world)``. Paths given
on the command line may be files or directories; directories are searched
recursively for ``*_spec.py`` files. A path may carry line numbers
(``spec/stack_spec.py:12:30``) to only run the groups and examples declared
at those lines.
"""

from __future__ import annotations

import importlib.util
import logging
import re
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from groupspec.core.constants import EXIT_FAILURE, EXIT_SUCCESS
from groupspec.groups.world import World
from groupspec.reporting.reporter import Reporter
from groupspec.runner.configuration import Configuration
from groupspec.runner.configuration_options import ConfigurationOptions

logger = logging.getLogger(__name__)

SPEC_FILE_PATTERN = "*_spec.py"
REGISTER_FUNCTION = "register"

_LOCATION_PATTERN = re.compile(r"^(?P<path>.+?)(?P<lines>(?::\d+)+)$")


def split_location(argument: str) -> tuple[str, list[int]]:
    """Split "path:12:30" into the path and its line numbers.

    Examples:
        >>> split_location("spec/stack_spec.py:12:30")
        ('spec/stack_spec.py', [12, 30])
        >>> split_location("spec")
        ('spec', [])
    """
    match = _LOCATION_PATTERN.match(argument)
    if not match:
        return argument, []
    lines = [int(line) for line in match.group("lines").split(":") if line]
    return match.group("path"), lines


class SpecDiscovery:
    """Finds spec files below the given paths."""

    def __init__(self, paths: Iterable[str | Path], pattern: str = SPEC_FILE_PATTERN) -> None:
        self.paths = [Path(path) for path in paths]
        self.pattern = pattern

    def _should_skip_path(self, path: Path) -> bool:
        if "__pycache__" in path.parts:
            return True
        return path.name.startswith("_")

    def discover(self) -> list[Path]:
        """Spec files in argument order, directories expanded in sorted order.

        Raises:
            FileNotFoundError: If a path does not exist.
        """
        files: list[Path] = []
        for path in self.paths:
            if not path.exists():
                raise FileNotFoundError(f"No such file or directory: {path}")
            if path.is_dir():
                found = sorted(
                    candidate
                    for candidate in path.rglob(self.pattern)
                    if not self._should_skip_path(candidate)
                )
                logger.debug(f"Discovered {len(found)} spec files in {path}")
                files.extend(found)
            else:
                files.append(path)
        unique: list[Path] = []
        for file in files:
            if file.resolve() not in {existing.resolve() for existing in unique}:
                unique.append(file)
        return unique


def load_spec_file(path: Path, world: World, index: int = 0) -> ModuleType:
    """Import a spec file and call its ``register(world)``.

    Definition errors raised by ``register`` propagate to the caller.

    Raises:
        ImportError: If the file cannot be imported.
    """
    module_name = f"groupspec_spec_{index}_{re.sub(r'[^0-9A-Za-z_]', '_', path.stem)}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load spec file {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)

    register = getattr(module, REGISTER_FUNCTION, None)
    if register is None:
        logger.warning(f"Skipping {path}: no {REGISTER_FUNCTION}(world) function")
        return module
    logger.debug(f"Registering groups from {path}")
    register(world)
    return module


class Runner:
    """Configures a World from merged options, loads spec files and runs them.

    Args:
        options: Merged option sources.
        reporter: Receives the run notifications.
        configuration: Pre-built configuration (a fresh one by default).
    """

    def __init__(
        self,
        options: ConfigurationOptions,
        reporter: Reporter | None = None,
        configuration: Configuration | None = None,
    ) -> None:
        self.options = options
        self.reporter = reporter or Reporter()
        self.configuration = configuration or Configuration()
        self.world = World(self.configuration)

    def run(self) -> int:
        """Run the specs and return the process exit code."""
        paths: list[str] = []
        for argument in self.options.files_or_directories_to_run:
            path, lines = split_location(argument)
            paths.append(path)
            if lines:
                self.configuration.filter_manager.add_location(path, lines)
        self.options.configure(self.configuration)

        for index, path in enumerate(SpecDiscovery(paths).discover()):
            load_spec_file(path, self.world, index)

        success = self.world.run(self.reporter)
        return EXIT_SUCCESS if success else EXIT_FAILURE
