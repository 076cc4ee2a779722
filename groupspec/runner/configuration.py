# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Run configuration consumed by the World and its groups.

A Configuration is the single collaborator the execution core reads at run
time: the filter rules, the ordering registry and the global ordering, the
hooks registered at the configuration root, the fail-fast threshold and the
diagnostic sink. It never reads files or command-line arguments; see
ConfigurationOptions for that.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from typing import Any

from groupspec.core.constants import DEFINED_ORDERING, RANDOM_ORDERING
from groupspec.core.errors import InvalidOptionError
from groupspec.filtering.filter_manager import FilterManager
from groupspec.hooks.registry import HookCollections, HookPhase, HookScope, register_hook
from groupspec.ordering.registry import OrderingRegistry

logger = logging.getLogger(__name__)

diagnostics_logger = logging.getLogger("groupspec.diagnostics")

MAX_SEED = 0xFFFF


class Configuration:
    """Settings and configuration-root registrations for one run.

    Attributes:
        fail_fast: False to run everything, True to stop after the first
            failure, or an int failure threshold.
        dry_run: When True no hook or example body is executed; filtered
            examples are reported passed unless marked pending or skipped.
        run_all_when_everything_filtered: Drop the inclusion rules when they
            match no example at all.
        seed_used: Whether an ordering read the seed during the current run.
        warn: Single-argument diagnostic sink.
        filter_manager: Inclusion and exclusion rules of the run.
        ordering_registry: Named ordering strategies.
        hooks: Hooks registered at the configuration root.
    """

    def __init__(self, warn: Callable[[str], None] | None = None) -> None:
        self.fail_fast: bool | int = False
        self.dry_run = False
        self.run_all_when_everything_filtered = False
        self.warn: Callable[[str], None] = warn or diagnostics_logger.warning
        self.filter_manager = FilterManager()
        self._seed = random.randint(0, MAX_SEED)
        self.seed_used = False
        self.ordering_registry = OrderingRegistry(seed_source=self._use_seed)
        self.hooks = HookCollections("configuration")
        self._format_docstrings: Callable[[str], str] | None = None

    # Seed and ordering

    @property
    def seed(self) -> int:
        return self._seed

    @seed.setter
    def seed(self, value: int | str) -> None:
        try:
            self._seed = int(value)
        except (TypeError, ValueError):
            raise InvalidOptionError(f"Invalid seed '{value}'") from None
        self.ordering_registry.use_global(RANDOM_ORDERING)

    def _use_seed(self) -> int:
        self.seed_used = True
        return self._seed

    @property
    def order(self) -> str:
        for name in (DEFINED_ORDERING, RANDOM_ORDERING):
            if self.ordering_registry.global_ordering is self.ordering_registry.fetch(name):
                return name
        return "custom"

    @order.setter
    def order(self, value: str) -> None:
        """Set the global ordering.

        Accepts "defined", "random", "random:<seed>", or any registered name.

        Raises:
            InvalidOptionError: If the name is not a registered strategy or
                the seed is not an integer.
        """
        name, _, seed = str(value).partition(":")
        name = name.strip()
        if name == "rand":
            name = RANDOM_ORDERING
        if name not in self.ordering_registry:
            raise InvalidOptionError(f"Unknown ordering '{value}'")
        if seed:
            try:
                self._seed = int(seed)
            except ValueError:
                raise InvalidOptionError(f"Invalid seed in ordering '{value}'") from None
        self.ordering_registry.use_global(name)
        logger.debug(f"Global ordering set to '{name}'")

    def register_ordering(
        self, name: str, strategy: Callable[[list[Any]], Sequence[Any]] | Any
    ) -> None:
        """Register a named ordering; registering "global" replaces the default."""
        self.ordering_registry.register(name, strategy)

    # Filtering

    def filter_run(self, **rules: Any) -> None:
        """Low-priority inclusion rules, for defaults such as ``focus=True``."""
        self.filter_manager.include_with_low_priority(rules)

    def filter_run_including(self, **rules: Any) -> None:
        self.filter_run(**rules)

    def filter_run_excluding(self, **rules: Any) -> None:
        """Low-priority exclusion rules, for defaults such as ``slow=True``."""
        self.filter_manager.exclude_with_low_priority(rules)

    @property
    def inclusion_filter(self) -> dict[str, Any]:
        return self.filter_manager.inclusions.rules

    @property
    def exclusion_filter(self) -> dict[str, Any]:
        return self.filter_manager.exclusions.rules

    # Descriptions

    def format_docstrings(self, formatter: Callable[[str], str]) -> None:
        """Transform every description at definition time with ``formatter``."""
        self._format_docstrings = formatter

    @property
    def docstring_formatter(self) -> Callable[[str], str] | None:
        return self._format_docstrings

    # Hooks

    def before(
        self,
        scope: HookScope | str | None = None,
        body: Callable[..., Any] | None = None,
        **conditions: Any,
    ) -> Any:
        """Register a before hook; usable directly or as a decorator."""
        return self._register(HookPhase.BEFORE, scope, body, conditions)

    def after(
        self,
        scope: HookScope | str | None = None,
        body: Callable[..., Any] | None = None,
        **conditions: Any,
    ) -> Any:
        """Register an after hook; usable directly or as a decorator."""
        return self._register(HookPhase.AFTER, scope, body, conditions)

    def around(
        self,
        scope: HookScope | str | None = None,
        body: Callable[..., Any] | None = None,
        **conditions: Any,
    ) -> Any:
        """Register an around hook (per-case only)."""
        return self._register(HookPhase.AROUND, scope, body, conditions)

    def _register(
        self,
        phase: HookPhase,
        scope: HookScope | str | None,
        body: Callable[..., Any] | None,
        conditions: dict[str, Any],
    ) -> Any:
        return register_hook(self.hooks, phase, scope, body, conditions)

    def __repr__(self) -> str:
        return (
            f"Configuration(order={self.order!r}, seed={self.seed}, "
            f"fail_fast={self.fail_fast!r}, dry_run={self.dry_run}, "
            f"filters={self.filter_manager!r})"
        )

