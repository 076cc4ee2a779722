# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Ordering strategies for examples and groups.

An ordering strategy maps the ordered sequence of siblings at one nesting level
to a permutation of the same items. Strategies are looked up by name in an
OrderingRegistry:

    - "defined": identity, keeps definition order
    - "random": seeded shuffle; the same seed always yields the same permutation
    - "global": the strategy used when a group does not ask for one; initially
      "defined", replaced through ``register("global", ...)`` or
      ``Configuration.order``

Strategies are applied independently at every group boundary: a group orders
its own examples and its own child groups, then each child group orders its
own children with its own (possibly inherited) strategy.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeVar

from groupspec.core.constants import DEFINED_ORDERING, GLOBAL_ORDERING, RANDOM_ORDERING

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrderingStrategy(Protocol):
    """Callable protocol implemented by every ordering strategy."""

    def order(self, items: Sequence[T]) -> list[T]: ...


class Identity:
    """Returns the items in the order they were defined."""

    def order(self, items: Sequence[T]) -> list[T]:
        return list(items)

    def __repr__(self) -> str:
        return "Identity()"


class Random:
    """Seeded pseudo-random permutation.

    The seed is read from the ``seed_source`` every time ``order`` is called so
    that a seed set after registration (``--seed``) is honoured.
    """

    def __init__(self, seed_source: Callable[[], int]) -> None:
        self._seed_source = seed_source

    @property
    def seed(self) -> int:
        return self._seed_source()

    def order(self, items: Sequence[T]) -> list[T]:
        shuffled = list(items)
        random.Random(self.seed).shuffle(shuffled)
        return shuffled

    def __repr__(self) -> str:
        return "Random()"


class Custom:
    """Wraps a user callable ``items -> items``.

    The callable receives the full list of siblings at one nesting level and
    must return a permutation of them.
    """

    def __init__(self, callable_: Callable[[list[Any]], Sequence[Any]]) -> None:
        self._callable = callable_

    def order(self, items: Sequence[T]) -> list[T]:
        return list(self._callable(list(items)))

    def __repr__(self) -> str:
        return f"Custom({getattr(self._callable, '__name__', self._callable)!r})"


class OrderingRegistry:
    """Process-wide registry of named ordering strategies."""

    def __init__(self, seed_source: Callable[[], int]) -> None:
        self._strategies: dict[str, OrderingStrategy] = {}
        self.register(DEFINED_ORDERING, Identity())
        self.register(RANDOM_ORDERING, Random(seed_source))
        self.register(GLOBAL_ORDERING, self._strategies[DEFINED_ORDERING])

    def register(
        self,
        name: str,
        strategy: OrderingStrategy | Callable[[list[Any]], Sequence[Any]],
    ) -> None:
        """Register ``strategy`` under ``name``; plain callables are wrapped."""
        if not hasattr(strategy, "order"):
            strategy = Custom(strategy)  # type: ignore[arg-type]
        logger.debug(f"Registered ordering '{name}': {strategy!r}")
        self._strategies[name] = strategy  # type: ignore[assignment]

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def fetch(self, name: str, default: Callable[[], OrderingStrategy] | None = None) -> OrderingStrategy:
        """Look up a strategy by name.

        Args:
            name: Registered strategy name.
            default: Called to produce a strategy when ``name`` is unknown.

        Raises:
            KeyError: If ``name`` is unknown and no default is given.
        """
        try:
            return self._strategies[name]
        except KeyError:
            if default is None:
                raise
            return default()

    @property
    def global_ordering(self) -> OrderingStrategy:
        return self._strategies[GLOBAL_ORDERING]

    def use_global(self, name: str) -> None:
        """Make the strategy registered under ``name`` the global default."""
        self._strategies[GLOBAL_ORDERING] = self.fetch(name)

    def resolve(
        self,
        metadata: dict[str, Any],
        warn: Callable[[str], None] | None = None,
    ) -> OrderingStrategy:
        """Select the strategy for a group from its ``order`` metadata.

        Unregistered names fall back to the global strategy and emit a
        non-fatal diagnostic naming the group's definition site.
        """
        requested = metadata.get("order")
        if requested is None:
            return self.global_ordering
        name = str(requested)
        if name in self._strategies:
            return self._strategies[name]
        if warn is not None:
            warn(
                f"WARNING: Ignoring unknown ordering specified using `order={requested!r}` "
                f"metadata. Falling back to configured global ordering. "
                f"Unrecognized ordering specified at: {metadata.get('location')}"
            )
        return self.global_ordering
