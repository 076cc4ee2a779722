# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Hook scopes, phases and per-owner hook collections.

A hook is a ``(scope, phase, owner, body)`` entry:

    Scope (HookScope)       Aliases accepted by ``HookScope.parse``
    -----------------       ----------------------------------------
    EXAMPLE  per-case       "each", "example", "case"
    CONTEXT  per-group      "all", "context", "group"
    SUITE    per-run        "suite", "run"

    Phase (HookPhase): BEFORE, AFTER, AROUND (AROUND only for EXAMPLE scope)

Each group (and the configuration root) owns one HookCollections instance. The
collections keep hooks in registration order; callers decide traversal order
(before hooks in registration order, after hooks in reverse).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from groupspec.core.errors import HookDefinitionError
from groupspec.filtering.metadata_filter import all_apply

logger = logging.getLogger(__name__)


class HookScope(str, Enum):
    """How often a hook runs."""

    EXAMPLE = "example"
    CONTEXT = "context"
    SUITE = "suite"

    @classmethod
    def parse(cls, value: HookScope | str | None) -> HookScope:
        """Resolve a scope or one of its aliases; None means per-case.

        Raises:
            HookDefinitionError: For unknown scope names.
        """
        if value is None:
            return cls.EXAMPLE
        if isinstance(value, HookScope):
            return value
        try:
            return SCOPE_ALIASES[str(value).lower()]
        except KeyError:
            raise HookDefinitionError(
                f"Unknown hook scope {value!r}. "
                f"Expected one of: {', '.join(sorted(SCOPE_ALIASES))}"
            ) from None


SCOPE_ALIASES: Mapping[str, HookScope] = {
    "each": HookScope.EXAMPLE,
    "example": HookScope.EXAMPLE,
    "case": HookScope.EXAMPLE,
    "all": HookScope.CONTEXT,
    "context": HookScope.CONTEXT,
    "group": HookScope.CONTEXT,
    "suite": HookScope.SUITE,
    "run": HookScope.SUITE,
}


class HookPhase(str, Enum):
    """When a hook runs relative to what it wraps."""

    BEFORE = "before"
    AFTER = "after"
    AROUND = "around"


@dataclass
class Hook:
    """A registered hook body.

    Attributes:
        scope: Per-case, per-group or per-run
        phase: Before, after or around
        body: ``body(ctx)`` for before/after, ``body(ctx, run)`` for around
        owner: Description of the owning group (or "configuration")
        conditions: Metadata rules an example must satisfy for per-case hooks
    """

    scope: HookScope
    phase: HookPhase
    body: Callable[..., Any]
    owner: str = "configuration"
    conditions: dict[str, Any] = field(default_factory=dict)

    def applies_to(self, metadata: Mapping[str, Any]) -> bool:
        """Check the hook's metadata conditions against an example or group."""
        return not self.conditions or all_apply(self.conditions, metadata)

    @property
    def label(self) -> str:
        """Human readable kind, e.g. "after(:context)"."""
        return f"{self.phase.value}(:{self.scope.value})"


class HookCollections:
    """All hooks registered by one owner, kept in registration order."""

    def __init__(self, owner: str = "configuration") -> None:
        self.owner = owner
        self._hooks: dict[tuple[HookPhase, HookScope], list[Hook]] = {}

    def register(
        self,
        phase: HookPhase | str,
        scope: HookScope | str | None,
        body: Callable[..., Any],
        conditions: Mapping[str, Any] | None = None,
    ) -> Hook:
        """Register a hook.

        Raises:
            HookDefinitionError: For unknown scopes, missing bodies, or around
                hooks on a scope other than per-case.
        """
        phase = HookPhase(phase)
        hook_scope = HookScope.parse(scope)
        if not callable(body):
            raise HookDefinitionError(f"{phase.value} hook requires a callable body")
        if phase == HookPhase.AROUND and hook_scope != HookScope.EXAMPLE:
            raise HookDefinitionError(
                f"around(:{hook_scope.value}) hooks are not supported; "
                f"around hooks only wrap individual examples"
            )
        hook = Hook(hook_scope, phase, body, self.owner, dict(conditions or {}))
        self._hooks.setdefault((phase, hook_scope), []).append(hook)
        logger.debug(f"Registered {hook.label} hook on {self.owner}")
        return hook

    def hooks_for(self, phase: HookPhase, scope: HookScope) -> list[Hook]:
        """Hooks of one phase and scope in registration order."""
        return list(self._hooks.get((phase, scope), []))

    def matching(
        self, phase: HookPhase, scope: HookScope, metadata: Mapping[str, Any]
    ) -> list[Hook]:
        """Hooks of one phase and scope whose conditions match ``metadata``."""
        return [hook for hook in self.hooks_for(phase, scope) if hook.applies_to(metadata)]

    def __iter__(self) -> Iterator[Hook]:
        for hooks in self._hooks.values():
            yield from hooks

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())


def register_hook(
    hooks: HookCollections,
    phase: HookPhase,
    scope: HookScope | str | Callable[..., Any] | None,
    body: Callable[..., Any] | None,
    conditions: Mapping[str, Any],
) -> Any:
    """Register a hook on ``hooks``, supporting the decorator form.

    ``before(body)``, ``before("all", body)`` and ``@before("all")`` are all
    accepted. The decorator form returns the decorated function unchanged.
    """
    if callable(scope) and body is None:
        body, scope = scope, None
    if body is None:

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            hooks.register(phase, scope, fn, conditions)  # type: ignore[arg-type]
            return fn

        return decorator
    return hooks.register(phase, scope, body, conditions)  # type: ignore[arg-type]
