# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Resolution and execution of hook chains.

For one example the full chain, from the run root down to the example and back,
is:

    1. before(:suite)      configuration, registration order (once per run)
    2. before(:context)    configuration (top-level groups only), then each
                           ancestor group outermost first, registration order
                           (once per group)
    3. around(:example)    configuration, then ancestors outermost first; the
                           first registered hook is the outermost wrapper
    4. before(:example)    configuration, then ancestors outermost first,
                           registration order
    5. the example body
    6. after(:example)     ancestors innermost first, reverse registration
                           order, then configuration (reversed)
    7. after(:context)     when the group finishes, own hooks reversed, then
                           configuration (top-level groups only, reversed)
    8. after(:suite)       configuration, reverse registration order

Errors raised by before hooks propagate to the caller, which records them as
the example's (or group's) failure. Errors raised by after hooks never stop the
remaining after hooks: they are collected, sent to the diagnostic sink once the
chain completes, and never change an example's recorded status.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from groupspec.core.metadata import relative_path
from groupspec.hooks.registry import Hook, HookCollections, HookPhase, HookScope

if TYPE_CHECKING:
    from groupspec.groups.example import Example
    from groupspec.groups.example_group import ExampleGroup

logger = logging.getLogger(__name__)


def format_after_hook_error(hook: Hook, exc: BaseException) -> str:
    """Diagnostic message for an error raised in an after hook."""
    frames = traceback.extract_tb(exc.__traceback__)
    if frames:
        occurred_at = f"{relative_path(frames[-1].filename)}:{frames[-1].lineno}"
    else:
        occurred_at = "<unknown>"
    return (
        f"An error occurred in an `{hook.label}` hook.\n"
        f"  {type(exc).__name__}: {exc}\n"
        f"  occurred at {occurred_at}"
    )


class HookExecutor:
    """Builds and runs hook chains for examples, groups and the whole run.

    Attributes:
        config_hooks: Hooks registered at the configuration root.
        errors: Diagnostic messages for every after-hook error of the run.
    """

    def __init__(
        self,
        config_hooks: HookCollections,
        warn: Callable[[str], None],
        dry_run: Callable[[], bool] = lambda: False,
    ) -> None:
        self.config_hooks = config_hooks
        self._warn = warn
        self._dry_run = dry_run
        self.errors: list[str] = []

    # Chain resolution

    def before_example_chain(self, example: Example) -> list[Hook]:
        metadata = example.metadata
        chain = self.config_hooks.matching(HookPhase.BEFORE, HookScope.EXAMPLE, metadata)
        for group in reversed(example.group.parent_groups):
            chain.extend(group.hooks.matching(HookPhase.BEFORE, HookScope.EXAMPLE, metadata))
        return chain

    def after_example_chain(self, example: Example) -> list[Hook]:
        metadata = example.metadata
        chain: list[Hook] = []
        for group in example.group.parent_groups:
            chain.extend(
                reversed(group.hooks.matching(HookPhase.AFTER, HookScope.EXAMPLE, metadata))
            )
        chain.extend(
            reversed(self.config_hooks.matching(HookPhase.AFTER, HookScope.EXAMPLE, metadata))
        )
        return chain

    def around_example_chain(self, example: Example) -> list[Hook]:
        metadata = example.metadata
        chain = self.config_hooks.matching(HookPhase.AROUND, HookScope.EXAMPLE, metadata)
        for group in reversed(example.group.parent_groups):
            chain.extend(group.hooks.matching(HookPhase.AROUND, HookScope.EXAMPLE, metadata))
        return chain

    def before_context_chain(self, group: ExampleGroup) -> list[Hook]:
        metadata = group.metadata
        chain: list[Hook] = []
        if group.is_top_level:
            chain.extend(self.config_hooks.matching(HookPhase.BEFORE, HookScope.CONTEXT, metadata))
        chain.extend(group.hooks.matching(HookPhase.BEFORE, HookScope.CONTEXT, metadata))
        return chain

    def after_context_chain(self, group: ExampleGroup) -> list[Hook]:
        metadata = group.metadata
        chain = list(reversed(group.hooks.matching(HookPhase.AFTER, HookScope.CONTEXT, metadata)))
        if group.is_top_level:
            chain.extend(
                reversed(self.config_hooks.matching(HookPhase.AFTER, HookScope.CONTEXT, metadata))
            )
        return chain

    # Execution

    def run_before(self, hooks: list[Hook], context: Any) -> None:
        """Run before hooks in order; the first error propagates."""
        if self._dry_run():
            return
        for hook in hooks:
            hook.body(context)

    def run_after(self, hooks: list[Hook], context: Any) -> list[str]:
        """Run every after hook, collecting and reporting errors afterwards."""
        if self._dry_run():
            return []
        errors: list[str] = []
        for hook in hooks:
            try:
                hook.body(context)
            except Exception as exc:
                logger.debug(f"{hook.label} hook on {hook.owner} raised {exc!r}")
                errors.append(format_after_hook_error(hook, exc))
        for message in errors:
            self._warn(message)
        self.errors.extend(errors)
        return errors

    def run_around(self, hooks: list[Hook], context: Any, inner: Callable[[], None]) -> None:
        """Run ``inner`` wrapped by the around hooks, first hook outermost."""
        if self._dry_run():
            inner()
            return
        call = inner
        for hook in reversed(hooks):
            call = _wrap(hook, context, call)
        call()

    def run_before_example(self, example: Example, context: Any) -> None:
        self.run_before(self.before_example_chain(example), context)

    def run_after_example(self, example: Example, context: Any) -> list[str]:
        return self.run_after(self.after_example_chain(example), context)

    def run_around_example(self, example: Example, context: Any, inner: Callable[[], None]) -> None:
        self.run_around(self.around_example_chain(example), context, inner)

    def run_before_context(self, group: ExampleGroup, context: Any) -> None:
        self.run_before(self.before_context_chain(group), context)

    def run_after_context(self, group: ExampleGroup, context: Any) -> list[str]:
        return self.run_after(self.after_context_chain(group), context)

    def run_before_suite(self, context: Any) -> None:
        self.run_before(self.config_hooks.hooks_for(HookPhase.BEFORE, HookScope.SUITE), context)

    def run_after_suite(self, context: Any) -> list[str]:
        hooks = self.config_hooks.hooks_for(HookPhase.AFTER, HookScope.SUITE)
        return self.run_after(list(reversed(hooks)), context)

    def hook_counts(self) -> Mapping[str, int]:
        """Number of configuration hooks per label, for debug logging."""
        counts: dict[str, int] = {}
        for hook in self.config_hooks:
            counts[hook.label] = counts.get(hook.label, 0) + 1
        return counts


def _wrap(hook: Hook, context: Any, call: Callable[[], None]) -> Callable[[], None]:
    def run() -> None:
        hook.body(context, call)

    return run
