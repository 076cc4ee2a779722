# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""The World: registration root and run driver.

The World is the builder object passed to every spec file's
``register(world)`` function. It owns:

    - the top-level example groups and World-wide shared groups
    - the node arena (stable integer ids for every group and example)
    - display-name bookkeeping
    - the per-run filter caches, the run results and the stop flag

``World.run`` runs the ``before(:suite)`` hooks, queues the ordered top-level
groups, runs them one after the other, runs the ``after(:suite)`` hooks and
finally hands the RunResults to the reporter.
"""

from __future__ import annotations

import bisect
import logging
import os
from collections import deque
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

from groupspec.core.constants import DISPLAY_NAME_SEPARATOR
from groupspec.core.errors import IsolatedGroupNestingError
from groupspec.core.metadata import caller_location, split_description_args
from groupspec.core.types import ExecutionStatus, RunResults
from groupspec.groups.example import Example
from groupspec.groups.example_group import ExampleGroup, GroupBody
from groupspec.groups.shared import SharedGroupDefinition, SharedGroupRegistry
from groupspec.hooks.executor import HookExecutor
from groupspec.reporting.reporter import Reporter
from groupspec.runner.configuration import Configuration
from groupspec.utils.strings import constant_name

logger = logging.getLogger(__name__)

Node = ExampleGroup | Example


class World:
    """Registration root for groups plus the state of the current run.

    Attributes:
        configuration: Settings, filters, orderings and root hooks
        example_groups: Top-level groups in definition order
        shared_groups: Shared groups visible everywhere
        wants_to_quit: Stop flag checked at every group and example boundary
        results: Counts of the current (or last) run
        hook_executor: Resolves and runs hook chains
    """

    def __init__(self, configuration: Configuration | None = None) -> None:
        self.configuration = configuration or Configuration()
        self.example_groups: list[ExampleGroup] = []
        self.shared_groups = SharedGroupRegistry()
        self.wants_to_quit = False
        self.results = RunResults()
        self.hook_executor = HookExecutor(
            self.configuration.hooks,
            lambda message: self.configuration.warn(message),
            dry_run=lambda: self.configuration.dry_run,
        )
        self._nodes: list[Node] = []
        self._display_names: dict[str, int] = {}
        self._definition_stack: list[ExampleGroup] = []
        self._queue: deque[ExampleGroup] = deque()
        self._filtered_examples: dict[int, list[Example]] = {}
        self._descendant_filtered_examples: dict[int, list[Example]] = {}
        self._declaration_lines: dict[str, list[int]] = {}

    # Definition DSL

    def describe(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        """Define a top-level group.

        Raises:
            IsolatedGroupNestingError: When called while a group body is being
                evaluated; use ``describe`` on that group instead.
        """
        self._ensure_top_level("a top-level example group")
        description_args, user_metadata = split_description_args(args)
        user_metadata.update(metadata)
        group = ExampleGroup(self, None, description_args, user_metadata)
        self.example_groups.append(group)
        if block is not None:
            group(block)
        return group

    context = describe
    example_group = describe

    def fdescribe(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        return self.describe(*args, block=block, focus=True, **metadata)

    fcontext = fdescribe

    def xdescribe(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        return self.describe(
            *args, block=block, skip="Temporarily skipped with xdescribe", **metadata
        )

    def xcontext(self, *args: Any, block: GroupBody | None = None, **metadata: Any) -> ExampleGroup:
        return self.describe(*args, block=block, skip="Temporarily skipped with xcontext", **metadata)

    def shared_examples(self, name: Any, body: Callable[..., Any] | None = None) -> Any:
        """Define a shared group visible to every group of this World.

        Raises:
            IsolatedGroupNestingError: When called while a group body is being
                evaluated; define the shared group on that group instead.
        """
        self._ensure_top_level("a top-level shared example group")
        location = caller_location().location

        def define(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.shared_groups.add(SharedGroupDefinition(name, fn, location))
            return fn

        if body is None:
            return define
        return define(body)

    shared_context = shared_examples
    shared_examples_for = shared_examples

    def _ensure_top_level(self, what: str) -> None:
        if self._definition_stack:
            raise IsolatedGroupNestingError(what)

    def evaluate_definition(self, group: ExampleGroup, block: Callable[[ExampleGroup], Any]) -> None:
        """Evaluate a group body with ``group`` as the current definition."""
        self._definition_stack.append(group)
        try:
            block(group)
        finally:
            self._definition_stack.pop()

    # Node arena and display names

    def register_node(self, node: Node) -> int:
        self._nodes.append(node)
        return len(self._nodes) - 1

    def node(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def assign_display_name(self, group: ExampleGroup) -> str:
        """Unique constant-like name, e.g. "TheGrandparent::TheParent".

        Collisions get a counter suffix: "Foo", "Foo_2", "Foo_3".
        """
        name = constant_name(group.description)
        if group.parent is not None:
            name = f"{group.parent.display_name}{DISPLAY_NAME_SEPARATOR}{name}"
        count = self._display_names.get(name, 0) + 1
        self._display_names[name] = count
        if count > 1:
            name = f"{name}_{count}"
            self._display_names[name] = self._display_names.get(name, 0) + 1
        return name

    def all_example_groups(self) -> list[ExampleGroup]:
        return [group for top in self.example_groups for group in top.descendants()]

    def all_examples(self) -> list[Example]:
        return [example for group in self.all_example_groups() for example in group.examples]

    # Filtering

    def filtered_examples(self, group: ExampleGroup) -> list[Example]:
        """The group's own examples that pass the filters, in definition order."""
        if group.id not in self._filtered_examples:
            manager = self.configuration.filter_manager
            self._filtered_examples[group.id] = manager.prune(group.examples)
        return self._filtered_examples[group.id]

    def descendant_filtered_examples(self, group: ExampleGroup) -> list[Example]:
        if group.id not in self._descendant_filtered_examples:
            examples = list(self.filtered_examples(group))
            for child in group.children:
                examples.extend(self.descendant_filtered_examples(child))
            self._descendant_filtered_examples[group.id] = examples
        return self._descendant_filtered_examples[group.id]

    def example_count(self, groups: list[ExampleGroup] | None = None) -> int:
        groups = self.example_groups if groups is None else groups
        return sum(len(self.descendant_filtered_examples(group)) for group in groups)

    def preceding_declaration_line(self, file_path: str, line_number: int) -> int | None:
        """Nearest line at or before ``line_number`` declaring a group or example."""
        key = os.path.abspath(file_path)
        if key not in self._declaration_lines:
            self._declaration_lines[key] = sorted(
                {
                    node.metadata["line_number"]
                    for node in self._nodes
                    if os.path.abspath(node.metadata["file_path"]) == key
                }
            )
        lines = self._declaration_lines[key]
        index = bisect.bisect_right(lines, line_number)
        return lines[index - 1] if index else None

    def reset_filter_caches(self) -> None:
        self._filtered_examples.clear()
        self._descendant_filtered_examples.clear()
        self._declaration_lines.clear()

    # Running

    def run(self, reporter: Reporter | None = None) -> bool:
        """Run every top-level group.

        Returns:
            True when no example failed and the run was not stopped early.
        """
        reporter = reporter or Reporter()
        self._reset()
        self._announce_filters(reporter)

        configuration = self.configuration
        groups = configuration.ordering_registry.global_ordering.order(self.example_groups)
        logger.debug(
            f"Running {len(groups)} top-level groups with {configuration!r}, "
            f"hooks: {dict(self.hook_executor.hook_counts())}"
        )
        reporter.start(self.example_count(groups))

        context = SimpleNamespace()
        success = True
        try:
            self.hook_executor.run_before_suite(context)
        except Exception as exc:
            logger.debug(f"before(:suite) hook failed: {exc!r}")
            success = False
            for group in groups:
                for example in self.descendant_filtered_examples(group):
                    example.fail_with_exception(reporter, exc)
        else:
            self._queue = deque(groups)
            while self._queue:
                group = self._queue.popleft()
                if not group.run(reporter):
                    success = False
        finally:
            self.hook_executor.run_after_suite(context)

        self.results.after_hook_errors = list(self.hook_executor.errors)
        reporter.seed(configuration.seed, configuration.seed_used)
        reporter.finish(self.results)
        logger.info(f"Run finished: {self.results}")
        return success and not self.results.has_failures

    def _reset(self) -> None:
        self.wants_to_quit = False
        self.configuration.seed_used = False
        self.results = RunResults()
        self.hook_executor.errors = []
        self._queue.clear()
        for example in self.all_examples():
            example.reset()
        self.configuration.filter_manager.declaration_line_resolver = (
            self.preceding_declaration_line
        )
        self.reset_filter_caches()

    def _announce_filters(self, reporter: Reporter) -> None:
        manager = self.configuration.filter_manager
        inclusions = manager.inclusions.rules
        exclusions = manager.exclusions.rules
        if (
            inclusions
            and self.configuration.run_all_when_everything_filtered
            and self.example_count() == 0
        ):
            reporter.message(f"All examples were filtered out; ignoring {inclusions}")
            manager.inclusions.clear()
            self.reset_filter_caches()
            inclusions = {}
        if inclusions:
            reporter.message(f"Run options: include {inclusions}")
        if exclusions:
            reporter.message(f"Run options: exclude {exclusions}")

    def example_finished(self, example: Example) -> None:
        """Count a finished example and apply the fail-fast threshold."""
        self.results.add(example.execution_result)
        if example.execution_result.status != ExecutionStatus.FAILED:
            return
        fail_fast = self.configuration.fail_fast
        if fail_fast is False or fail_fast is None:
            return
        threshold = 1 if fail_fast is True else int(fail_fast)
        if threshold > 0 and self.results.failed >= threshold:
            logger.info(f"Stopping after {self.results.failed} failure(s) (fail fast)")
            self.wants_to_quit = True

    def request_stop(self) -> None:
        """Stop starting new examples; teardown of entered scopes still runs."""
        self.wants_to_quit = True

    def clear_remaining_example_groups(self) -> None:
        """Drop the top-level groups that have not started yet."""
        if self._queue:
            logger.debug(f"Purging {len(self._queue)} queued top-level groups")
        self._queue.clear()
