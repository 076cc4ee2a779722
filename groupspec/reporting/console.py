# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Documentation-style console reporter.

Output while running:

    Stack
      starts empty
      with one item
        pops it (FAILED - 1)
        peeks (PENDING: No reason given)

After the run: pending and skipped examples, failures (with the shared group they
were included from), optional profile, timing, the summary line and one rerun
command per failed example, followed by the seed when the order was random:

    groupspec ./spec/stack_spec.py:12 # Stack with one item pops it

    Randomized with seed 4242
"""

from __future__ import annotations

import sys
import time
import traceback
from collections.abc import Callable
from typing import TYPE_CHECKING, TextIO

from groupspec.core.metadata import is_framework_file, relative_path
from groupspec.core.types import ExecutionStatus, RunResults
from groupspec.reporting.reporter import Reporter
from groupspec.utils.terminal import pluralize, terminal

if TYPE_CHECKING:
    from groupspec.groups.example import Example
    from groupspec.groups.example_group import ExampleGroup

INDENT = "  "


def format_seconds(seconds: float) -> str:
    """Seconds rounded for display, e.g. "0.5 seconds"."""
    precision = 5 if seconds < 1 else 2
    text = f"{seconds:.{precision}f}".rstrip("0").rstrip(".") or "0"
    return f"{text} second" if text == "1" else f"{text} seconds"


def format_exception(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def user_frames(exc: BaseException) -> list[str]:
    """Traceback lines of ``exc`` outside the groupspec package."""
    lines = []
    for frame in traceback.extract_tb(exc.__traceback__):
        if is_framework_file(frame.filename):
            continue
        lines.append(f"# {relative_path(frame.filename)}:{frame.lineno}:in `{frame.name}`")
    return lines


class ConsoleReporter(Reporter):
    """Writes nested documentation output and an end-of-run summary.

    Args:
        output: Stream to write to (stdout by default).
        profile_examples: Number of slowest examples to list, 0 to disable.
        command: Command name used in rerun lines.
    """

    def __init__(
        self,
        output: TextIO | None = None,
        profile_examples: int = 0,
        command: str = "groupspec",
    ) -> None:
        self.output = output or sys.stdout
        self.profile_examples = profile_examples
        self.command = command
        self.examples: list[Example] = []
        self.failed_examples: list[Example] = []
        self.pending_examples: list[Example] = []
        self.skipped_examples: list[Example] = []
        self.top_level_groups: list[ExampleGroup] = []
        self._depth = 0
        self._started_at: float | None = None
        self.duration = 0.0
        self.random_seed: int | None = None

    def _write(self, text: str = "") -> None:
        self.output.write(text + "\n")

    # Notifications

    def start(self, expected_count: int) -> None:
        self._started_at = time.perf_counter()

    def message(self, text: str) -> None:
        self._write(text)

    def seed(self, seed: int, used: bool) -> None:
        self.random_seed = seed if used else None

    def group_started(self, group: ExampleGroup) -> None:
        if group.is_top_level:
            self._write()
            self.top_level_groups.append(group)
        self._write(f"{INDENT * self._depth}{group.description}")
        self._depth += 1

    def group_finished(self, group: ExampleGroup) -> None:
        self._depth = max(self._depth - 1, 0)

    def case_finished(self, example: Example) -> None:
        self.examples.append(example)
        result = example.execution_result
        line = f"{INDENT * self._depth}{example.description}"
        if result.status == ExecutionStatus.FAILED:
            self.failed_examples.append(example)
            line = terminal.error(f"{line} (FAILED - {len(self.failed_examples)})")
        elif result.status == ExecutionStatus.PENDING:
            self.pending_examples.append(example)
            line = terminal.warning(f"{line} (PENDING: {result.pending_message})")
        elif result.status == ExecutionStatus.SKIPPED:
            self.skipped_examples.append(example)
            line = terminal.info(f"{line} (SKIPPED: {result.pending_message})")
        else:
            line = terminal.success(line)
        self._write(line)

    def finish(self, results: RunResults) -> None:
        if self._started_at is not None:
            self.duration = time.perf_counter() - self._started_at
        self.dump_pending()
        self.dump_skipped()
        self.dump_failures()
        if self.profile_examples:
            self.dump_profile(self.profile_examples)
        self.dump_summary(results)
        self.dump_commands_to_rerun_failed_examples()
        self.dump_seed()

    # Dumps

    def summary_line(self, total: int, failures: int, pending: int) -> str:
        return terminal.summary_line(total, failures, pending)

    def dump_pending(self) -> None:
        self._dump_not_run("Pending:", self.pending_examples, terminal.warning)

    def dump_skipped(self) -> None:
        self._dump_not_run("Skipped:", self.skipped_examples, terminal.info)

    def _dump_not_run(
        self, heading: str, examples: list[Example], color: Callable[[str], str]
    ) -> None:
        if not examples:
            return
        self._write()
        self._write(heading)
        for example in examples:
            result = example.execution_result
            self._write(color(f"{INDENT}{example.full_description}"))
            self._write(terminal.info(f"{INDENT * 2}# {result.pending_message}"))
            self._write(terminal.info(f"{INDENT * 2}# {example.location}"))
            self._dump_shared_group_info(example)
            if result.pending_exception is not None:
                self._write(f"{INDENT * 2}{format_exception(result.pending_exception)}")

    def dump_failures(self) -> None:
        if not self.failed_examples:
            return
        self._write()
        self._write("Failures:")
        for index, example in enumerate(self.failed_examples, start=1):
            exc = example.execution_result.exception
            self._write()
            self._write(f"{INDENT}{index}) {example.full_description}")
            self._dump_shared_group_info(example)
            if exc is None:
                continue
            for line in format_exception(exc).splitlines():
                self._write(terminal.error(f"{INDENT * 2} {line}"))
            for line in user_frames(exc):
                self._write(terminal.info(f"{INDENT * 2} {line}"))

    def _dump_shared_group_info(self, example: Example) -> None:
        for group in example.group.parent_groups:
            if group.shared_group_inclusion is not None:
                name, location = group.shared_group_inclusion
                self._write(
                    terminal.info(
                        f'{INDENT * 2}# Shared Example Group: "{name}" called from {location}'
                    )
                )

    def dump_profile(self, count: int) -> None:
        """List the slowest examples and, with several top-level groups, the slowest groups."""
        examples = sorted(self.examples, key=_run_time, reverse=True)[:count]
        total_time = sum(_run_time(example) for example in self.examples)
        slowest_time = sum(_run_time(example) for example in examples)
        percentage = (slowest_time / total_time * 100) if total_time else 0.0
        self._write()
        self._write(
            f"Top {len(examples)} slowest examples "
            f"({format_seconds(slowest_time)}, {percentage:.1f}% of total time):"
        )
        for example in examples:
            self._write(f"{INDENT}{example.full_description}")
            self._write(
                f"{INDENT * 2}{terminal.bold(format_seconds(_run_time(example)))} {example.location}"
            )

        if len(self.top_level_groups) < 2:
            return
        averages = []
        for group in self.top_level_groups:
            group_examples = [
                example for example in self.examples
                if example.group.parent_groups[-1] is group
            ]
            if not group_examples:
                continue
            group_total = sum(_run_time(example) for example in group_examples)
            averages.append((group_total / len(group_examples), group_total, group, group_examples))
        averages.sort(key=lambda entry: entry[0], reverse=True)
        self._write()
        self._write(f"Top {min(count, len(averages))} slowest example groups:")
        for average, group_total, group, group_examples in averages[:count]:
            self._write(f"{INDENT}{group.description}")
            self._write(
                f"{INDENT * 2}{terminal.bold(format_seconds(average))} average "
                f"({format_seconds(group_total)} / {pluralize(len(group_examples), 'example')}) "
                f"{group.location}"
            )

    def dump_summary(self, results: RunResults) -> None:
        self._write()
        self._write(f"Finished in {format_seconds(self.duration)}")
        self._write(terminal.format_run_summary(results))
        if results.after_hook_errors:
            self._write(
                terminal.warning(
                    f"{pluralize(len(results.after_hook_errors), 'error')} occurred in after hooks"
                )
            )

    def dump_seed(self) -> None:
        """Print the seed so a random order can be reproduced with --seed."""
        if self.random_seed is None:
            return
        self._write()
        self._write(f"Randomized with seed {self.random_seed}")

    def dump_commands_to_rerun_failed_examples(self) -> None:
        if not self.failed_examples:
            return
        self._write()
        self._write("Failed examples:")
        self._write()
        for example in self.failed_examples:
            self._write(
                terminal.error(f"{self.command} {example.location}")
                + " "
                + terminal.info(f"# {example.full_description}")
            )


def _run_time(example: Example) -> float:
    return example.execution_result.run_time or 0.0

