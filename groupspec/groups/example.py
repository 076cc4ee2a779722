# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""A single runnable example and its execution protocol.

Running an example goes through these steps; the result is recorded on the
example's ExecutionResult exactly once per run (``World.run`` gives every
example a fresh ExecutionResult first):

    1. ``skip`` metadata: not executed, recorded skipped
    2. no body: not executed, recorded pending ("Not yet implemented")
    3. dry run: not executed, recorded passed (or pending)
    4. otherwise the around hooks wrap: before hooks, body, pending check,
       after hooks

Errors from before hooks or the body become the example's failure (or its
expected failure when the example is pending). Errors from after hooks are
reported through the diagnostic sink and never change the status.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from groupspec.core.constants import NO_REASON_GIVEN, NOT_YET_IMPLEMENTED, PENDING_FIXED_MESSAGE
from groupspec.core.errors import PendingExampleFixedError, SkipExample
from groupspec.core.metadata import CallerLocation, Metadata, build_example_metadata
from groupspec.core.types import ExecutionResult, ExecutionStatus
from groupspec.groups.context import ExampleContext

if TYPE_CHECKING:
    from groupspec.groups.example_group import ExampleGroup
    from groupspec.reporting.reporter import Reporter

logger = logging.getLogger(__name__)

ExampleBody = Callable[[ExampleContext], Any]


def metadata_reason(metadata: Metadata, key: str) -> str | None:
    """Reason string of a ``skip``/``pending`` metadata value, None when unset."""
    value = metadata.get(key)
    if value is None or value is False:
        return None
    if value is True:
        return NO_REASON_GIVEN
    return str(value)


class Example:
    """A single test case owned by an ExampleGroup.

    Attributes:
        group: The owning group
        id: Stable integer id in the World's node arena
        metadata: Composed metadata (user keys inherited from the group)
        body: ``body(ctx)`` or None for a not yet implemented example
        execution_result: Filled in once the example has run
    """

    clock: Callable[[], float] = staticmethod(time.perf_counter)  # type: ignore[assignment]

    def __init__(
        self,
        group: ExampleGroup,
        description_args: Sequence[Any],
        user_metadata: Metadata,
        body: ExampleBody | None = None,
        location: CallerLocation | None = None,
    ) -> None:
        self.group = group
        self.body = body
        self.execution_result = ExecutionResult()
        self.metadata = build_example_metadata(
            group.metadata,
            description_args,
            user_metadata,
            self.execution_result,
            block=body,
            location=location,
            format_docstring=group.world.configuration.docstring_formatter,
        )
        self.id = group.world.register_node(self)
        self._skipped = False

    def __call__(self, body: ExampleBody) -> Example:
        """Attach ``body``; enables ``@group.it("...")`` decorator usage."""
        self.body = body
        self.metadata["block"] = body
        return self

    @property
    def world(self) -> Any:
        return self.group.world

    @property
    def description(self) -> str:
        return self.metadata["description"]

    @property
    def full_description(self) -> str:
        return self.metadata["full_description"]

    @property
    def location(self) -> str:
        return self.metadata["location"]

    @property
    def file_path(self) -> str:
        return self.metadata["file_path"]

    @property
    def line_number(self) -> int:
        return self.metadata["line_number"]

    @property
    def is_pending(self) -> bool:
        return self.execution_result.pending_message is not None and not self._skipped

    @property
    def is_skipped(self) -> bool:
        return self._skipped

    def reset(self) -> None:
        """Forget the outcome of a previous run."""
        self.execution_result = ExecutionResult()
        self.metadata["execution_result"] = self.execution_result
        self._skipped = False

    def mark_pending(self, message: str) -> None:
        self.execution_result.pending_message = message

    def mark_skipped(self, message: str) -> None:
        self._skipped = True
        self.execution_result.pending_message = message

    # Execution

    def run(self, group_state: Metadata, reporter: Reporter) -> bool:
        """Run the example with a copy of the group state.

        Returns:
            False if the example failed, True otherwise.
        """
        self._start(reporter)
        skip_reason = metadata_reason(self.metadata, "skip")
        pending_reason = metadata_reason(self.metadata, "pending")
        if pending_reason is not None:
            self.mark_pending(pending_reason)

        if skip_reason is not None:
            self.mark_skipped(skip_reason)
        elif self.body is None:
            self.mark_pending(pending_reason or NOT_YET_IMPLEMENTED)
        elif self.world.configuration.dry_run:
            logger.debug(f"Dry run: not executing '{self.full_description}'")
        else:
            context = ExampleContext(self.group, self, group_state)
            executor = self.world.hook_executor
            try:
                executor.run_around_example(self, context, lambda: self._run_inner(context))
            except SkipExample as exc:
                self.mark_skipped(exc.message)
            except Exception as exc:
                self._set_exception(exc)
        return self._finish(reporter)

    def _run_inner(self, context: ExampleContext) -> None:
        executor = self.world.hook_executor
        try:
            executor.run_before_example(self, context)
            self.body(context)  # type: ignore[misc]
            self._verify_pending_failed()
        except SkipExample as exc:
            self.mark_skipped(exc.message)
        except Exception as exc:
            self._set_exception(exc)
        executor.run_after_example(self, context)

    def _verify_pending_failed(self) -> None:
        result = self.execution_result
        if self.is_pending and result.pending_exception is None:
            result.pending_fixed = True
            raise PendingExampleFixedError(PENDING_FIXED_MESSAGE)

    def _set_exception(self, exc: BaseException) -> None:
        result = self.execution_result
        if self.is_pending and not isinstance(exc, PendingExampleFixedError):
            if result.pending_exception is None:
                result.pending_exception = exc
            return
        if result.exception is None:
            result.exception = exc
        else:
            logger.debug(f"Ignoring additional error for '{self.full_description}': {exc!r}")

    def fail_with_exception(self, reporter: Reporter, exc: BaseException) -> bool:
        """Record ``exc`` as the failure of this example without running it."""
        self._start(reporter)
        self.execution_result.exception = exc
        return self._finish(reporter)

    def skip_with_exception(self, reporter: Reporter, exc: SkipExample) -> bool:
        """Record this example as skipped without running it."""
        self._start(reporter)
        self.mark_skipped(exc.message)
        return self._finish(reporter)

    def _start(self, reporter: Reporter) -> None:
        self.execution_result.started_at = self.clock()
        reporter.case_started(self)

    def _finish(self, reporter: Reporter) -> bool:
        result = self.execution_result
        if result.exception is not None:
            status = ExecutionStatus.FAILED
        elif self._skipped:
            status = ExecutionStatus.SKIPPED
        elif result.pending_message is not None:
            status = ExecutionStatus.PENDING
        else:
            status = ExecutionStatus.PASSED
        result.record_finished(status, self.clock())
        logger.debug(f"'{self.full_description}' finished: {status.value}")
        self.world.example_finished(self)
        reporter.case_finished(self)
        return status != ExecutionStatus.FAILED

    def __repr__(self) -> str:
        return f"Example({self.full_description!r}, location={self.location!r})"
