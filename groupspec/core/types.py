# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Core types for example execution results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ExecutionStatus(str, Enum):
    """Outcome of a single example.

    NOT_RUN: The example was defined but never executed
    PASSED: Body and before hooks completed without raising
    FAILED: Body or a before hook raised, or a pending example passed
    PENDING: Example was expected to fail and did
    SKIPPED: Example was intentionally not executed
    """

    NOT_RUN = "not_run"
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"
    SKIPPED = "skipped"


@dataclass
class ExecutionResult:
    """Mutable execution record owned by one example.

    Created empty when the example is defined and filled in exactly once by the
    executor.

    Attributes:
        status: Outcome of the run
        exception: The failure captured for a failed example
        pending_message: Reason recorded for pending or skipped examples
        pending_exception: The (expected) failure of a pending example
        pending_fixed: True when a pending example unexpectedly passed
        started_at: Clock reading when the example started
        finished_at: Clock reading when the example finished
        run_time: Seconds spent running the example
    """

    status: ExecutionStatus = ExecutionStatus.NOT_RUN
    exception: BaseException | None = None
    pending_message: str | None = None
    pending_exception: BaseException | None = None
    pending_fixed: bool | None = None
    started_at: float | None = None
    finished_at: float | None = None
    run_time: float | None = None

    @property
    def was_run(self) -> bool:
        """Check if the executor already recorded an outcome."""
        return self.status != ExecutionStatus.NOT_RUN

    def record_finished(self, status: ExecutionStatus, finished_at: float) -> None:
        """Store the final status and timing."""
        self.status = status
        self.finished_at = finished_at
        if self.started_at is not None:
            self.run_time = finished_at - self.started_at

    def to_dict(self) -> dict[str, Any]:
        """Dictionary of the recorded values, omitting everything still unset."""
        values: dict[str, Any] = {
            "status": None if self.status == ExecutionStatus.NOT_RUN else self.status,
            "exception": self.exception,
            "pending_message": self.pending_message,
            "pending_exception": self.pending_exception,
            "pending_fixed": self.pending_fixed,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "run_time": self.run_time,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass
class RunResults:
    """Aggregated outcome counts for one run.

    Attributes:
        passed: Number of examples that passed
        failed: Number of examples that failed
        pending: Number of examples that were pending
        skipped: Number of examples that were skipped
        after_hook_errors: Messages of errors raised in after hooks

    Properties:
        total: Total number of examples that reported a result
    """

    passed: int = 0
    failed: int = 0
    pending: int = 0
    skipped: int = 0
    after_hook_errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Total number of examples (always computed from counts)."""
        return self.passed + self.failed + self.pending + self.skipped

    def add(self, result: ExecutionResult) -> None:
        """Count one finished example."""
        if result.status == ExecutionStatus.PASSED:
            self.passed += 1
        elif result.status == ExecutionStatus.FAILED:
            self.failed += 1
        elif result.status == ExecutionStatus.PENDING:
            self.pending += 1
        elif result.status == ExecutionStatus.SKIPPED:
            self.skipped += 1

    @property
    def success_rate(self) -> float:
        """Success rate excluding pending and skipped examples (0.0-100.0)."""
        executed = self.passed + self.failed
        if executed > 0:
            return (self.passed / executed) * 100
        return 0.0

    @property
    def has_failures(self) -> bool:
        """Check if any example failed."""
        return self.failed > 0

    @property
    def is_empty(self) -> bool:
        """Check if no examples reported a result."""
        return self.total == 0

    def __str__(self) -> str:
        """Concise string representation: total/passed/failed/pending/skipped."""
        return f"{self.total}/{self.passed}/{self.failed}/{self.pending}/{self.skipped}"
