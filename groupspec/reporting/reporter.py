# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Reporter contract consumed by the executor.

The executor only emits notifications; it never reads anything back from the
reporter and does not retry deliveries. The notification order for one group
is:

    group_started(group)
        case_started(example)
        case_finished(example)       once per example, result on example.execution_result
        ... nested groups ...
    group_finished(group)

``start`` and ``finish`` bracket a whole ``World.run``. ``seed`` is sent just
before ``finish`` with the random seed and whether any ordering used it.
``message`` carries free text such as filter announcements.

``Reporter`` itself implements every notification as a no-op and is used as
the null reporter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from groupspec.core.types import RunResults
    from groupspec.groups.example import Example
    from groupspec.groups.example_group import ExampleGroup


class Reporter:
    """Base reporter; every notification is a no-op."""

    def start(self, expected_count: int) -> None:
        pass

    def group_started(self, group: ExampleGroup) -> None:
        pass

    def case_started(self, example: Example) -> None:
        pass

    def case_finished(self, example: Example) -> None:
        pass

    def group_finished(self, group: ExampleGroup) -> None:
        pass

    def message(self, text: str) -> None:
        pass

    def seed(self, seed: int, used: bool) -> None:
        pass

    def finish(self, results: RunResults) -> None:
        pass


@dataclass
class Notification:
    """One recorded notification."""

    name: str
    subject: Any = None


class RecordingReporter(Reporter):
    """Reporter that keeps every notification in order.

    Attributes:
        notifications: Every notification received, in order.
        results: The RunResults passed to ``finish`` (None before that).
    """

    def __init__(self) -> None:
        self.notifications: list[Notification] = []
        self.results: RunResults | None = None

    def start(self, expected_count: int) -> None:
        self.notifications.append(Notification("start", expected_count))

    def group_started(self, group: ExampleGroup) -> None:
        self.notifications.append(Notification("group_started", group))

    def case_started(self, example: Example) -> None:
        self.notifications.append(Notification("case_started", example))

    def case_finished(self, example: Example) -> None:
        self.notifications.append(Notification("case_finished", example))

    def group_finished(self, group: ExampleGroup) -> None:
        self.notifications.append(Notification("group_finished", group))

    def message(self, text: str) -> None:
        self.notifications.append(Notification("message", text))

    def seed(self, seed: int, used: bool) -> None:
        self.notifications.append(Notification("seed", (seed, used)))

    def finish(self, results: RunResults) -> None:
        self.results = results
        self.notifications.append(Notification("finish", results))

    def names(self) -> list[str]:
        """Names of the recorded notifications, in order."""
        return [notification.name for notification in self.notifications]

    @property
    def finished_examples(self) -> list[Example]:
        return [n.subject for n in self.notifications if n.name == "case_finished"]

    @property
    def started_groups(self) -> list[ExampleGroup]:
        return [n.subject for n in self.notifications if n.name == "group_started"]

    @property
    def messages(self) -> list[str]:
        return [n.subject for n in self.notifications if n.name == "message"]
