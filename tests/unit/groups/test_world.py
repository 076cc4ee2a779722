# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tests for the World run driver."""

import inspect

from groupspec.core.types import ExecutionStatus
from groupspec.groups.context import ExampleContext
from groupspec.groups.world import World
from groupspec.reporting.reporter import RecordingReporter


def passing(ctx: ExampleContext) -> None:
    pass


def current_line() -> int:
    frame = inspect.currentframe()
    assert frame is not None and frame.f_back is not None
    return frame.f_back.f_lineno


class TestNotifications:
    """Reporter notifications for a run."""

    def test_notification_order(self, world: World, reporter: RecordingReporter) -> None:
        """Groups bracket their examples and nested groups."""
        group = world.describe("group")
        group.it("first", passing)
        group.describe("nested").it("second", passing)

        world.run(reporter)

        assert reporter.names() == [
            "start",
            "group_started",
            "case_started",
            "case_finished",
            "group_started",
            "case_started",
            "case_finished",
            "group_finished",
            "group_finished",
            "seed",
            "finish",
        ]
        assert reporter.notifications[0].subject == 2

    def test_seed_notification(self, world: World, reporter: RecordingReporter) -> None:
        """The seed is reported with whether a random ordering used it."""
        world.describe("group").it("works", passing)

        world.run(reporter)
        assert reporter.notifications[-2].subject == (world.configuration.seed, False)

        world.configuration.seed = 99
        world.run(reporter)
        assert reporter.notifications[-2].name == "seed"
        assert reporter.notifications[-2].subject == (99, True)

    def test_results_passed_to_finish(self, world: World, reporter: RecordingReporter) -> None:
        """finish receives the counts of the run."""
        group = world.describe("group")
        group.it("passes", passing)
        group.it("pending")
        group.xit("skipped", passing)

        world.run(reporter)

        assert reporter.results is world.results
        assert str(world.results) == "3/1/0/1/1"

    def test_runs_without_reporter(self, world: World) -> None:
        """A run without reporter uses the null reporter."""
        example = world.describe("group").it("passes", passing)

        assert world.run()
        assert example.execution_result.status == ExecutionStatus.PASSED


class TestFilterAnnouncements:
    """Messages about active filters."""

    def test_run_options_are_announced(self, world: World, reporter: RecordingReporter) -> None:
        """Active inclusion and exclusion rules are sent as messages."""
        manager = world.configuration.filter_manager
        manager.include({"focus": True})
        manager.exclude({"slow": True})
        world.describe("group").it("focused", passing, focus=True)

        world.run(reporter)

        assert reporter.messages == [
            "Run options: include {'focus': True}",
            "Run options: exclude {'slow': True}",
        ]

    def test_run_all_when_everything_filtered(
        self, world: World, reporter: RecordingReporter
    ) -> None:
        """Inclusion rules that match nothing are dropped when configured."""
        world.configuration.run_all_when_everything_filtered = True
        world.configuration.filter_manager.include({"focus": True})
        world.describe("group").it("unfocused", passing)

        world.run(reporter)

        assert reporter.messages == ["All examples were filtered out; ignoring {'focus': True}"]
        assert [example.description for example in reporter.finished_examples] == ["unfocused"]

    def test_everything_filtered_without_fallback(
        self, world: World, reporter: RecordingReporter
    ) -> None:
        """Without the fallback nothing runs and the run succeeds."""
        world.configuration.filter_manager.include({"focus": True})
        world.describe("group").it("unfocused", passing)

        assert world.run(reporter)
        assert reporter.finished_examples == []
        start = next(n for n in reporter.notifications if n.name == "start")
        assert start.subject == 0
        assert reporter.names().index("message") < reporter.names().index("start")

    def test_low_priority_focus_filter(self, world: World, reporter: RecordingReporter) -> None:
        """filter_run only selects focused examples when there are any."""
        world.configuration.filter_run(focus=True)
        world.configuration.run_all_when_everything_filtered = True
        group = world.describe("group")
        group.it("plain", passing)
        group.fit("focused", passing)

        world.run(reporter)

        assert [example.description for example in reporter.finished_examples] == ["focused"]


class TestLocationFiltering:
    """Running only the nodes declared at given lines."""

    def test_example_line(self, world: World, reporter: RecordingReporter) -> None:
        """A line inside an example selects that example."""
        line = current_line()
        group = world.describe("located")
        group.it("first", passing)
        group.it("second", passing)
        world.configuration.filter_manager.add_location(__file__, [line + 3])

        world.run(reporter)

        assert [example.description for example in reporter.finished_examples] == ["second"]

    def test_group_line_selects_every_example(
        self, world: World, reporter: RecordingReporter
    ) -> None:
        """The line of a group selects all of its examples."""
        line = current_line()
        group = world.describe("located")
        group.it("first", passing)
        group.describe("nested").it("second", passing)
        world.describe("elsewhere", caller=["/tmp/elsewhere_spec.py:1"]).it(
            "other file", passing, caller=["/tmp/elsewhere_spec.py:2"]
        )
        world.configuration.filter_manager.add_location(__file__, [line + 1])

        world.run(reporter)

        assert [example.description for example in reporter.finished_examples] == [
            "first",
            "second",
            "other file",
        ]

    def test_preceding_declaration_line(self, world: World) -> None:
        """Lines between declarations resolve to the previous declaration."""
        line = current_line()
        group = world.describe("located")

        group.it("works", passing)

        assert world.preceding_declaration_line(__file__, line + 2) == line + 1
        assert world.preceding_declaration_line(__file__, line + 4) == line + 3
        assert world.preceding_declaration_line(__file__, line) is None


class TestWorldQueries:
    """Lookups over every defined node."""

    def test_all_groups_and_examples(self, world: World) -> None:
        """all_example_groups and all_examples walk the whole tree."""
        group = world.describe("group")
        nested = group.describe("nested")
        first = group.it("first", passing)
        second = nested.it("second", passing)
        other = world.describe("other")

        assert world.all_example_groups() == [group, nested, other]
        assert world.all_examples() == [first, second]
        assert world.example_count() == 2
