# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for spec discovery, loading and the Runner."""

import textwrap
from pathlib import Path

import pytest

from groupspec.core.constants import EXIT_FAILURE, EXIT_SUCCESS
from groupspec.core.errors import SharedGroupNotFoundError
from groupspec.groups.world import World
from groupspec.reporting.reporter import RecordingReporter
from groupspec.runner.configuration_options import ConfigurationOptions
from groupspec.runner.runner import Runner, SpecDiscovery, load_spec_file, split_location

PASSING_SPEC = textwrap.dedent(
    """
    def register(world):
        group = world.describe("Calculator")

        @group.it("adds")
        def _(ctx):
            assert 1 + 1 == 2

        @group.it("subtracts", slow=True)
        def _(ctx):
            assert 2 - 1 == 1
    """
)

FAILING_SPEC = textwrap.dedent(
    """
    def register(world):
        group = world.describe("Broken")
        group.it("fails", lambda ctx: 1 / 0)
    """
)


def write_spec(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestSplitLocation:
    """Paths with line numbers."""

    @pytest.mark.parametrize(
        ("argument", "expected"),
        [
            ("spec", ("spec", [])),
            ("spec/a_spec.py:12", ("spec/a_spec.py", [12])),
            ("spec/a_spec.py:12:30", ("spec/a_spec.py", [12, 30])),
            ("C:/spec/a_spec.py:3", ("C:/spec/a_spec.py", [3])),
        ],
    )
    def test_split_location(self, argument: str, expected: tuple) -> None:
        """Trailing ":N" parts are line numbers."""
        assert split_location(argument) == expected


class TestSpecDiscovery:
    """Finding spec files."""

    def test_directories_are_searched_recursively(self, tmp_path: Path) -> None:
        """Only *_spec.py files are found, sorted, skipping private files."""
        write_spec(tmp_path, "b_spec.py", PASSING_SPEC)
        write_spec(tmp_path, "nested/a_spec.py", PASSING_SPEC)
        write_spec(tmp_path, "_private_spec.py", PASSING_SPEC)
        write_spec(tmp_path, "helpers.py", "")

        found = SpecDiscovery([tmp_path]).discover()

        assert [path.relative_to(tmp_path).as_posix() for path in found] == [
            "b_spec.py",
            "nested/a_spec.py",
        ]

    def test_explicit_files_are_kept_once(self, tmp_path: Path) -> None:
        """An explicitly named file is used even without the suffix, but only once."""
        helper = write_spec(tmp_path, "checks.py", PASSING_SPEC)

        assert SpecDiscovery([helper, helper]).discover() == [helper]

    def test_missing_path(self, tmp_path: Path) -> None:
        """A missing path is an error."""
        with pytest.raises(FileNotFoundError, match="No such file or directory"):
            SpecDiscovery([tmp_path / "missing"]).discover()


class TestLoadSpecFile:
    """Importing spec files."""

    def test_register_is_called(self, tmp_path: Path, world: World) -> None:
        """register(world) defines the file's groups."""
        path = write_spec(tmp_path, "calc_spec.py", PASSING_SPEC)

        load_spec_file(path, world)

        [group] = world.example_groups
        assert group.description == "Calculator"
        assert group.file_path.endswith("calc_spec.py")

    def test_missing_register_is_skipped(
        self, tmp_path: Path, world: World, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Files without register are skipped with a warning."""
        path = write_spec(tmp_path, "empty_spec.py", "VALUE = 1\n")

        module = load_spec_file(path, world)

        assert module.VALUE == 1
        assert world.example_groups == []
        assert "no register(world) function" in caplog.text

    def test_definition_errors_propagate(self, tmp_path: Path, world: World) -> None:
        """Errors raised while defining groups reach the caller."""
        path = write_spec(
            tmp_path,
            "missing_spec.py",
            "def register(world):\n    world.describe('x').include_examples('nope')\n",
        )

        with pytest.raises(SharedGroupNotFoundError):
            load_spec_file(path, world)


class TestRunner:
    """End to end runs through the Runner."""

    def test_passing_run(self, tmp_path: Path) -> None:
        """A passing suite exits successfully."""
        write_spec(tmp_path, "calc_spec.py", PASSING_SPEC)
        reporter = RecordingReporter()

        options = ConfigurationOptions({"files_or_directories_to_run": [str(tmp_path)]})

        assert Runner(options, reporter).run() == EXIT_SUCCESS
        assert reporter.results is not None
        assert reporter.results.passed == 2

    def test_failing_run(self, tmp_path: Path) -> None:
        """A failing example gives the failure exit code."""
        write_spec(tmp_path, "broken_spec.py", FAILING_SPEC)

        runner = Runner(ConfigurationOptions({"files_or_directories_to_run": [str(tmp_path)]}))

        assert runner.run() == EXIT_FAILURE

    def test_filters_from_options(self, tmp_path: Path) -> None:
        """Exclusion filters from the options apply to loaded specs."""
        write_spec(tmp_path, "calc_spec.py", PASSING_SPEC)
        reporter = RecordingReporter()
        options = ConfigurationOptions(
            {"files_or_directories_to_run": [str(tmp_path)], "exclusion_filter": {"slow": True}}
        )

        Runner(options, reporter).run()

        assert [example.description for example in reporter.finished_examples] == ["adds"]

    def test_line_number_arguments(self, tmp_path: Path) -> None:
        """path:line arguments only run the example declared there."""
        path = write_spec(tmp_path, "calc_spec.py", PASSING_SPEC)
        line = PASSING_SPEC.splitlines().index('    @group.it("subtracts", slow=True)') + 1
        reporter = RecordingReporter()

        Runner(
            ConfigurationOptions({"files_or_directories_to_run": [f"{path}:{line}"]}), reporter
        ).run()

        assert [example.description for example in reporter.finished_examples] == ["subtracts"]
