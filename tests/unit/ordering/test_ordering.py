# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for ordering strategies and the ordering registry."""

import pytest

from groupspec.core.errors import InvalidOptionError
from groupspec.groups.world import World
from groupspec.ordering.registry import Custom, Identity, OrderingRegistry, Random
from groupspec.reporting.reporter import RecordingReporter
from groupspec.runner.configuration import Configuration


def passing(ctx: object) -> None:
    pass


class TestStrategies:
    """Behaviour of the built-in strategies."""

    def test_identity_keeps_definition_order(self) -> None:
        """The defined ordering returns the items unchanged."""
        assert Identity().order([3, 1, 2]) == [3, 1, 2]

    def test_random_is_reproducible_for_a_seed(self) -> None:
        """The same seed always yields the same permutation."""
        items = list(range(20))
        first = Random(lambda: 42).order(items)
        second = Random(lambda: 42).order(items)

        assert first == second
        assert sorted(first) == items
        assert items == list(range(20))

    def test_random_reads_the_seed_on_every_call(self) -> None:
        """A seed changed after registration is honoured."""
        seeds = iter([1, 1, 2])
        strategy = Random(lambda: next(seeds))
        items = list(range(30))

        assert strategy.order(items) == strategy.order(items)
        assert strategy.seed == 2

    def test_custom_wraps_a_callable(self) -> None:
        """A plain callable receives the full sibling list."""
        strategy = Custom(lambda items: list(reversed(items)))

        assert strategy.order((1, 2, 3)) == [3, 2, 1]


class TestOrderingRegistry:
    """Lookup and resolution of named strategies."""

    def test_builtin_strategies(self) -> None:
        """defined, random and global are registered; global starts as defined."""
        registry = OrderingRegistry(seed_source=lambda: 1)

        assert "defined" in registry
        assert "random" in registry
        assert registry.global_ordering is registry.fetch("defined")

    def test_register_wraps_callables(self) -> None:
        """Registering a plain callable wraps it in a Custom strategy."""
        registry = OrderingRegistry(seed_source=lambda: 1)
        registry.register("reverse", lambda items: list(reversed(items)))

        assert isinstance(registry.fetch("reverse"), Custom)
        assert registry.resolve({"order": "reverse"}).order([1, 2, 3]) == [3, 2, 1]

    def test_use_global(self) -> None:
        """use_global switches the strategy used without order metadata."""
        registry = OrderingRegistry(seed_source=lambda: 1)
        registry.use_global("random")

        assert registry.resolve({}) is registry.fetch("random")

    def test_fetch_unknown_name(self) -> None:
        """Unknown names raise unless a default factory is given."""
        registry = OrderingRegistry(seed_source=lambda: 1)

        with pytest.raises(KeyError):
            registry.fetch("bogus")
        assert isinstance(registry.fetch("bogus", Identity), Identity)

    def test_unknown_ordering_falls_back_with_warning(self) -> None:
        """Unknown order metadata warns with the location and uses the global ordering."""
        registry = OrderingRegistry(seed_source=lambda: 1)
        messages: list[str] = []

        strategy = registry.resolve(
            {"order": "bogus", "location": "./spec/widget_spec.py:3"}, warn=messages.append
        )

        assert strategy is registry.global_ordering
        assert len(messages) == 1
        assert "order='bogus'" in messages[0]
        assert "Unrecognized ordering specified at: ./spec/widget_spec.py:3" in messages[0]


class TestConfigurationOrder:
    """Configuration.order and Configuration.seed."""

    def test_order_defaults_to_defined(self) -> None:
        """A new configuration runs in definition order."""
        assert Configuration().order == "defined"

    def test_order_with_seed(self) -> None:
        """"random:SEED" selects random ordering with that seed."""
        config = Configuration()
        config.order = "random:1234"

        assert config.order == "random"
        assert config.seed == 1234

    def test_rand_alias(self) -> None:
        """"rand" is accepted for random."""
        config = Configuration()
        config.order = "rand"

        assert config.order == "random"

    def test_setting_seed_switches_to_random(self) -> None:
        """Setting a seed implies random ordering."""
        config = Configuration()
        config.seed = 7

        assert config.order == "random"
        assert config.seed == 7

    def test_custom_global_ordering(self) -> None:
        """Registering "global" replaces the default ordering."""
        config = Configuration()
        config.register_ordering("global", lambda items: list(reversed(items)))

        assert config.order == "custom"

    @pytest.mark.parametrize("value", ["bogus", "random:abc"])
    def test_invalid_order(self, value: str) -> None:
        """Unknown names and non-integer seeds are rejected."""
        with pytest.raises(InvalidOptionError):
            Configuration().order = value

    def test_invalid_seed(self) -> None:
        """Non-integer seeds are rejected."""
        with pytest.raises(InvalidOptionError, match="Invalid seed"):
            Configuration().seed = "abc"  # type: ignore[assignment]


class TestOrderingDuringRun:
    """Strategies applied at every group boundary."""

    def test_group_order_metadata_applies_to_examples_and_children(
        self, world: World, reporter: RecordingReporter
    ) -> None:
        """A group's ordering is inherited by nested groups."""
        world.configuration.register_ordering("reverse", lambda items: list(reversed(items)))
        group = world.describe("group", order="reverse")
        group.it("first", passing)
        group.it("second", passing)
        nested = group.describe("nested")
        nested.it("third", passing)
        nested.it("fourth", passing)

        world.run(reporter)

        assert [example.description for example in reporter.finished_examples] == [
            "second",
            "first",
            "fourth",
            "third",
        ]

    def test_global_ordering_orders_top_level_groups(
        self, world: World, reporter: RecordingReporter
    ) -> None:
        """Top-level groups are ordered by the global ordering."""
        world.configuration.register_ordering("global", lambda items: list(reversed(items)))
        world.describe("first").it("a", passing)
        world.describe("second").it("b", passing)

        world.run(reporter)

        assert [group.description for group in reporter.started_groups] == ["second", "first"]

    def test_same_seed_same_order(self, reporter: RecordingReporter) -> None:
        """Two runs with the same seed execute in the same order."""

        def run_with_seed(seed: int) -> list[str]:
            config = Configuration(warn=lambda message: None)
            config.seed = seed
            world = World(config)
            for name in "abcdefgh":
                world.describe(f"group {name}").it(f"example {name}", passing)
            recorder = RecordingReporter()
            world.run(recorder)
            return [example.description for example in recorder.finished_examples]

        assert run_with_seed(99) == run_with_seed(99)
        assert sorted(run_with_seed(99)) == [f"example {name}" for name in "abcdefgh"]

    def test_unknown_group_ordering_warns(
        self, world: World, reporter: RecordingReporter, diagnostics: list[str]
    ) -> None:
        """Unknown order metadata sends a diagnostic and still runs everything."""
        group = world.describe("group", order="bogus")
        group.it("works", passing)

        assert world.run(reporter)
        assert any(group.location in message for message in diagnostics)
