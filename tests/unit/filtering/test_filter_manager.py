# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for FilterManager inclusion and exclusion rules."""

import re

from groupspec.filtering.filter_manager import FilterManager, reconcile_opposing_filters


class TestShouldInclude:
    """Inclusion and exclusion decisions."""

    def test_no_rules_include_everything(self) -> None:
        """Without rules every node is included."""
        manager = FilterManager()

        assert manager.should_include({})
        assert manager.should_include({"slow": True})
        assert not manager.has_filters

    def test_inclusion_rules_must_all_match(self) -> None:
        """Every inclusion rule has to match."""
        manager = FilterManager(include={"focus": True, "db": "pg"})

        assert manager.should_include({"focus": True, "db": "pg"})
        assert not manager.should_include({"focus": True})

    def test_exclusion_wins_over_inclusion(self) -> None:
        """A matching exclusion rule excludes an otherwise included node."""
        manager = FilterManager(include={"focus": True}, exclude={"slow": True})

        assert manager.should_include({"focus": True})
        assert not manager.should_include({"focus": True, "slow": True})

    def test_conditional_filters(self) -> None:
        """Falsy "if" and truthy "unless" metadata always exclude."""
        manager = FilterManager()

        assert not manager.should_include({"if": False})
        assert not manager.should_include({"unless": True})
        assert manager.should_include({"if": True, "unless": False})

    def test_prune_keeps_order(self) -> None:
        """prune keeps the matching nodes in their original order."""

        class Node:
            def __init__(self, metadata: dict) -> None:
                self.metadata = metadata

        nodes = [Node({"n": 1, "slow": True}), Node({"n": 2}), Node({"n": 3})]
        manager = FilterManager(exclude={"slow": True})

        assert [node.metadata["n"] for node in manager.prune(nodes)] == [2, 3]


class TestOppositeRules:
    """Rules for one tag live in at most one direction."""

    def test_include_removes_exclusion_for_same_tag(self) -> None:
        """Including a tag drops its exclusion rule."""
        manager = FilterManager(exclude={"slow": True, "db": True})
        manager.include({"slow": True})

        assert manager.exclusions.rules == {"db": True}
        assert manager.inclusions.rules == {"slow": True}

    def test_exclude_removes_inclusion_for_same_tag(self) -> None:
        """Excluding a tag drops its inclusion rule."""
        manager = FilterManager(include={"slow": True})
        manager.exclude({"slow": True})

        assert manager.inclusions.rules == {}
        assert manager.exclusions.rules == {"slow": True}

    def test_include_only_replaces_rules(self) -> None:
        """include_only replaces every inclusion rule."""
        manager = FilterManager(include={"focus": True})
        manager.include_only({"db": "pg"})

        assert manager.inclusions.rules == {"db": "pg"}


class TestLowPriority:
    """Low-priority rules never override explicit ones."""

    def test_existing_rules_win(self) -> None:
        """Existing inclusion rules are kept over low-priority ones."""
        manager = FilterManager(include={"focus": True})
        manager.include_with_low_priority({"focus": False, "fast": True})

        assert manager.inclusions.rules == {"focus": True, "fast": True}

    def test_low_priority_does_not_contradict_opposite(self) -> None:
        """A low-priority exclusion equal to an inclusion is dropped."""
        manager = FilterManager(include={"slow": True})
        manager.exclude_with_low_priority({"slow": True, "db": True})

        assert manager.exclusions.rules == {"db": True}
        assert manager.inclusions.rules == {"slow": True}


class TestStandaloneFilters:
    """Location and full description filters replace other inclusion rules."""

    def test_full_description_replaces_rules(self) -> None:
        """A description filter clears other rules and ignores exclusions."""
        manager = FilterManager(include={"focus": True}, exclude={"slow": True})
        manager.include({"full_description": re.compile("widget")})

        assert manager.inclusions.rules.keys() == {"full_description"}
        assert manager.exclusions.rules == {}
        assert manager.should_include({"full_description": "a widget", "slow": True})
        assert not manager.should_include({"full_description": "a gadget"})

    def test_later_inclusions_are_ignored(self) -> None:
        """Ordinary inclusion rules added afterwards are ignored."""
        manager = FilterManager(include={"full_description": re.compile("widget")})
        manager.include({"focus": True})

        assert "focus" not in manager.inclusions

    def test_conditional_filters_still_apply(self) -> None:
        """Standalone filters still honour the conditional exclusions."""
        manager = FilterManager(include={"full_description": re.compile("widget")})

        assert not manager.should_include({"full_description": "widget", "if": False})

    def test_add_location_accumulates_lines(self) -> None:
        """Several add_location calls for one file extend its lines."""
        manager = FilterManager()
        manager.add_location("/tmp/spec.py", [3])
        manager.add_location("/tmp/spec.py", [9])

        assert manager.inclusions.rules["locations"] == {"/tmp/spec.py": [3, 9]}


class TestMerge:
    """Merging a later filter configuration over an earlier one."""

    def test_later_inclusion_wins_over_earlier_exclusion(self) -> None:
        """A tag included later is no longer excluded."""
        merged = FilterManager(exclude={"slow": True}).merge(FilterManager(include={"slow": True}))

        assert merged.inclusions.rules == {"slow": True}
        assert merged.exclusions.rules == {}

    def test_later_exclusion_wins_over_earlier_inclusion(self) -> None:
        """A tag excluded later is no longer included."""
        merged = FilterManager(include={"slow": True}).merge(FilterManager(exclude={"slow": True}))

        assert merged.inclusions.rules == {}
        assert merged.exclusions.rules == {"slow": True}

    def test_same_direction_is_last_writer_wins(self) -> None:
        """The later value of a tag replaces the earlier one."""
        earlier = FilterManager(include={"speed": "fast", "db": True})
        merged = earlier.merge(FilterManager(include={"speed": "slow"}))

        assert merged.inclusions.rules == {"speed": "slow", "db": True}

    def test_reconcile_opposing_filters(self) -> None:
        """Tags in the pending positive rules leave the merged negative rules."""
        merged = {"exclusion_filter": {"slow": True, "db": True}}
        pending = {"inclusion_filter": {"slow": True}}

        reconcile_opposing_filters(merged, pending, "inclusion_filter", "exclusion_filter")

        assert merged == {"exclusion_filter": {"db": True}}
