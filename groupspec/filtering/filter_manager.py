# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Inclusion and exclusion filtering of examples by metadata.

The FilterManager holds two rule sets:

    - Inclusion rules: an example must satisfy every inclusion rule. With no
      inclusion rules, everything that is not excluded is included.
    - Exclusion rules: an example matching any exclusion rule is filtered out.
      The conditional rules ``if`` (falsy value) and ``unless`` (truthy value)
      are always present.

The two sets are opposites: adding a rule for a tag in one set removes the rule
for that tag from the other, so a later source can never accidentally re-include
something an earlier one excluded (or the reverse) for the same tag.

``locations`` and ``full_description`` are standalone inclusion filters: once
one is set it replaces every other inclusion rule, ignores user exclusions, and
further ordinary inclusion rules are ignored.

Usage:
    >>> manager = FilterManager()
    >>> manager.include({"focus": True})
    >>> manager.exclude({"slow": True})
    >>> manager.should_include({"focus": "true"})
    True
    >>> manager.should_include({"focus": True, "slow": True})
    False
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from typing import Any, Protocol, TypeVar

from groupspec.filtering.metadata_filter import (
    LOCATIONS_KEY,
    DeclarationLineResolver,
    all_apply,
    any_apply,
)

logger = logging.getLogger(__name__)

FULL_DESCRIPTION_KEY = "full_description"
STANDALONE_FILTERS = (LOCATIONS_KEY, FULL_DESCRIPTION_KEY)

CONDITIONAL_FILTERS: Mapping[str, Any] = {
    "if": lambda value: not value,
    "unless": lambda value: bool(value),
}


class HasMetadata(Protocol):
    metadata: Mapping[str, Any]


NodeT = TypeVar("NodeT", bound=HasMetadata)


class FilterRules:
    """One direction (inclusion or exclusion) of filter rules."""

    def __init__(self, rules: Mapping[str, Any] | None = None) -> None:
        self.rules: dict[str, Any] = dict(rules or {})
        self.opposite: FilterRules | None = None

    def add(self, updated: Mapping[str, Any]) -> None:
        """Add rules; the same tags are removed from the opposite set."""
        self.rules.update(updated)
        self._delete_from_opposite(updated.keys())

    def add_with_low_priority(self, updated: Mapping[str, Any]) -> None:
        """Add rules without overriding existing ones or contradicting the opposite set."""
        merged = dict(updated)
        merged.update(self.rules)
        if self.opposite is not None:
            for key, value in self.opposite.rules.items():
                if key in merged and merged[key] == value:
                    del merged[key]
        self.rules = merged

    def use_only(self, updated: Mapping[str, Any]) -> None:
        """Replace all rules with ``updated``."""
        self._delete_from_opposite(updated.keys())
        self.rules = dict(updated)

    def delete(self, key: str) -> Any:
        return self.rules.pop(key, None)

    def clear(self) -> None:
        self.rules.clear()

    def _delete_from_opposite(self, keys: Iterable[str]) -> None:
        if self.opposite is None:
            return
        for key in keys:
            self.opposite.delete(key)

    @property
    def is_empty(self) -> bool:
        return not self.rules

    def __contains__(self, key: object) -> bool:
        return key in self.rules

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rules!r})"


class InclusionRules(FilterRules):
    """Inclusion rules; every rule must match."""

    def add(self, updated: Mapping[str, Any]) -> None:
        if not self._apply_standalone_filter(updated):
            super().add(updated)

    def add_with_low_priority(self, updated: Mapping[str, Any]) -> None:
        if not self._apply_standalone_filter(updated):
            super().add_with_low_priority(updated)

    def use_only(self, updated: Mapping[str, Any]) -> None:
        if not self._apply_standalone_filter(updated):
            super().use_only(updated)

    def add_location(self, locations: Mapping[str, list[int]]) -> None:
        self._replace_filters({LOCATIONS_KEY: dict(locations)})

    @property
    def is_standalone(self) -> bool:
        return any(key in self.rules for key in STANDALONE_FILTERS)

    def include_example(
        self, metadata: Mapping[str, Any], resolver: DeclarationLineResolver | None = None
    ) -> bool:
        if not self.rules:
            return True
        return all_apply(self.rules, metadata, resolver)

    def _apply_standalone_filter(self, updated: Mapping[str, Any]) -> bool:
        if self.is_standalone:
            logger.debug(f"Ignoring inclusion rules {dict(updated)}: standalone filter active")
            return True
        if not any(key in updated for key in STANDALONE_FILTERS):
            return False
        self._replace_filters(updated)
        return True

    def _replace_filters(self, new_rules: Mapping[str, Any]) -> None:
        self.rules = dict(new_rules)
        if self.opposite is not None:
            self.opposite.clear()


class ExclusionRules(FilterRules):
    """Exclusion rules; any matching rule excludes."""

    def include_example(
        self, metadata: Mapping[str, Any], resolver: DeclarationLineResolver | None = None
    ) -> bool:
        """Check if ``metadata`` is matched (and therefore excluded) by any rule."""
        return any_apply(self.with_conditionals(), metadata, resolver)

    def with_conditionals(self) -> dict[str, Any]:
        rules = dict(CONDITIONAL_FILTERS)
        rules.update(self.rules)
        return rules


def reconcile_opposing_filters(
    merged: MutableMapping[str, Any],
    pending: Mapping[str, Any],
    positive_key: str,
    negative_key: str,
) -> None:
    """Drop tags from ``merged[negative_key]`` that ``pending[positive_key]`` sets.

    Used when merging option sources in priority order: a later source that
    includes a tag wins over an earlier source that excluded it, and vice versa.
    """
    pending_rules = pending.get(positive_key)
    existing = merged.get(negative_key)
    if not pending_rules or not existing:
        return
    merged[negative_key] = {
        key: value for key, value in existing.items() if key not in pending_rules
    }


class FilterManager:
    """Holds inclusion/exclusion rules and decides which examples run.

    Attributes:
        inclusions: InclusionRules for the run.
        exclusions: ExclusionRules for the run.
        declaration_line_resolver: Maps (file_path, line) to the nearest
            preceding declaration line; set by the World for location filters.
    """

    def __init__(
        self,
        include: Mapping[str, Any] | None = None,
        exclude: Mapping[str, Any] | None = None,
    ) -> None:
        self.inclusions = InclusionRules()
        self.exclusions = ExclusionRules()
        self.inclusions.opposite = self.exclusions
        self.exclusions.opposite = self.inclusions
        self.declaration_line_resolver: DeclarationLineResolver | None = None
        if include:
            self.include(include)
        if exclude:
            self.exclude(exclude)

    @property
    def has_filters(self) -> bool:
        """Check if any user filter rules are configured."""
        return not (self.inclusions.is_empty and self.exclusions.is_empty)

    def include(self, rules: Mapping[str, Any]) -> None:
        self.inclusions.add(rules)

    def include_only(self, rules: Mapping[str, Any]) -> None:
        self.inclusions.use_only(rules)

    def include_with_low_priority(self, rules: Mapping[str, Any]) -> None:
        self.inclusions.add_with_low_priority(rules)

    def exclude(self, rules: Mapping[str, Any]) -> None:
        self.exclusions.add(rules)

    def exclude_only(self, rules: Mapping[str, Any]) -> None:
        self.exclusions.use_only(rules)

    def exclude_with_low_priority(self, rules: Mapping[str, Any]) -> None:
        self.exclusions.add_with_low_priority(rules)

    def add_location(self, file_path: str, line_numbers: Sequence[int]) -> None:
        """Only run examples declared at (or enclosing) the given lines of ``file_path``."""
        locations = self.inclusions.delete(LOCATIONS_KEY) or {}
        key = os.path.abspath(file_path)
        locations.setdefault(key, [])
        locations[key].extend(line_numbers)
        self.inclusions.add_location(locations)

    def should_include(self, metadata: Mapping[str, Any]) -> bool:
        """Determine if a node with the given metadata passes the filters.

        The matching logic:
        1. With a standalone inclusion filter, only that filter (and the
           conditional exclusions) decide
        2. If any exclusion rule matches, the node is excluded
        3. Every inclusion rule must match (no inclusion rules includes all)
        """
        resolver = self.declaration_line_resolver
        if self.inclusions.is_standalone:
            if any_apply(CONDITIONAL_FILTERS, metadata):
                return False
            return self.inclusions.include_example(metadata, resolver)
        if self.exclusions.include_example(metadata, resolver):
            return False
        return self.inclusions.include_example(metadata, resolver)

    def prune(self, nodes: Iterable[NodeT]) -> list[NodeT]:
        """Keep the nodes whose metadata passes the filters, preserving order."""
        return [node for node in nodes if self.should_include(node.metadata)]

    def merge(self, later: FilterManager) -> FilterManager:
        """Combine this configuration with a later-applied one.

        For each tag the later side's rule wins, in both directions: a tag the
        later side includes is removed from this side's exclusions and a tag it
        excludes is removed from this side's inclusions. Same-direction rules for
        the same tag are last-writer-wins.
        """
        merged = FilterManager()
        merged.declaration_line_resolver = (
            later.declaration_line_resolver or self.declaration_line_resolver
        )
        inclusions = {
            key: value
            for key, value in self.inclusions.rules.items()
            if key not in later.exclusions
        }
        exclusions = {
            key: value
            for key, value in self.exclusions.rules.items()
            if key not in later.inclusions
        }
        inclusions.update(later.inclusions.rules)
        exclusions.update(later.exclusions.rules)
        merged.inclusions.rules = inclusions
        merged.exclusions.rules = exclusions
        return merged

    def __repr__(self) -> str:
        """Return a string representation of the FilterManager."""
        return (
            f"FilterManager(include={self.inclusions.rules}, "
            f"exclude={self.exclusions.rules})"
        )
