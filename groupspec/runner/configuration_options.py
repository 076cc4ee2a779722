# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Merging of option mappings from several sources into one Configuration.

Sources are merged in priority order, later sources winning:

    1. global options file   (~/.groupspec.yaml)
    2. local options file    (./.groupspec.yaml), or a custom options file
                             given with --options, which replaces 1 and 2
    3. command line and GROUPSPEC_* environment options

At every merge step a tag included by the later source is removed from the
earlier exclusion rules and a tag excluded by the later source is removed from
the earlier inclusion rules. Rules for the same tag in the same direction are
last-writer-wins.

Understood keys:

    order, seed, fail_fast, dry_run, run_all_when_everything_filtered,
    inclusion_filter, exclusion_filter, full_description, line_numbers,
    files_or_directories_to_run
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from groupspec.core.errors import InvalidOptionError
from groupspec.filtering.filter_manager import reconcile_opposing_filters
from groupspec.runner.configuration import Configuration

logger = logging.getLogger(__name__)

INCLUSION_FILTER = "inclusion_filter"
EXCLUSION_FILTER = "exclusion_filter"
FILTER_KEYS = (INCLUSION_FILTER, EXCLUSION_FILTER)

# Applied in this order; anything else afterwards in alphabetical order
ORDERED_KEYS = ("seed", "order")
SETTABLE_KEYS = frozenset(
    {"order", "seed", "fail_fast", "dry_run", "run_all_when_everything_filtered"}
)


def parse_tag(tag: str) -> tuple[str, str, Any]:
    """Parse a command line tag expression.

    Args:
        tag: "name", "name:value", with an optional "~" prefix for exclusion.

    Returns:
        (filter key, tag name, value); a tag without value means True.

    Examples:
        >>> parse_tag("focus")
        ('inclusion_filter', 'focus', True)
        >>> parse_tag("~speed:slow")
        ('exclusion_filter', 'speed', 'slow')
    """
    filter_key = INCLUSION_FILTER
    if tag.startswith("~"):
        filter_key = EXCLUSION_FILTER
        tag = tag[1:]
    name, separator, value = tag.partition(":")
    return filter_key, name, (value if separator else True)


def tag_options(include: Iterable[str] = (), exclude: Iterable[str] = ()) -> dict[str, Any]:
    """Build filter options from ``-i``/``-e`` style tag lists."""
    options: dict[str, Any] = {}
    for tags, default_key in ((include, INCLUSION_FILTER), (exclude, EXCLUSION_FILTER)):
        for tag in tags:
            filter_key, name, value = parse_tag(tag)
            if default_key == EXCLUSION_FILTER:
                filter_key = EXCLUSION_FILTER
            options.setdefault(filter_key, {})[name] = value
    return options


def compile_description_patterns(patterns: str | Iterable[str]) -> re.Pattern[str]:
    """Combine one or more ``-E`` patterns into a single regex.

    Raises:
        InvalidOptionError: If a pattern is not a valid regular expression.
    """
    if isinstance(patterns, str):
        patterns = [patterns]
    try:
        return re.compile("|".join(f"(?:{pattern})" for pattern in patterns))
    except re.error as exc:
        raise InvalidOptionError(f"Invalid example pattern: {exc}") from None


def merge_options(merged: dict[str, Any], pending: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``pending`` over ``merged`` applying the opposing-filter rule."""
    reconcile_opposing_filters(merged, pending, INCLUSION_FILTER, EXCLUSION_FILTER)
    reconcile_opposing_filters(merged, pending, EXCLUSION_FILTER, INCLUSION_FILTER)
    for key, value in pending.items():
        if key in FILTER_KEYS:
            rules = dict(merged.get(key) or {})
            rules.update(value or {})
            merged[key] = rules
        else:
            merged[key] = value
    return merged


class ConfigurationOptions:
    """Options merged from several sources, applied to a Configuration.

    Args:
        sources: Option mappings in priority order (lowest first).
    """

    def __init__(self, *sources: Mapping[str, Any] | None) -> None:
        self.sources = [dict(source) for source in sources if source]
        self._options: dict[str, Any] | None = None

    @property
    def options(self) -> dict[str, Any]:
        if self._options is None:
            self._options = self.parse_options()
        return self._options

    def parse_options(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for source in self.sources:
            merge_options(merged, source)
        logger.debug(f"Merged options from {len(self.sources)} sources: {merged}")
        return merged

    @property
    def files_or_directories_to_run(self) -> list[str]:
        return list(self.options.get("files_or_directories_to_run") or [])

    def configure(self, config: Configuration) -> None:
        """Apply the merged options to ``config``.

        Raises:
            InvalidOptionError: For an unknown ordering, an invalid seed or an
                invalid ``full_description`` pattern.
        """
        options = dict(self.options)
        manager = config.filter_manager

        line_numbers = options.pop("line_numbers", None)
        if line_numbers:
            for path in self.files_or_directories_to_run:
                manager.add_location(path, [int(line) for line in line_numbers])

        full_description = options.pop("full_description", None)
        if full_description:
            manager.include({"full_description": compile_description_patterns(full_description)})

        if options.get(INCLUSION_FILTER):
            manager.include(options[INCLUSION_FILTER])
        if options.get(EXCLUSION_FILTER):
            manager.exclude(options[EXCLUSION_FILTER])

        for key in self._ordered_keys(options):
            if key in SETTABLE_KEYS:
                if options[key] is not None:
                    setattr(config, key, options[key])
            elif key not in FILTER_KEYS and key != "files_or_directories_to_run":
                logger.warning(f"Ignoring unknown option '{key}'")

    @staticmethod
    def _ordered_keys(options: Mapping[str, Any]) -> list[str]:
        first = [key for key in ORDERED_KEYS if key in options]
        rest = sorted(key for key in options if key not in ORDERED_KEYS)
        return first + rest
