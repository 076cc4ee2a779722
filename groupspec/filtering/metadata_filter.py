# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Matching of filter rules against node metadata.

A filter rule is a ``tag -> matcher`` pair. How the matcher is compared with the
metadata value depends on its type:

    - Mapping: the metadata value must be a mapping and every sub-rule must match
    - re.Pattern: ``pattern.search`` on the string form of the value
    - callable: called with the value (or value and metadata for two arguments,
      or nothing for zero arguments); truthiness decides
    - anything else: loose equality on the string forms, where booleans are
      spelled "true"/"false" and enum members by their name, so that
      ``True``, ``"true"`` and ``Flag.true`` are all the same value

List-valued metadata matches when any element matches. A rule never matches
a key the metadata does not have.

Usage:
    >>> all_apply({"focus": "true"}, {"focus": True})
    True
    >>> any_apply({"type": "model", "slow": True}, {"type": "model"})
    True
"""

from __future__ import annotations

import inspect
import os
import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

LOCATIONS_KEY = "locations"

DeclarationLineResolver = Callable[[str, int], "int | None"]


def stringify(value: Any) -> str:
    """String form used for loose equality."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if value is None:
        return ""
    return str(value)


def values_match(expected: Any, actual: Any, metadata: Mapping[str, Any]) -> bool:
    """Compare one matcher with one metadata value."""
    if isinstance(expected, re.Pattern):
        return expected.search(stringify(actual)) is not None
    if callable(expected) and not isinstance(expected, (type, Enum)):
        return bool(_call_matcher(expected, actual, metadata))
    return stringify(actual) == stringify(expected)


def _call_matcher(
    matcher: Callable[..., Any], actual: Any, metadata: Mapping[str, Any]
) -> Any:
    try:
        arity = len(inspect.signature(matcher).parameters)
    except (TypeError, ValueError):
        arity = 1
    if arity == 0:
        return matcher()
    if arity == 2:
        return matcher(actual, metadata)
    return matcher(actual)


def _relevant_line_numbers(metadata: Mapping[str, Any] | None) -> list[int]:
    lines: list[int] = []
    while metadata is not None:
        line = metadata.get("line_number")
        if line is not None:
            lines.append(line)
        metadata = metadata.get("example_group") or metadata.get("parent_example_group")
    return lines


def _top_level_file_path(metadata: Mapping[str, Any]) -> str | None:
    current: Mapping[str, Any] | None = metadata
    file_path = None
    while current is not None:
        file_path = current.get("file_path", file_path)
        current = current.get("example_group") or current.get("parent_example_group")
    return file_path


def location_filter_applies(
    locations: Mapping[str, list[int]],
    metadata: Mapping[str, Any],
    resolver: DeclarationLineResolver | None = None,
) -> bool:
    """Check a ``{file_path: [line, ...]}`` location filter.

    Nodes from files that are not mentioned in ``locations`` are not
    constrained by it. Otherwise the node (or one of its ancestors) must be
    declared on the nearest declaration line at or before one of the requested
    lines.
    """
    file_path = _top_level_file_path(metadata)
    if file_path is None:
        return False
    requested = locations.get(os.path.abspath(file_path))
    if requested is None:
        return True
    if resolver is not None:
        resolved = {resolver(file_path, line) for line in requested}
        resolved.discard(None)
    else:
        resolved = set(requested)
    return any(line in resolved for line in _relevant_line_numbers(metadata))


def filter_applies(
    key: str,
    value: Any,
    metadata: Mapping[str, Any],
    resolver: DeclarationLineResolver | None = None,
) -> bool:
    """Check a single ``key -> value`` rule against ``metadata``."""
    actual = metadata.get(key)
    if isinstance(actual, (list, tuple)) and not callable(value):
        return any(values_match(value, item, metadata) for item in actual)
    if key == LOCATIONS_KEY:
        return location_filter_applies(value, metadata, resolver)
    if isinstance(value, Mapping):
        if not isinstance(actual, Mapping):
            return False
        return all(
            filter_applies(sub_key, sub_value, actual, resolver)
            for sub_key, sub_value in value.items()
        )
    if key not in metadata:
        return False
    return values_match(value, actual, metadata)


def all_apply(
    rules: Mapping[str, Any],
    metadata: Mapping[str, Any],
    resolver: DeclarationLineResolver | None = None,
) -> bool:
    """True iff every rule matches ``metadata``."""
    return all(filter_applies(key, value, metadata, resolver) for key, value in rules.items())


def any_apply(
    rules: Mapping[str, Any],
    metadata: Mapping[str, Any],
    resolver: DeclarationLineResolver | None = None,
) -> bool:
    """True iff at least one rule matches ``metadata``."""
    return any(filter_applies(key, value, metadata, resolver) for key, value in rules.items())
