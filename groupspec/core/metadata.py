# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Metadata composition for example groups and examples.

Every group and example owns an ordered mapping of tag keys to values. User
supplied keys are inherited from the parent group unless overridden locally.
A fixed set of reserved keys is computed by this module and can never be
supplied by the user at definition time:

    description          Description built from the description args
    description_args     Positional description arguments (None dropped)
    full_description     Ancestor descriptions joined with single spaces
    described_class      Nearest subject (type, module, enum member...)
    file_path            Relative path of the defining call site
    line_number          Line of the defining call site
    location             "file_path:line_number"
    block                The body callable given at definition time
    execution_result     (examples) The ExecutionResult record
    example_group        (examples) The owning group's metadata mapping
    parent_example_group (nested groups) The parent group's metadata mapping

The call site is the first stack frame outside of the groupspec package, so
definitions made through helper functions in user code still point at the
user's file. A ``caller`` option (a list of "file:line" strings) overrides the
stack inspection.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any

from groupspec.core.constants import DESCRIPTION_CONNECTORS, RESERVED_KEYS
from groupspec.core.errors import ReservedKeyError

logger = logging.getLogger(__name__)

Metadata = dict[str, Any]

# Directory of the groupspec package; frames below it are framework frames
_FRAMEWORK_ROOT = str(Path(__file__).resolve().parent.parent)

# "path:line" optionally followed by ":column" or ":in ..." (drive letters allowed)
_CALLER_LINE_PATTERN: re.Pattern[str] = re.compile(r"^((?:[A-Za-z]:)?[^:]+):(\d+)")


@dataclass(frozen=True)
class CallerLocation:
    """Where a group or example was defined."""

    file_path: str
    line_number: int

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line_number}"


def relative_path(text: str) -> str:
    """Replace the absolute current working directory in ``text`` with ".".

    Examples:
        >>> relative_path(os.getcwd())
        '.'
    """
    here = os.getcwd()
    return text.replace(here, ".")


def is_framework_file(filename: str) -> bool:
    try:
        resolved = str(Path(filename).resolve())
    except (OSError, ValueError):
        return False
    return resolved.startswith(_FRAMEWORK_ROOT + os.sep)


def _parse_caller_line(line: str) -> CallerLocation | None:
    match = _CALLER_LINE_PATTERN.match(line.strip())
    if not match:
        return None
    return CallerLocation(relative_path(match.group(1)), int(match.group(2)))


def caller_location(caller: Sequence[str] | None = None) -> CallerLocation:
    """Find the definition site of the node being created.

    Args:
        caller: Optional explicit backtrace lines ("file:line"). When given, the
            first line that does not belong to the framework is used.

    Returns:
        The CallerLocation of the first non-framework frame. Falls back to
        "<unknown>:0" when no such frame exists.
    """
    if caller:
        for line in caller:
            parsed = _parse_caller_line(line)
            if parsed is None:
                continue
            if is_framework_file(parsed.file_path):
                continue
            return parsed
        logger.debug(f"No usable caller line in {list(caller)}")
        return CallerLocation("<unknown>", 0)

    frame = sys._getframe(1)
    while frame is not None:
        filename = frame.f_code.co_filename
        if not is_framework_file(filename):
            return CallerLocation(relative_path(filename), frame.f_lineno)
        frame = frame.f_back  # type: ignore[assignment]
    return CallerLocation("<unknown>", 0)


def is_subject_type(value: Any) -> bool:
    """Check if ``value`` is a type or module (the things connectors attach to)."""
    return isinstance(value, (type, ModuleType))


def describe_object(value: Any) -> str:
    """Human readable form of a description argument."""
    if isinstance(value, str):
        return value
    if isinstance(value, type):
        return value.__qualname__
    if isinstance(value, ModuleType):
        return value.__name__
    if isinstance(value, Enum):
        return value.name
    return str(value)


def description_separator(parent_part: Any, child_part: Any) -> str:
    """Separator between a parent description part and a child part.

    No space is inserted when a type/module subject is followed by a string
    starting with "#", "." or "::" ("Array#push").
    """
    if (
        is_subject_type(parent_part)
        and isinstance(child_part, str)
        and child_part.startswith(DESCRIPTION_CONNECTORS)
    ):
        return ""
    return " "


def build_description(description_args: Sequence[Any]) -> str:
    """Build a description from up to two description arguments."""
    if not description_args:
        return ""
    first = describe_object(description_args[0])
    if len(description_args) == 1:
        return first
    second = description_args[1]
    return first + description_separator(description_args[0], second) + describe_object(second)


def build_full_description(
    description: str,
    description_args: Sequence[Any],
    parent: Mapping[str, Any] | None,
) -> str:
    """Join the parent's full description with this node's description."""
    if parent is None:
        return description
    parent_full = parent["full_description"]
    if not description:
        return parent_full
    if not parent_full:
        return description
    parent_args = parent.get("description_args") or [None]
    child_first = description_args[0] if description_args else description
    return parent_full + description_separator(parent_args[-1], child_first) + description


def split_description_args(args: Sequence[Any]) -> tuple[list[Any], Metadata]:
    """Separate positional description args from trailing metadata mappings."""
    description_args: list[Any] = []
    user_metadata: Metadata = {}
    for arg in args:
        if isinstance(arg, Mapping):
            user_metadata.update(arg)
        elif arg is not None:
            description_args.append(arg)
    return description_args, user_metadata


def validate_user_metadata(user_metadata: Mapping[str, Any]) -> None:
    """Reject user metadata that tries to set a reserved key.

    Raises:
        ReservedKeyError: If any key is reserved.
    """
    for key in user_metadata:
        if key in RESERVED_KEYS:
            raise ReservedKeyError(key)


def compose(
    parent_metadata: Mapping[str, Any] | None,
    local_overrides: Mapping[str, Any],
) -> Metadata:
    """Compose user metadata for a child node.

    Non-reserved keys of the parent are inherited; local keys override them.
    Reserved keys are never accepted from ``local_overrides``.

    Raises:
        ReservedKeyError: If ``local_overrides`` contains a reserved key.
    """
    validate_user_metadata(local_overrides)
    composed: Metadata = {}
    if parent_metadata is not None:
        for key, value in parent_metadata.items():
            if key not in RESERVED_KEYS:
                composed[key] = value
    composed.update(local_overrides)
    return composed


def _described_class(
    description_args: Sequence[Any], parent: Mapping[str, Any] | None
) -> Any:
    if description_args and not isinstance(description_args[0], str):
        return description_args[0]
    if parent is not None:
        return parent.get("described_class")
    return None


def _location_fields(caller: Sequence[str] | None, location: CallerLocation | None) -> Metadata:
    site = location or caller_location(caller)
    return {
        "file_path": site.file_path,
        "line_number": site.line_number,
        "location": site.location,
    }


def build_group_metadata(
    parent_metadata: Mapping[str, Any] | None,
    description_args: Sequence[Any],
    user_metadata: Mapping[str, Any],
    block: Callable[..., Any] | None = None,
    location: CallerLocation | None = None,
    format_docstring: Callable[[str], str] | None = None,
) -> Metadata:
    """Build the complete metadata mapping of an example group.

    Args:
        parent_metadata: Metadata of the enclosing group, None for top level.
        description_args: Positional description arguments.
        user_metadata: User keys; may contain a ``caller`` list.
        block: Definition body of the group.
        location: Pre-computed definition site (skips stack inspection).
        format_docstring: Optional transformation applied to the description.

    Raises:
        ReservedKeyError: If ``user_metadata`` contains a reserved key.
    """
    user = dict(user_metadata)
    caller = user.pop("caller", None)
    args = [arg for arg in description_args if arg is not None]
    description = build_description(args)
    if format_docstring is not None:
        description = format_docstring(description)

    metadata: Metadata = {
        "description_args": args,
        "description": description,
        "full_description": build_full_description(description, args, parent_metadata),
        "described_class": _described_class(args, parent_metadata),
        **_location_fields(caller, location),
        "block": block,
    }
    if parent_metadata is not None:
        metadata["parent_example_group"] = parent_metadata
    metadata.update(compose(parent_metadata, user))
    return metadata


def build_example_metadata(
    group_metadata: Mapping[str, Any],
    description_args: Sequence[Any],
    user_metadata: Mapping[str, Any],
    execution_result: Any,
    block: Callable[..., Any] | None = None,
    location: CallerLocation | None = None,
    format_docstring: Callable[[str], str] | None = None,
) -> Metadata:
    """Build the complete metadata mapping of an example.

    Examples without a description are described by their location.

    Raises:
        ReservedKeyError: If ``user_metadata`` contains a reserved key.
    """
    user = dict(user_metadata)
    caller = user.pop("caller", None)
    args = [arg for arg in description_args if arg is not None]
    location_fields = _location_fields(caller, location)
    description = build_description(args)
    if not description:
        description = f"example at {location_fields['location']}"
    if format_docstring is not None:
        description = format_docstring(description)

    metadata: Metadata = {
        "description_args": args,
        "description": description,
        "full_description": build_full_description(description, args, group_metadata),
        "described_class": group_metadata.get("described_class"),
        **location_fields,
        "block": block,
        "execution_result": execution_result,
        "example_group": group_metadata,
    }
    metadata.update(compose(group_metadata, user))
    return metadata
