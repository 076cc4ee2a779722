# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Core constants shared across the groupspec framework."""

from typing import Final

# Metadata keys computed by the framework. Supplying any of them as user
# metadata at definition time raises ReservedKeyError.
RESERVED_KEYS: Final[frozenset[str]] = frozenset(
    {
        "description",
        "description_args",
        "described_class",
        "example_group",
        "parent_example_group",
        "execution_result",
        "file_path",
        "full_description",
        "line_number",
        "location",
        "block",
    }
)

# Description prefixes that attach to a type/module subject without a space
# ("Array#push", "Array.new", "Foo::Bar").
DESCRIPTION_CONNECTORS: Final[tuple[str, ...]] = ("#", ".", "::")

# Pending / skip messages
NO_REASON_GIVEN: Final[str] = "No reason given"
NOT_YET_IMPLEMENTED: Final[str] = "Not yet implemented"
PENDING_FIXED_MESSAGE: Final[str] = (
    "Expected example to fail since it is pending, but it passed."
)

# Ordering
DEFINED_ORDERING: Final[str] = "defined"
RANDOM_ORDERING: Final[str] = "random"
GLOBAL_ORDERING: Final[str] = "global"

# Display names
ANONYMOUS_GROUP_NAME: Final[str] = "Anonymous"
DISPLAY_NAME_SEPARATOR: Final[str] = "::"

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INVALID_ARGS = 2

# Options files
GLOBAL_OPTIONS_FILENAME = ".groupspec.yaml"
LOCAL_OPTIONS_FILENAME = ".groupspec.yaml"
ENV_PREFIX = "GROUPSPEC_"
