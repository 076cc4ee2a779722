# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Core components shared across the groupspec framework."""

from groupspec.core.constants import (
    NO_REASON_GIVEN,
    NOT_YET_IMPLEMENTED,
    RESERVED_KEYS,
)
from groupspec.core.errors import (
    DuplicateSharedGroupError,
    GroupSpecError,
    HookDefinitionError,
    InvalidOptionError,
    IsolatedGroupNestingError,
    PendingExampleFixedError,
    ReservedKeyError,
    SharedGroupNotFoundError,
    SkipExample,
)
from groupspec.core.types import ExecutionResult, ExecutionStatus, RunResults

__all__ = [
    # Constants
    "NO_REASON_GIVEN",
    "NOT_YET_IMPLEMENTED",
    "RESERVED_KEYS",
    # Errors
    "DuplicateSharedGroupError",
    "GroupSpecError",
    "HookDefinitionError",
    "InvalidOptionError",
    "IsolatedGroupNestingError",
    "PendingExampleFixedError",
    "ReservedKeyError",
    "SharedGroupNotFoundError",
    "SkipExample",
    # Types
    "ExecutionResult",
    "ExecutionStatus",
    "RunResults",
]
