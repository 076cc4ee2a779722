# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Exception types raised while defining and running example groups.

Definition errors (reserved metadata keys, unknown or duplicate shared groups,
nested isolated groups, malformed hooks) are raised immediately to the code that
made the definition call and are never caught by the executor.

Execution errors are not represented here: anything escaping an example body or
hook is captured into the example's ``ExecutionResult`` instead.
"""

from __future__ import annotations


class GroupSpecError(Exception):
    """Base class for all groupspec definition errors."""


class ReservedKeyError(GroupSpecError, ValueError):
    """Raised when user metadata contains a key the framework computes itself.

    Attributes:
        key: The reserved key that was supplied.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"'{key}' is not allowed. groupspec reserves some metadata keys for "
            f"its own internal use (description, location, file path, ...)."
        )


class SharedGroupNotFoundError(GroupSpecError, LookupError):
    """Raised when a shared group is included by a name nobody registered.

    Attributes:
        name: The missing shared group name.
        label: Either "shared examples" or "shared context", matching the
            inclusion method that failed.
    """

    def __init__(self, name: object, label: str = "shared examples") -> None:
        self.name = name
        self.label = label
        super().__init__(f'Could not find {label} "{name}"')


class DuplicateSharedGroupError(GroupSpecError, ValueError):
    """Raised when a shared group name is registered twice in the same scope."""

    def __init__(self, name: object, first_location: str, second_location: str) -> None:
        self.name = name
        self.first_location = first_location
        self.second_location = second_location
        super().__init__(
            f'Shared example group "{name}" defined at {second_location} '
            f"has been previously defined at {first_location}"
        )


class IsolatedGroupNestingError(GroupSpecError, RuntimeError):
    """Raised when a top-level (isolated) definition happens inside a group body."""

    def __init__(self, what: str = "an isolated context") -> None:
        super().__init__(
            f"Creating {what} from within a context is not allowed. "
            f"Define it on the enclosing group instead or move it outside of the context."
        )


class HookDefinitionError(GroupSpecError, ValueError):
    """Raised for unknown hook scopes or unsupported hook/scope combinations."""


class PendingExampleFixedError(GroupSpecError, AssertionError):
    """Recorded as the failure of a pending example whose body passed."""


class SkipExample(Exception):
    """Signal raised by ``ExampleContext.skip`` to stop an example body.

    Not an error: the example is recorded as skipped with ``message``.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidOptionError(GroupSpecError, ValueError):
    """Raised when a run option has an invalid value (unknown ordering, bad pattern)."""
