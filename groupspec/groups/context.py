# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Execution context handed to example bodies and hooks.

Each example runs against a fresh ExampleContext. Plain attributes set on the
context are the example's state; state produced by ``before(:context)`` hooks
is captured per group and copied into the contexts of every example and nested
group below it. Copies are shallow: rebinding an attribute inside one example
does not leak to its siblings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from groupspec.core.constants import NO_REASON_GIVEN
from groupspec.core.errors import SkipExample

if TYPE_CHECKING:
    from groupspec.groups.example import Example
    from groupspec.groups.example_group import ExampleGroup


class ExampleContext:
    """Attribute namespace plus a few helpers for the running example."""

    __slots__ = ("_group", "_example", "__dict__")

    def __init__(
        self,
        group: ExampleGroup,
        example: Example | None = None,
        state: Mapping[str, Any] | None = None,
    ) -> None:
        self._group = group
        self._example = example
        if state:
            self.__dict__.update(state)

    @property
    def group(self) -> ExampleGroup:
        return self._group

    @property
    def example(self) -> Example | None:
        """The running example; None inside per-group hooks."""
        return self._example

    @property
    def described_class(self) -> Any:
        return self._group.metadata.get("described_class")

    @property
    def metadata(self) -> Mapping[str, Any]:
        if self._example is not None:
            return self._example.metadata
        return self._group.metadata

    def pending(self, message: str | None = None) -> None:
        """Mark the running example pending from here on.

        The rest of the body is still executed: a failure is then recorded as
        pending, a pass as a failure.
        """
        if self._example is None:
            raise RuntimeError("pending() can only be called while an example runs")
        self._example.mark_pending(message or NO_REASON_GIVEN)

    def skip(self, message: str | None = None) -> None:
        """Stop the running example (or every example of the group) as skipped."""
        reason = message or NO_REASON_GIVEN
        if self._example is not None:
            self._example.mark_skipped(reason)
        raise SkipExample(reason)

    def state(self) -> dict[str, Any]:
        """Copy of the user attributes set on this context."""
        return dict(self.__dict__)

    def __repr__(self) -> str:
        target = self._example or self._group
        return f"ExampleContext({target.full_description!r})"
