# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Named, reusable bundles of group definitions.

A shared group definition is a plain function ``body(group, *args, **kwargs)``
that makes definition calls (examples, nested groups, hooks) on the group it
receives. Inclusion applies the body to a target group:

    - ``include_examples`` / ``include_context``: into the target group itself
    - ``it_behaves_like``: into a new nested group "behaves like <name>"

Definitions are scoped: a name defined on a group is visible to that group and
its descendants, a name defined on the World is visible everywhere. Lookups walk
from the including group up to the World.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from groupspec.core.errors import DuplicateSharedGroupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SharedGroupDefinition:
    """A registered shared group.

    Attributes:
        name: Lookup key (string, type, or any hashable value)
        body: ``body(group, *args, **kwargs)`` making definition calls
        location: Where the definition was made
    """

    name: Any
    body: Callable[..., Any]
    location: str


class SharedGroupRegistry:
    """Shared group definitions of one scope (a group or the World)."""

    def __init__(self) -> None:
        self._definitions: dict[Any, SharedGroupDefinition] = {}

    def add(self, definition: SharedGroupDefinition) -> None:
        """Register a definition.

        Raises:
            DuplicateSharedGroupError: If the name is already defined in this
                scope by a different definition site.
        """
        existing = self._definitions.get(definition.name)
        if existing is not None and existing.location != definition.location:
            raise DuplicateSharedGroupError(
                definition.name, existing.location, definition.location
            )
        self._definitions[definition.name] = definition
        logger.debug(f"Defined shared group {definition.name!r} at {definition.location}")

    def get(self, name: Any) -> SharedGroupDefinition | None:
        return self._definitions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[SharedGroupDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)
