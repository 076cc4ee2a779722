# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Example group tree: groups, examples, execution contexts and the World."""

from groupspec.groups.context import ExampleContext
from groupspec.groups.example import Example
from groupspec.groups.example_group import ExampleGroup
from groupspec.groups.shared import SharedGroupDefinition, SharedGroupRegistry
from groupspec.groups.world import World

__all__ = [
    "Example",
    "ExampleContext",
    "ExampleGroup",
    "SharedGroupDefinition",
    "SharedGroupRegistry",
    "World",
]
