# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Hook registration and execution."""

from .executor import HookExecutor, format_after_hook_error
from .registry import SCOPE_ALIASES, Hook, HookCollections, HookPhase, HookScope, register_hook

__all__ = [
    "SCOPE_ALIASES",
    "Hook",
    "HookCollections",
    "HookExecutor",
    "HookPhase",
    "HookScope",
    "format_after_hook_error",
    "register_hook",
]
