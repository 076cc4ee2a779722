# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Metadata filtering components."""

from .filter_manager import (
    ExclusionRules,
    FilterManager,
    InclusionRules,
    reconcile_opposing_filters,
)
from .metadata_filter import all_apply, any_apply, filter_applies

__all__ = [
    "ExclusionRules",
    "FilterManager",
    "InclusionRules",
    "all_apply",
    "any_apply",
    "filter_applies",
    "reconcile_opposing_filters",
]
