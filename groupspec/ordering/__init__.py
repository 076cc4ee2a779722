# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Ordering strategies and their registry."""

from .registry import Custom, Identity, OrderingRegistry, OrderingStrategy, Random

__all__ = [
    "Custom",
    "Identity",
    "OrderingRegistry",
    "OrderingStrategy",
    "Random",
]
