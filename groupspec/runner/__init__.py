# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Run configuration and option merging.

The Runner lives in ``groupspec.runner.runner``; it depends on the group tree,
which itself reads the Configuration defined here.
"""

from groupspec.runner.configuration import Configuration
from groupspec.runner.configuration_options import ConfigurationOptions

__all__ = ["Configuration", "ConfigurationOptions"]
