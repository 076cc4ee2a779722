# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""String utility functions for groupspec."""

import re

from groupspec.core.constants import ANONYMOUS_GROUP_NAME


def constant_name(description: str) -> str:
    """Turn a group description into a constant-like display name.

    Words are capitalized and joined, anything that is not an ASCII letter,
    digit or underscore is dropped, and a leading digit is prefixed with
    "Nested". Empty results become "Anonymous".

    Args:
        description: The group description (e.g. "The grandparent").

    Returns:
        A display name segment (e.g. "TheGrandparent").

    Examples:
        >>> constant_name("The grandparent")
        'TheGrandparent'
        >>> constant_name("1 thing")
        'Nested1Thing'
        >>> constant_name("")
        'Anonymous'
    """
    words = re.split(r"[\s_\-]+", description.strip())
    joined = "".join(word[:1].upper() + word[1:] for word in words if word)
    name = re.sub(r"[^A-Za-z0-9_]", "", joined)
    if not name:
        return ANONYMOUS_GROUP_NAME
    if name[0].isdigit():
        return f"Nested{name}"
    return name
