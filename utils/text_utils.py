"""
Text utilities for product identifiers.
"""

import re
from typing import Optional

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def slugify(name: Optional[str]) -> str:
    """
    Derive a URL slug from a product name.

    - "Gold Plated Necklace!!" → "gold-plated-necklace"
    - " A   B " → "a-b"
    - "Çà" → ""  (non-ASCII letters are separators)

    Args:
        name: Product name (may be empty)

    Returns:
        Lowercase slug with single hyphens, or "" if nothing survives
    """
    if not name:
        return ""

    return _NON_ALNUM_RUN.sub("-", name.lower()).strip("-")


def parse_bool(value: str, default: bool = False) -> bool:
    """
    Parse a CSV boolean.

    Only "true"/"false" (any case) are meaningful; anything else
    returns the default.
    """
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return default
