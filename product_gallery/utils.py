"""Utility helpers for string normalization."""

from __future__ import annotations

import re
from typing import Container

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, fallback: str = "card") -> str:
    """Generate an identifier-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def unique_slug(value: str, taken: Container[str], fallback: str = "card") -> str:
    """Slugify ``value`` and add a numeric suffix until it is not in ``taken``."""
    base = slugify(value, fallback=fallback)
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate
