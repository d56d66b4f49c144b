"""Image URL normalization and responsive variant derivation."""

from __future__ import annotations

import re
from typing import List, Sequence

from .config import RESPONSIVE_IMAGE_WIDTHS
from .models import ResponsiveCandidate

SIZE_PARAM_PATTERN = re.compile(r"([?&])[wh]=[^&#]*")
_REPEATED_AMPERSANDS = re.compile(r"&{2,}")
_QUESTION_AMPERSAND = re.compile(r"\?&+")
_DANGLING_SEPARATOR = re.compile(r"[?&]+(#|$)")


def _drop_size_param(match: re.Match) -> str:
    # Keep the "?" so the parameters that follow still start a query.
    return "?" if match.group(1) == "?" else ""


def strip_size_params(url: object) -> str:
    """Return the URL without any ``w``/``h`` query parameters.

    Never raises; anything that is not a non-empty string yields ``""``.
    """
    if not isinstance(url, str) or not url:
        return ""
    cleaned = SIZE_PARAM_PATTERN.sub(_drop_size_param, url)
    cleaned = _REPEATED_AMPERSANDS.sub("&", cleaned)
    cleaned = _QUESTION_AMPERSAND.sub("?", cleaned)
    cleaned = _DANGLING_SEPARATOR.sub(r"\1", cleaned)
    return cleaned


def build_sized_url(base_url: object, size: int) -> str:
    """Derive the square ``size`` x ``size`` variant of an image URL."""
    if size <= 0:
        raise ValueError(f"Image size must be a positive pixel count, got {size}")
    cleaned = strip_size_params(base_url)
    if not cleaned:
        return ""
    joiner = "&" if "?" in cleaned else "?"
    return f"{cleaned}{joiner}w={size}&h={size}"


def build_responsive_candidates(
    base_url: object,
    widths: Sequence[int] = RESPONSIVE_IMAGE_WIDTHS,
) -> List[ResponsiveCandidate]:
    """Pair a sized variant with each breakpoint width, in breakpoint order."""
    if not strip_size_params(base_url):
        return []
    return [
        ResponsiveCandidate(url=build_sized_url(base_url, width), width=width)
        for width in widths
    ]


def format_srcset(candidates: Sequence[ResponsiveCandidate]) -> str:
    return ", ".join(f"{candidate.url} {candidate.width}w" for candidate in candidates)
