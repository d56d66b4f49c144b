"""Configuration objects and constants for the product gallery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

RESPONSIVE_IMAGE_WIDTHS: Tuple[int, ...] = (320, 480, 640, 800, 960, 1200)
RESPONSIVE_IMAGE_SIZES = "(min-width: 1024px) 360px, (min-width: 768px) 45vw, 92vw"
DEFAULT_DISPLAY_SIZE = 320
DEFAULT_USER_AGENT = "product-gallery/0.1 (+image prefetch)"


@dataclass
class GalleryConfig:
    """Settings that control variant derivation and prefetch scheduling."""

    widths: Tuple[int, ...] = RESPONSIVE_IMAGE_WIDTHS
    sizes: str = RESPONSIVE_IMAGE_SIZES
    display_size: int = DEFAULT_DISPLAY_SIZE
    fallback_delay: float = 0.150
    idle_timeout: float = 1.5
    probe_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        self.widths = tuple(self.widths)
        if not self.widths:
            raise ValueError("At least one breakpoint width is required")
        if any(width <= 0 for width in self.widths):
            raise ValueError(f"Breakpoint widths must be positive: {self.widths}")
        if list(self.widths) != sorted(set(self.widths)):
            raise ValueError(f"Breakpoint widths must be strictly ascending: {self.widths}")
        if self.display_size <= 0:
            raise ValueError(f"Display size must be positive, got {self.display_size}")
        if self.fallback_delay < 0 or self.idle_timeout < 0:
            raise ValueError("Scheduling delays cannot be negative")

    @property
    def smallest_width(self) -> int:
        return self.widths[0]
