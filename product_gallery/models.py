"""Data models used throughout the gallery pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class ResponsiveCandidate:
    """One entry of a responsive candidate set: a sized URL and its width."""

    url: str
    width: int


@dataclass
class Product:
    """Raw product data as supplied by the page or a products file."""

    title: str
    description: str = ""
    price: str = ""
    images: List[str] = field(default_factory=list)
    image_index: int = 0


@dataclass
class ImageSurface:
    """Visible image of a card, as the rendering layer should show it."""

    src: str = ""
    srcset: str = ""
    sizes: str = ""
    loading: bool = False
    assignments: int = 0


@dataclass
class Card:
    """Image carousel state for one product card."""

    card_id: str
    product: Product
    images: List[str] = field(default_factory=list)
    current_index: int = 0
    dots_rendered: bool = False
    dots: List[bool] = field(default_factory=list)
    surface: ImageSurface = field(default_factory=ImageSurface)

    def __post_init__(self) -> None:
        if not 0 <= self.current_index < max(len(self.images), 1):
            self.current_index = 0

    @property
    def active_dot(self) -> Optional[int]:
        for index, active in enumerate(self.dots):
            if active:
                return index
        return None


class PrefetchResult(Enum):
    """Outcome of handing a URL to the prefetch scheduler."""

    SCHEDULED = "scheduled"
    DEDUPLICATED = "deduplicated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ProbeRequest:
    """Low-priority warm-up request for one image and its variants."""

    src: str
    candidates: List[ResponsiveCandidate]
    sizes: str
    decoding: str = "async"
    fetch_priority: Optional[str] = None
