"""
Pytest configuration and shared fixtures for the product gallery tests.
"""
from typing import Callable, List

import pytest

from product_gallery.carousel import Carousel
from product_gallery.config import GalleryConfig
from product_gallery.grid import ProductGrid
from product_gallery.models import Card, ProbeRequest, Product
from product_gallery.scheduler import PrefetchCache, PrefetchScheduler


# ============================================================================
# Fakes
# ============================================================================

class FakeDeferrer:
    """Collects deferred callbacks so tests decide when "idle time" happens."""

    def __init__(self):
        self.pending: List[Callable[[], None]] = []

    def defer(self, callback):
        self.pending.append(callback)

    def run_all(self) -> int:
        ran = 0
        while self.pending:
            self.pending.pop(0)()
            ran += 1
        return ran


class RecordingProbe:
    """Probe that remembers every request it was asked to warm."""

    supports_fetch_priority = True

    def __init__(self):
        self.requests: List[ProbeRequest] = []

    def warm(self, request):
        self.requests.append(request)


class ExplodingProbe:
    """Probe standing in for an unsupported or broken host API."""

    def warm(self, request):
        raise RuntimeError("image probes are not supported here")


# ============================================================================
# Fixtures
# ============================================================================

IMG_A = "https://images.example.com/a.jpg?auto=format&q=75"
IMG_B = "https://images.example.com/b.jpg?auto=format&q=75"
IMG_C = "https://images.example.com/c.jpg?auto=format&q=75"


@pytest.fixture
def config() -> GalleryConfig:
    return GalleryConfig()


@pytest.fixture
def deferrer() -> FakeDeferrer:
    return FakeDeferrer()


@pytest.fixture
def probe() -> RecordingProbe:
    return RecordingProbe()


@pytest.fixture
def cache() -> PrefetchCache:
    return PrefetchCache()


@pytest.fixture
def scheduler(deferrer, probe, config, cache) -> PrefetchScheduler:
    return PrefetchScheduler(deferrer, probe, config, cache=cache)


@pytest.fixture
def carousel(scheduler) -> Carousel:
    return Carousel(scheduler)


@pytest.fixture
def grid(carousel) -> ProductGrid:
    return ProductGrid(carousel)


@pytest.fixture
def sample_products() -> List[dict]:
    """Products as they would appear in a products JSON file."""
    return [
        {
            "title": "Leather Watch",
            "description": "Minimal analog watch.",
            "price": "$129.00",
            "images": [IMG_A + "&w=600&h=600", IMG_B, IMG_C],
        },
        {
            "title": "Headphones",
            "description": "Over-ear, wireless.",
            "price": "$89.00",
            "image": IMG_B,
        },
        {
            "title": "Empty Box",
            "description": "No pictures yet.",
            "price": "$1.00",
            "images": "not json",
        },
    ]


@pytest.fixture
def three_image_card(carousel) -> Card:
    card = Card(
        card_id="watch",
        product=Product(title="Watch", images=[IMG_A, IMG_B, IMG_C]),
        images=[IMG_A, IMG_B, IMG_C],
    )
    carousel.add_image_dots(card)
    carousel.show(card)
    return card
