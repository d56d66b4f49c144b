"""Product grid orchestration: card lifecycle and page-level events."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .carousel import Carousel
from .models import Card, Product
from .utils import unique_slug
from .variants import strip_size_params

logger = logging.getLogger("product_gallery")

SAMPLE_PRODUCT = Product(
    title="Sample Product",
    description="Dynamically added sample product.",
    price="$19.99",
    images=[
        "https://images.unsplash.com/photo-1523275335684-37898b6baf30?auto=format&q=75&fit=crop",
        "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?auto=format&q=75&fit=crop",
        "https://images.unsplash.com/photo-1523275335684-37898b6baf30?auto=format&q=75&fit=crop",
    ],
)


def parse_image_list(raw: Any) -> List[str]:
    """Accept a list or a JSON-encoded list of URLs; anything else means none."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str)]


def product_from_dict(data: Mapping[str, Any]) -> Product:
    if "images" in data:
        images = parse_image_list(data["images"])
    elif data.get("image"):
        images = parse_image_list([data["image"]])
    else:
        images = []
    try:
        image_index = int(data.get("image_index", 0))
    except (TypeError, ValueError):
        image_index = 0
    return Product(
        title=str(data.get("title", "")),
        description=str(data.get("description", "")),
        price=str(data.get("price", "")),
        images=images,
        image_index=image_index,
    )


def load_products(path: Path) -> List[Product]:
    """Read products from a JSON file holding a list of product objects."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, Mapping):
        payload = payload.get("products", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path} does not contain a list of products")
    return [product_from_dict(item) for item in payload if isinstance(item, Mapping)]


class ProductGrid:
    """In-memory grid of cards keyed by a stable card identifier."""

    def __init__(self, carousel: Carousel) -> None:
        self.carousel = carousel
        self.cards: Dict[str, Card] = {}

    @property
    def scheduler(self):
        return self.carousel.scheduler

    def __iter__(self):
        return iter(self.cards.values())

    def get(self, card_id: str) -> Optional[Card]:
        return self.cards.get(card_id)

    def _create_card(self, product: Union[Product, Mapping[str, Any]], image_index: int) -> Card:
        if not isinstance(product, Product):
            product = product_from_dict(product)
        images = [url for url in map(strip_size_params, product.images) if url]
        card = Card(
            card_id=unique_slug(product.title, self.cards),
            product=product,
            images=images,
            current_index=image_index,
        )
        self.cards[card.card_id] = card
        self.carousel.add_image_dots(card)
        self.carousel.show(card)
        return card

    def mount(self, products: Iterable[Union[Product, Mapping[str, Any]]]) -> List[Card]:
        """Initial page setup: show each stored image and warm the rest."""
        cards = []
        for product in products:
            if not isinstance(product, Product):
                product = product_from_dict(product)
            card = self._create_card(product, product.image_index)
            for position, url in enumerate(card.images):
                if position != card.current_index:
                    self.scheduler.schedule(url)
            cards.append(card)
        logger.info("Mounted %d cards", len(cards))
        return cards

    def add_product(self, product: Union[Product, Mapping[str, Any]] = SAMPLE_PRODUCT) -> Card:
        """Dynamically append a card showing its first image."""
        card = self._create_card(product, 0)
        for url in card.images:
            self.scheduler.schedule(url)
        logger.info("Added card %s with %d images", card.card_id, len(card.images))
        return card

    def click_image(self, card_id: str) -> bool:
        card = self.cards.get(card_id)
        if card is None:
            logger.debug("Ignoring click on unknown card %s", card_id)
            return False
        return self.carousel.cycle(card)

    def image_loaded(self, card_id: str) -> None:
        self._settle(card_id)

    def image_failed(self, card_id: str) -> None:
        logger.debug("Image failed to load for card %s", card_id)
        self._settle(card_id)

    def _settle(self, card_id: str) -> None:
        card = self.cards.get(card_id)
        if card is not None:
            self.carousel.image_settled(card)
