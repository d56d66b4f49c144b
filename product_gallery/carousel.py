"""Per-card image carousel: index cycling, dot indicators, lookahead prefetch."""

from __future__ import annotations

import logging
from typing import Optional

from .config import GalleryConfig
from .models import Card
from .scheduler import PrefetchScheduler
from .variants import build_responsive_candidates, build_sized_url, format_srcset, strip_size_params

logger = logging.getLogger("product_gallery")


class Carousel:
    """Drives the image carousels of all cards against one prefetch scheduler."""

    def __init__(self, scheduler: PrefetchScheduler, config: Optional[GalleryConfig] = None) -> None:
        self.scheduler = scheduler
        self.config = config or scheduler.config

    def apply_image(self, card: Card, maybe_url: object) -> bool:
        """Point the card's image surface at the sized variant of ``maybe_url``."""
        base_url = strip_size_params(maybe_url)
        if not base_url:
            return False
        surface = card.surface
        surface.sizes = self.config.sizes
        surface.srcset = format_srcset(build_responsive_candidates(base_url, self.config.widths))
        surface.src = build_sized_url(base_url, self.config.display_size) or base_url
        surface.assignments += 1
        return True

    def show(self, card: Card) -> bool:
        if not card.images:
            return False
        return self.apply_image(card, card.images[card.current_index])

    def cycle(self, card: Card) -> bool:
        """Advance to the next image; cards with fewer than two images stay put."""
        count = len(card.images)
        if count < 2:
            return False

        next_index = (card.current_index + 1) % count
        card.current_index = next_index
        card.surface.loading = True
        self.apply_image(card, card.images[next_index])
        card.dots = [index == next_index for index in range(len(card.dots))]

        lookahead = card.images[(next_index + 1) % count]
        if lookahead:
            self.scheduler.schedule(lookahead)
        logger.debug("Card %s now shows image %d/%d", card.card_id, next_index + 1, count)
        return True

    def add_image_dots(self, card: Card) -> bool:
        """Create the dot indicators once; single-image cards get none."""
        if card.dots_rendered or len(card.images) < 2:
            return False
        card.dots = [index == card.current_index for index in range(len(card.images))]
        card.dots_rendered = True
        return True

    def image_settled(self, card: Card) -> None:
        """Consume a load or error notification from the image surface."""
        card.surface.loading = False
