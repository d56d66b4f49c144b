"""HTML view of the product grid, derived from the in-memory card records."""

from __future__ import annotations

import json

from bs4 import BeautifulSoup, Tag

from .grid import ProductGrid
from .models import Card

CARD_IMAGE_SIDE = 600


def _new_tag(soup: BeautifulSoup, name: str, text: str = "", **attrs: str) -> Tag:
    tag = soup.new_tag(name, attrs=attrs)
    if text:
        tag.string = text
    return tag


def _render_dots(soup: BeautifulSoup, card: Card) -> Tag:
    dots = _new_tag(soup, "div", **{"class": "card-image-dots", "aria-hidden": "true"})
    for active in card.dots:
        classes = "card-image-dot card-image-dot--active" if active else "card-image-dot"
        dots.append(_new_tag(soup, "span", **{"class": classes}))
    return dots


def render_card(soup: BeautifulSoup, card: Card) -> Tag:
    """Build the ``article.product-card`` element for one card."""
    product = card.product
    article = _new_tag(
        soup,
        "article",
        **{
            "class": "product-card",
            "data-title": product.title,
            "data-hidden": "false",
            "data-images": json.dumps(card.images),
            "data-image-index": str(card.current_index),
            "role": "listitem",
        },
    )

    wrap_classes = "card-image-wrap is-loading" if card.surface.loading else "card-image-wrap"
    wrap = _new_tag(soup, "div", **{"class": wrap_classes})
    img_attrs = {
        "class": "card-image",
        "alt": "",
        "width": str(CARD_IMAGE_SIDE),
        "height": str(CARD_IMAGE_SIDE),
        "loading": "lazy",
        "decoding": "async",
    }
    if card.surface.src:
        img_attrs.update(src=card.surface.src, srcset=card.surface.srcset, sizes=card.surface.sizes)
    wrap.append(_new_tag(soup, "img", **img_attrs))
    if card.dots_rendered:
        wrap.append(_render_dots(soup, card))
    article.append(wrap)

    body = _new_tag(soup, "div", **{"class": "card-body"})
    body.append(_new_tag(soup, "h2", product.title, **{"class": "card-title"}))
    body.append(_new_tag(soup, "p", product.description, **{"class": "card-description"}))
    body.append(_new_tag(soup, "p", product.price, **{"class": "card-price"}))
    body.append(_new_tag(soup, "button", "Add to Cart", type="button", **{"class": "btn-add-cart"}))
    article.append(body)
    return article


def render_grid(grid: ProductGrid, grid_id: str = "product-grid") -> str:
    soup = BeautifulSoup("", "html.parser")
    container = _new_tag(soup, "div", id=grid_id, role="list")
    for card in grid:
        container.append(render_card(soup, card))
    soup.append(container)
    return str(soup)
