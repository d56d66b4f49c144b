"""
Tests for the product grid: mounting, dynamic addition and event routing.
"""
import json

import pytest

from product_gallery.grid import SAMPLE_PRODUCT, load_products, parse_image_list, product_from_dict
from product_gallery.variants import build_sized_url

from conftest import IMG_A, IMG_B, IMG_C


class TestParseImageList:
    """Tests for parse_image_list."""

    def test_accepts_list_and_json(self):
        assert parse_image_list([IMG_A, IMG_B]) == [IMG_A, IMG_B]
        assert parse_image_list(json.dumps([IMG_A])) == [IMG_A]

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', None, 3, "[1, 2]"])
    def test_unparseable_means_no_images(self, raw):
        assert parse_image_list(raw) == []

    def test_single_image_field(self):
        product = product_from_dict({"title": "One", "image": IMG_A})
        assert product.images == [IMG_A]

    def test_bad_stored_index_defaults_to_zero(self):
        product = product_from_dict({"title": "One", "images": [IMG_A], "image_index": "x"})
        assert product.image_index == 0


class TestMount:
    """Tests for ProductGrid.mount."""

    def test_cards_show_normalized_first_image(self, grid, sample_products):
        cards = grid.mount(sample_products)

        watch = cards[0]
        assert watch.card_id == "leather-watch"
        assert watch.images == [IMG_A, IMG_B, IMG_C]
        assert watch.surface.src == build_sized_url(IMG_A, 320)
        assert watch.dots == [True, False, False]

    def test_prefetches_every_non_displayed_image_once(self, grid, sample_products, cache, deferrer):
        grid.mount(sample_products)

        # The watch warms B and C; the headphones' only image is displayed.
        assert list(cache) == sorted([IMG_B, IMG_C])
        assert len(deferrer.pending) == 2

    def test_stored_index_is_displayed(self, grid, cache):
        (card,) = grid.mount([{"title": "Watch", "images": [IMG_A, IMG_B, IMG_C], "image_index": 1}])

        assert card.current_index == 1
        assert card.surface.src == build_sized_url(IMG_B, 320)
        assert card.dots == [False, True, False]
        assert IMG_B not in cache

    def test_cards_without_images_stay_blank(self, grid, sample_products):
        cards = grid.mount(sample_products)

        empty = cards[2]
        assert empty.images == []
        assert empty.surface.src == ""
        assert empty.dots_rendered is False

    def test_duplicate_titles_get_distinct_ids(self, grid):
        cards = grid.mount([{"title": "Mug"}, {"title": "Mug"}])
        assert [card.card_id for card in cards] == ["mug", "mug-2"]


class TestAddProduct:
    """Tests for dynamic card addition."""

    def test_sample_product_warms_all_images(self, grid, cache):
        card = grid.add_product()

        assert card.card_id == "sample-product"
        assert card.current_index == 0
        assert len(card.dots) == len(SAMPLE_PRODUCT.images)
        # The sample repeats one photo, so only two distinct URLs are cached.
        assert len(cache) == 2

    def test_added_card_is_clickable(self, grid):
        card = grid.add_product({"title": "Lamp", "images": [IMG_A, IMG_B]})

        assert grid.click_image(card.card_id) is True
        assert card.current_index == 1


class TestEvents:
    """Tests for click and load/error routing."""

    def test_click_cycles_and_load_settles(self, grid, sample_products):
        grid.mount(sample_products)

        assert grid.click_image("leather-watch") is True
        assert grid.get("leather-watch").surface.loading is True
        grid.image_loaded("leather-watch")
        assert grid.get("leather-watch").surface.loading is False

    def test_error_also_settles(self, grid, sample_products):
        grid.mount(sample_products)
        grid.click_image("leather-watch")
        grid.image_failed("leather-watch")
        assert grid.get("leather-watch").surface.loading is False

    def test_unknown_card_is_ignored(self, grid):
        assert grid.click_image("missing") is False
        grid.image_loaded("missing")


class TestLoadProducts:
    """Tests for reading products files."""

    def test_reads_list_and_wrapped_payloads(self, tmp_path, sample_products):
        listed = tmp_path / "list.json"
        listed.write_text(json.dumps(sample_products), encoding="utf-8")
        wrapped = tmp_path / "wrapped.json"
        wrapped.write_text(json.dumps({"products": sample_products}), encoding="utf-8")

        assert [p.title for p in load_products(listed)] == [p.title for p in load_products(wrapped)]

    def test_rejects_non_list_payload(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('"just a string"', encoding="utf-8")
        with pytest.raises(ValueError):
            load_products(path)
