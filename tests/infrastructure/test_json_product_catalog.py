"""Tests for the JSON product catalog adapter."""

import json

import pytest

from cartsync.application.sync_cart import SyncCartHandler
from cartsync.domain.exceptions import CatalogUnavailableError, EntityNotFoundError
from cartsync.domain.model.cart import LocalCartItem
from cartsync.domain.model.product import Product
from cartsync.domain.model.value_objects import Money
from cartsync.infrastructure.catalog.json_product_catalog import JsonProductCatalog
from tests.fakes import FakeCartRepository


@pytest.fixture
def catalog(tmp_path):
    catalog = JsonProductCatalog(tmp_path / "products.json")
    catalog.save(Product(id="1", name="Cricket Bat", price=Money.of("49.00"),
                         stock_quantity=5, sizes=["SH", "LH"]))
    return catalog


class TestJsonProductCatalog:

    def test_stock_level_round_trips_options(self, catalog):
        stock = catalog.get_stock("1")
        assert stock.available == 5
        assert stock.sizes == ("SH", "LH")
        assert stock.colors == ()

    def test_options_stored_as_arrays(self, tmp_path, catalog):
        raw = json.loads((tmp_path / "products.json").read_text(encoding="utf-8"))
        assert raw[0]["sizes"] == ["SH", "LH"]
        assert raw[0]["price"] == "49.00"

    def test_current_price(self, catalog):
        assert str(catalog.get_current_price("1")) == "$49.00"

    def test_unknown_product(self, catalog):
        with pytest.raises(EntityNotFoundError, match="Product not found"):
            catalog.get_stock("2")

    def test_lookup_by_name_is_case_insensitive(self, catalog):
        assert catalog.get_by_name("cricket bat").id == "1"


class TestUnreadableCatalog:

    @pytest.mark.parametrize("content", ["{not json", '[{"name": "No id"}]', '[{"id": "1"}]'])
    def test_broken_file_is_catalog_unavailable(self, tmp_path, content):
        path = tmp_path / "products.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(CatalogUnavailableError):
            JsonProductCatalog(path).get_stock("1")

    def test_sync_reports_items_instead_of_crashing(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text("{not json", encoding="utf-8")
        handler = SyncCartHandler(FakeCartRepository(), JsonProductCatalog(path))

        report = handler.handle("u1", [
            LocalCartItem(product_id="1", quantity=1),
            LocalCartItem(product_id="2", quantity=1),
        ])

        assert [r.reason for r in report.rejected] == ["product unavailable"] * 2
        assert report.final_cart == []
