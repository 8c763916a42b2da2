"""Integration tests for the catalog maintenance use cases."""

import pytest

from cartsync.application.add_product import AddProductHandler
from cartsync.application.update_product import UpdateProductHandler
from cartsync.domain.exceptions import EntityNotFoundError, ValidationError
from tests.fakes import FakeCatalog, make_catalog


class TestAddProduct:

    def test_first_product_gets_id_1(self):
        catalog = FakeCatalog()
        product = AddProductHandler(catalog).handle("Bat", "49.00", stock=5, sizes=["SH", " "])
        assert product.id == "1"
        assert product.sizes == ["SH"]
        assert catalog.get_stock("1").available == 5

    def test_duplicate_name_rejected(self):
        catalog = FakeCatalog()
        AddProductHandler(catalog).handle("Bat", "49.00")
        with pytest.raises(ValidationError, match="already exists"):
            AddProductHandler(catalog).handle("bat", "10.00")

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            AddProductHandler(FakeCatalog()).handle("Bat", "0")


class TestUpdateProduct:

    def test_updates_stock_and_availability(self):
        catalog = make_catalog()
        UpdateProductHandler(catalog).handle("P3", stock=4, active=False)
        stock = catalog.get_stock("P3")
        assert (stock.available, stock.is_active) == (4, False)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            UpdateProductHandler(make_catalog()).handle("P3", stock=-1)

    def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError):
            UpdateProductHandler(make_catalog()).handle("NOPE", new_price="1.00")
