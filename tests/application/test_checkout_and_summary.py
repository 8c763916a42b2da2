"""Integration tests for the CartSummary and ValidateCheckout use cases."""

import pytest

from cartsync.application.cart_summary import CartSummaryHandler
from cartsync.application.validate_checkout import ValidateCheckoutHandler
from cartsync.domain.exceptions import ValidationError
from cartsync.domain.model.value_objects import Money
from tests.fakes import FakeCartRepository, RecordingEventEmitter, make_catalog


def _setup():
    cart_repo = FakeCartRepository()
    catalog = make_catalog()
    events = RecordingEventEmitter()
    return cart_repo, catalog, events


class TestCartSummary:

    def test_counts_and_subtotal(self):
        cart_repo, catalog, _ = _setup()
        cart_repo.seed("u1", "P1", 2, size="SH")
        cart_repo.seed("u1", "P2", 1, color="Red")

        dto = CartSummaryHandler(cart_repo, catalog).handle("u1")

        assert dto.item_count == 3
        assert dto.unique_item_count == 2
        assert dto.subtotal == "$113.50"

    def test_uses_current_catalog_price(self):
        cart_repo, catalog, _ = _setup()
        cart_repo.seed("u1", "P3", 2)
        handler = CartSummaryHandler(cart_repo, catalog)
        assert handler.handle("u1").subtotal == "$160.00"

        catalog.get_by_id("P3").update_price(Money.of("70.00"))

        assert handler.handle("u1").subtotal == "$140.00"

    def test_empty_cart(self):
        cart_repo, catalog, _ = _setup()
        dto = CartSummaryHandler(cart_repo, catalog).handle("u1")
        assert (dto.item_count, dto.unique_item_count, dto.subtotal) == (0, 0, "$0.00")

    def test_vanished_product_excluded_from_subtotal(self):
        cart_repo, catalog, _ = _setup()
        cart_repo.seed("u1", "P3", 1)
        cart_repo.seed("u1", "P1", 1)
        catalog.remove("P1")

        dto = CartSummaryHandler(cart_repo, catalog).handle("u1")

        assert dto.subtotal == "$80.00"
        assert dto.item_count == 2
        assert dto.unpriced_product_ids == ["P1"]


class TestValidateCheckout:

    def test_valid_cart_passes(self):
        cart_repo, catalog, events = _setup()
        cart_repo.seed("u1", "P3", 2)

        dto = ValidateCheckoutHandler(cart_repo, catalog, catalog, events).handle("u1")

        assert [i.product_id for i in dto.items] == ["P3"]
        assert dto.summary.subtotal == "$160.00"
        assert events.names() == ["cart.checkout.validated"]

    def test_empty_cart_rejected(self):
        cart_repo, catalog, _ = _setup()
        with pytest.raises(ValidationError, match="Cart is empty"):
            ValidateCheckoutHandler(cart_repo, catalog, catalog).handle("u1")

    def test_all_problems_reported_together(self):
        cart_repo, catalog, events = _setup()
        cart_repo.seed("u1", "P3", 1)
        cart_repo.seed("u1", "P2", 5, color="Red")
        cart_repo.seed("u1", "P1", 1, size="SH")
        catalog.get_by_id("P3").deactivate()

        with pytest.raises(ValidationError, match="Cart validation failed") as exc_info:
            ValidateCheckoutHandler(cart_repo, catalog, catalog, events).handle("u1")

        assert exc_info.value.messages == [
            "Helmet is no longer available",
            "Only 3 items available for Batting Gloves (requested: 5)",
        ]
        assert events.names() == ["cart.checkout.rejected"]

    def test_deleted_product_reported(self):
        cart_repo, catalog, _ = _setup()
        cart_repo.seed("u1", "P1", 1)
        catalog.remove("P1")

        with pytest.raises(ValidationError) as exc_info:
            ValidateCheckoutHandler(cart_repo, catalog, catalog).handle("u1")

        assert exc_info.value.messages == ["Product P1 is no longer available"]
