"""Domain service: Stock Validation.

Every quantity that is about to be written to a cart passes through
here first.  The cart store itself never looks at stock.
"""

from __future__ import annotations

from cartsync.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from cartsync.domain.model.stock import StockLevel
from cartsync.domain.model.value_objects import VariantKey
from cartsync.domain.repository.stock_oracle import StockOracle


class ProductUnavailableError(EntityNotFoundError):
    """The product is unknown to the catalog or no longer sold."""


class UnknownVariantError(ValidationError):
    """The selected colour or size is not one the product is sold in."""


class StockValidationService:

    def __init__(self, stock_oracle: StockOracle) -> None:
        self._stock_oracle = stock_oracle

    def lookup(self, product_id: str) -> StockLevel:
        """Return stock for an active product.

        Raises ProductUnavailableError for unknown and deactivated
        products alike; the caller cannot act differently on either.
        """
        try:
            stock = self._stock_oracle.get_stock(product_id)
        except EntityNotFoundError as exc:
            raise ProductUnavailableError(f"Product not found: '{product_id}'") from exc
        if not stock.is_active:
            raise ProductUnavailableError(f"{stock.name} is no longer available")
        return stock

    def check_variant(self, stock: StockLevel, variant: VariantKey) -> None:
        if not stock.offers(variant):
            raise UnknownVariantError(
                f"{stock.name} is not sold in variant {variant}"
            )

    def require(
        self,
        product_id: str,
        quantity: int,
        variant: VariantKey | None = None,
    ) -> StockLevel:
        """Ensure ``quantity`` units of a product (variant) can be supplied."""
        stock = self.lookup(product_id)
        if variant is not None:
            self.check_variant(stock, variant)
        if not stock.satisfies(quantity):
            raise InsufficientStockError(
                product_name=stock.name,
                available=stock.available,
                requested=quantity,
            )
        return stock
