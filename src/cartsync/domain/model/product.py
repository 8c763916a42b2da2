"""Product: the catalog's view of an item for sale.

The catalog is owned elsewhere; carts only ever read it through the
StockOracle and PriceCatalog ports.  This aggregate backs the local
catalog adapter used by the CLI and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cartsync.domain.exceptions import ValidationError
from cartsync.domain.model.stock import StockLevel
from cartsync.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    ``colors`` and ``sizes`` are the selectors a shopper may choose
    from; empty lists mean the product has no such option.
    """

    id: str
    name: str
    price: Money
    stock_quantity: int = 0
    is_active: bool = True
    colors: list[str] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        Carts pick the new price up on their next summary; nothing
        stored in a cart remembers the old one.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def set_stock(self, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self.stock_quantity = quantity

    def deactivate(self) -> None:
        self.is_active = False

    def activate(self) -> None:
        self.is_active = True

    def stock_level(self) -> StockLevel:
        return StockLevel(
            product_id=self.id,
            name=self.name,
            available=self.stock_quantity,
            is_active=self.is_active,
            colors=tuple(self.colors),
            sizes=tuple(self.sizes),
        )
