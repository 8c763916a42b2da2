"""Stock levels as reported by the catalog."""

from __future__ import annotations

from dataclasses import dataclass

from cartsync.domain.model.value_objects import VariantKey


@dataclass(frozen=True)
class StockLevel:
    """Point-in-time availability of one product.

    ``colors`` and ``sizes`` list the options the product is sold in;
    an empty tuple means the product has no such selector.
    """

    product_id: str
    name: str
    available: int
    is_active: bool = True
    colors: tuple[str, ...] = ()
    sizes: tuple[str, ...] = ()

    def satisfies(self, quantity: int) -> bool:
        return self.is_active and self.available >= quantity

    def offers(self, variant: VariantKey) -> bool:
        """True if every selected option is one the product is sold in."""
        if variant.color is not None and self.colors and variant.color not in self.colors:
            return False
        if variant.size is not None and self.sizes and variant.size not in self.sizes:
            return False
        return True
