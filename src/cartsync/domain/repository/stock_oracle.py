"""Read-only ports onto the product catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cartsync.domain.model.stock import StockLevel
from cartsync.domain.model.value_objects import Money


class StockOracle(ABC):

    @abstractmethod
    def get_stock(self, product_id: str) -> StockLevel:
        """Return current stock for a product.

        Raises EntityNotFoundError if the catalog has no such product.
        Deactivated products are returned with ``is_active=False``.
        """


class PriceCatalog(ABC):

    @abstractmethod
    def get_current_price(self, product_id: str) -> Money:
        """Return today's price; EntityNotFoundError if unknown."""
