"""Application service: Cart Summary use case (query).

Totals are always priced from the catalog *now*, never from whatever
price the client or the line remembered: prices change between adding
an item and looking at the cart.
"""

from __future__ import annotations

import structlog

from cartsync.application.dto import CartSummaryDTO
from cartsync.domain.exceptions import EntityNotFoundError
from cartsync.domain.model.cart import CartLineItem
from cartsync.domain.model.value_objects import Money
from cartsync.domain.repository.cart_repository import CartRepository
from cartsync.domain.repository.stock_oracle import PriceCatalog

logger = structlog.get_logger(__name__)


class CartSummaryHandler:

    def __init__(self, cart_repo: CartRepository, price_catalog: PriceCatalog) -> None:
        self._cart_repo = cart_repo
        self._price_catalog = price_catalog

    def handle(self, user_id: str) -> CartSummaryDTO:
        return self.project(self._cart_repo.list_for_user(user_id))

    def project(self, items: list[CartLineItem]) -> CartSummaryDTO:
        """Aggregate counts and subtotal over the given lines."""
        subtotal: Money | None = None
        unpriced: list[str] = []

        for item in items:
            try:
                price = self._price_catalog.get_current_price(item.product_id)
            except EntityNotFoundError:
                logger.warning(
                    "No current price for cart item",
                    item_id=item.id,
                    product_id=item.product_id,
                )
                unpriced.append(item.product_id)
                continue
            line_total = price * item.quantity
            subtotal = line_total if subtotal is None else subtotal + line_total

        return CartSummaryDTO(
            item_count=sum(item.quantity for item in items),
            unique_item_count=len(items),
            subtotal=str(subtotal or Money.zero()),
            unpriced_product_ids=unpriced,
        )
