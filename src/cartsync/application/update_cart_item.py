"""Application service: Update Cart Item use case.

Sets (does not add to) the quantity of one of the user's lines.
"""

from __future__ import annotations

from cartsync.application.dto import LineItemDTO, line_item_dto
from cartsync.domain.events import CartEventEmitter, NullEventEmitter
from cartsync.domain.exceptions import EntityNotFoundError, ValidationError
from cartsync.domain.repository.cart_repository import CartRepository
from cartsync.domain.repository.stock_oracle import StockOracle
from cartsync.domain.service.stock_validation_service import StockValidationService


class UpdateCartItemHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        stock_oracle: StockOracle,
        events: CartEventEmitter | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._stock = StockValidationService(stock_oracle)
        self._events = events or NullEventEmitter()

    def handle(self, user_id: str, item_id: str, quantity: int) -> LineItemDTO:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be positive")

        item = self._cart_repo.get_by_id(item_id, user_id)
        if item is None:
            raise EntityNotFoundError("Cart item not found")

        self._stock.require(item.product_id, quantity)

        previous = item.quantity
        item = self._cart_repo.upsert_slot(
            user_id, item.product_id, item.variant, quantity
        )
        self._events.emit(
            "cart.item_updated",
            user_id=user_id,
            item_id=item.id,
            product_id=item.product_id,
            previous_quantity=previous,
            quantity=item.quantity,
        )
        return line_item_dto(item)
