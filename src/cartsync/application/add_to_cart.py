"""Application service: Add to Cart use case.

A genuine user gesture, so an existing slot *accumulates*: adding 3 to a
slot holding 2 leaves 5.  Sync never goes through here; it replaces.
The read-add-write is a compare-and-set on the slot, retried when
another tab or device changed the slot in between, so concurrent adds
are never lost.
"""

from __future__ import annotations

import structlog

from cartsync.application.dto import LineItemDTO, line_item_dto
from cartsync.domain.events import CartEventEmitter, NullEventEmitter
from cartsync.domain.exceptions import (
    InsufficientStockError,
    StoreUnavailableError,
    ValidationError,
)
from cartsync.domain.model.value_objects import VariantKey
from cartsync.domain.repository.cart_repository import CartRepository
from cartsync.domain.repository.stock_oracle import StockOracle
from cartsync.domain.service.stock_validation_service import StockValidationService

logger = structlog.get_logger(__name__)

# Each failed attempt means another writer succeeded on the same slot.
MAX_WRITE_ATTEMPTS = 10


class AddToCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        stock_oracle: StockOracle,
        events: CartEventEmitter | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._stock = StockValidationService(stock_oracle)
        self._events = events or NullEventEmitter()

    def handle(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
        color: str | None = None,
        size: str | None = None,
    ) -> LineItemDTO:
        """Add ``quantity`` units of a product variant to the user's cart.

        Steps:
        1. Reject non-positive quantities.
        2. Check the requested delta alone against stock.
        3. Accumulate onto an existing slot and re-check the total.
        4. Write the final quantity (never the raw delta) only if the slot
           still holds what was read; otherwise start over from step 3.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be positive")

        variant = VariantKey(color, size)
        stock = self._stock.require(product_id, quantity, variant)

        for _ in range(MAX_WRITE_ATTEMPTS):
            existing = self._cart_repo.get_slot(user_id, product_id, variant)
            previous = existing.quantity if existing is not None else None
            new_quantity = (previous or 0) + quantity

            if previous is not None and not stock.satisfies(new_quantity):
                raise InsufficientStockError(
                    product_name=stock.name,
                    available=stock.available,
                    requested=new_quantity,
                    message=(
                        f"Cannot add {quantity} more items. Only {stock.available} "
                        f"items available for {stock.name} "
                        f"({previous} already in cart)"
                    ),
                )

            item = self._cart_repo.replace_slot_if(
                user_id, product_id, variant, previous, new_quantity
            )
            if item is not None:
                break
            logger.debug(
                "Cart slot changed during add, retrying",
                user_id=user_id,
                product_id=product_id,
                variant=str(variant),
            )
        else:
            raise StoreUnavailableError(
                f"Cart slot for {stock.name} kept changing; try again"
            )

        logger.debug(
            "Cart item added",
            user_id=user_id,
            product_id=product_id,
            variant=str(variant),
            previous_quantity=previous or 0,
            quantity=new_quantity,
        )
        self._events.emit(
            "cart.item_added",
            user_id=user_id,
            item_id=item.id,
            product_id=product_id,
            variant=str(variant),
            added=quantity,
            quantity=item.quantity,
        )
        return line_item_dto(item)
