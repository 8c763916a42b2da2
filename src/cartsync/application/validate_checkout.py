"""Application service: Validate Checkout use case.

The last gate before an order is created.  Unlike add-to-cart, it does
not stop at the first problem: every offending line is reported at once
so the shopper can fix the whole cart in one pass.
"""

from __future__ import annotations

import structlog

from cartsync.application.cart_summary import CartSummaryHandler
from cartsync.application.dto import CheckoutValidationDTO, line_item_dto
from cartsync.domain.events import CartEventEmitter, NullEventEmitter
from cartsync.domain.exceptions import EntityNotFoundError, ValidationError
from cartsync.domain.model.cart import CartLineItem
from cartsync.domain.repository.cart_repository import CartRepository
from cartsync.domain.repository.stock_oracle import PriceCatalog, StockOracle

logger = structlog.get_logger(__name__)


class ValidateCheckoutHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        stock_oracle: StockOracle,
        price_catalog: PriceCatalog,
        events: CartEventEmitter | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._stock_oracle = stock_oracle
        self._summary = CartSummaryHandler(cart_repo, price_catalog)
        self._events = events or NullEventEmitter()

    def handle(self, user_id: str) -> CheckoutValidationDTO:
        """Validate every line of the cart against the live catalog.

        Raises ValidationError carrying one message per offending line.
        """
        items = self._cart_repo.list_for_user(user_id)
        if not items:
            raise ValidationError("Cart is empty")

        errors: list[str] = []
        valid: list[CartLineItem] = []

        for item in items:
            problem = self._check(item)
            if problem is None:
                valid.append(item)
            else:
                errors.append(problem)

        if errors:
            logger.info("Checkout validation failed", user_id=user_id, problems=len(errors))
            self._events.emit(
                "cart.checkout.rejected",
                user_id=user_id,
                problems=errors,
            )
            raise ValidationError("Cart validation failed", errors)

        self._events.emit(
            "cart.checkout.validated",
            user_id=user_id,
            unique_item_count=len(valid),
        )
        return CheckoutValidationDTO(
            items=[line_item_dto(item) for item in valid],
            summary=self._summary.project(valid),
        )

    def _check(self, item: CartLineItem) -> str | None:
        try:
            stock = self._stock_oracle.get_stock(item.product_id)
        except EntityNotFoundError:
            return f"Product {item.product_id} is no longer available"
        if not stock.is_active:
            return f"{stock.name} is no longer available"
        if not stock.satisfies(item.quantity):
            return (
                f"Only {stock.available} items available for {stock.name} "
                f"(requested: {item.quantity})"
            )
        return None
