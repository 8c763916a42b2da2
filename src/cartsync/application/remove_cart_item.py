"""Application service: Remove Cart Item use case."""

from __future__ import annotations

from cartsync.domain.events import CartEventEmitter, NullEventEmitter
from cartsync.domain.repository.cart_repository import CartRepository


class RemoveCartItemHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        events: CartEventEmitter | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._events = events or NullEventEmitter()

    def handle(self, user_id: str, item_id: str) -> None:
        # Ownership is enforced by the store: someone else's line is "not found".
        self._cart_repo.delete(item_id, user_id)
        self._events.emit("cart.item_removed", user_id=user_id, item_id=item_id)
