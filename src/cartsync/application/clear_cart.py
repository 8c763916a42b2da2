"""Application service: Clear Cart use case.

Invoked by order placement once the order is persisted, and by users
emptying their cart.
"""

from __future__ import annotations

from cartsync.domain.events import CartEventEmitter, NullEventEmitter
from cartsync.domain.repository.cart_repository import CartRepository


class ClearCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        events: CartEventEmitter | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._events = events or NullEventEmitter()

    def handle(self, user_id: str) -> int:
        """Remove every line of the user's cart; return how many were removed."""
        deleted = self._cart_repo.clear(user_id)
        self._events.emit("cart.cleared", user_id=user_id, deleted_count=deleted)
        return deleted
