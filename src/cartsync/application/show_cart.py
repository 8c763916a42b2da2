"""Application service: Show Cart use case (query)."""

from __future__ import annotations

from cartsync.application.dto import LineItemDTO, line_item_dto
from cartsync.domain.repository.cart_repository import CartRepository


class ShowCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str) -> list[LineItemDTO]:
        return [line_item_dto(item) for item in self._cart_repo.list_for_user(user_id)]
