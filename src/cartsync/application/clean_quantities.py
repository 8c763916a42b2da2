"""Application service: Clean Suspicious Quantities (maintenance).

Carts damaged by older accumulate-on-sync clients can hold implausible
quantities.  This resets every such line to the policy's reset
quantity, for one user or for every cart.
"""

from __future__ import annotations

import structlog

from cartsync.application.dto import LineItemDTO, line_item_dto
from cartsync.domain.events import CartEventEmitter, NullEventEmitter
from cartsync.domain.repository.cart_repository import CartRepository
from cartsync.domain.service.conflict_resolver import ConflictPolicy

logger = structlog.get_logger(__name__)


class CleanSuspiciousQuantitiesHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        policy: ConflictPolicy | None = None,
        events: CartEventEmitter | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._policy = policy or ConflictPolicy()
        self._events = events or NullEventEmitter()

    def handle(self, user_id: str | None = None, dry_run: bool = False) -> list[LineItemDTO]:
        """Reset suspicious lines and return them as they were *before* the reset."""
        if user_id is None:
            items = self._cart_repo.list_all()
        else:
            items = self._cart_repo.list_for_user(user_id)

        suspicious = [i for i in items if self._policy.is_suspicious(i.quantity)]
        found = [line_item_dto(i) for i in suspicious]

        if dry_run or not suspicious:
            logger.info("Suspicious cart quantities found", count=len(found), dry_run=dry_run)
            return found

        for item in suspicious:
            self._cart_repo.upsert_slot(
                item.user_id, item.product_id, item.variant, self._policy.reset_quantity
            )
            self._events.emit(
                "cart.maintenance.quantity_reset",
                user_id=item.user_id,
                item_id=item.id,
                product_id=item.product_id,
                previous_quantity=item.quantity,
                quantity=self._policy.reset_quantity,
            )

        logger.info("Suspicious cart quantities reset", count=len(found))
        return found
