"""Application service: Sync Cart use case.

Reconciles the cart a visitor built on the client (as a guest, or
offline) with the cart persisted for them, once the user is known.

Every local item is handled on its own:
  - a slot the store has never seen is *migrated* (first write, so
    add and replace coincide);
  - a slot present on both sides is *resolved* by the ConflictResolver
    and the winning quantity replaces the stored one.

Nothing here ever adds a local quantity to a stored one, so running the
same sync twice leaves the cart exactly as the first run did.  Problems
with a single item (unknown product, no stock, bad quantity) are
reported in the result and never abort the pass.  A failing store does
abort it; slots already written stay written.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import structlog

from cartsync.application.dto import SyncReportDTO, sync_report_dto
from cartsync.domain.events import CartEventEmitter, NullEventEmitter
from cartsync.domain.exceptions import (
    CatalogUnavailableError,
    StoreUnavailableError,
    ValidationError,
)
from cartsync.domain.model.cart import CartLineItem, LocalCartItem, LocalCartSnapshot
from cartsync.domain.model.stock import StockLevel
from cartsync.domain.model.sync import (
    ItemSource,
    MergeConflict,
    MergedItem,
    RejectionReason,
    RejectionRecord,
    SyncDirection,
    SyncReport,
)
from cartsync.domain.model.value_objects import VariantKey
from cartsync.domain.repository.cart_repository import CartRepository
from cartsync.domain.repository.stock_oracle import StockOracle
from cartsync.domain.service.conflict_resolver import ConflictResolver, Resolution
from cartsync.domain.service.stock_validation_service import (
    ProductUnavailableError,
    StockValidationService,
    UnknownVariantError,
)

logger = structlog.get_logger(__name__)


class SyncCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        stock_oracle: StockOracle,
        resolver: ConflictResolver | None = None,
        events: CartEventEmitter | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._stock = StockValidationService(stock_oracle)
        self._resolver = resolver or ConflictResolver()
        self._events = events or NullEventEmitter()

    def handle(
        self,
        user_id: str,
        local_items: LocalCartSnapshot | Iterable[LocalCartItem],
        direction: SyncDirection = SyncDirection.MERGE,
    ) -> SyncReportDTO:
        """Run one sync pass and report what happened to every item.

        ``direction`` selects the strategy:
          MERGE: resolve each local item against the stored cart.
          PUSH : the local cart replaces the stored cart wholesale.
          PULL : change nothing; report the stored cart.
        """
        if not user_id:
            raise ValidationError("User ID is required")
        if not isinstance(local_items, LocalCartSnapshot):
            local_items = LocalCartSnapshot(tuple(local_items))

        report = SyncReport(direction=direction)
        log = logger.bind(user_id=user_id, direction=direction.value)

        try:
            if direction is SyncDirection.PUSH:
                cleared = self._cart_repo.clear(user_id)
                log.info("Stored cart cleared for push", deleted_count=cleared)
                for local in self._acceptable_items(local_items, report):
                    stock = self._available_stock(local, report)
                    if stock is not None:
                        self._migrate(user_id, local, stock, report)
            elif direction is SyncDirection.MERGE:
                for local in self._acceptable_items(local_items, report):
                    stock = self._available_stock(local, report)
                    if stock is not None:
                        self._merge(user_id, local, stock, report)

            report.final_cart = self._cart_repo.list_for_user(user_id)
        except StoreUnavailableError as exc:
            log.error("Cart sync aborted", error=str(exc), writes=report.writes)
            self._events.emit(
                "cart.sync.aborted",
                user_id=user_id,
                direction=direction.value,
                writes=report.writes,
                error=str(exc),
            )
            raise

        log.info(
            "Cart sync completed",
            local_items=len(local_items),
            merged=len(report.merged),
            conflicts=len(report.conflicts),
            rejected=len(report.rejected),
            writes=report.writes,
        )
        self._events.emit(
            "cart.sync.completed",
            user_id=user_id,
            direction=direction.value,
            merged=len(report.merged),
            conflicts=len(report.conflicts),
            rejected=len(report.rejected),
            writes=report.writes,
        )
        return sync_report_dto(report)

    # --- Per-item steps -------------------------------------------------------

    def _acceptable_items(
        self, snapshot: LocalCartSnapshot, report: SyncReport
    ) -> Iterator[LocalCartItem]:
        """Drop items no store could hold; first occurrence of a slot wins."""
        seen: set[tuple[str, VariantKey]] = set()
        for local in snapshot:
            if local.quantity <= 0:
                self._reject(
                    report,
                    local,
                    RejectionReason.INVALID_QUANTITY,
                    f"Quantity must be positive for {local.display_name} "
                    f"(got {local.quantity})",
                )
                continue
            if local.slot in seen:
                self._reject(
                    report,
                    local,
                    RejectionReason.DUPLICATE_SLOT,
                    f"{local.display_name} ({local.variant}) appears more than once",
                )
                continue
            seen.add(local.slot)
            yield local

    def _available_stock(
        self, local: LocalCartItem, report: SyncReport
    ) -> StockLevel | None:
        try:
            stock = self._stock.lookup(local.product_id)
            self._stock.check_variant(stock, local.variant)
        except ProductUnavailableError as exc:
            self._reject(report, local, RejectionReason.PRODUCT_UNAVAILABLE, str(exc))
            return None
        except UnknownVariantError as exc:
            self._reject(report, local, RejectionReason.UNKNOWN_VARIANT, str(exc))
            return None
        except CatalogUnavailableError as exc:
            self._reject(report, local, RejectionReason.PRODUCT_UNAVAILABLE, str(exc))
            return None
        return stock

    def _migrate(
        self,
        user_id: str,
        local: LocalCartItem,
        stock: StockLevel,
        report: SyncReport,
    ) -> None:
        resolution = self._resolver.assess_new(local.quantity)
        if resolution.is_conflict:
            self._record_conflict(user_id, local, 0, resolution, report)

        if not self._has_stock(local, stock, resolution.quantity, report):
            return

        item = self._cart_repo.upsert_slot(
            user_id, local.product_id, local.variant, resolution.quantity
        )
        report.writes += 1
        report.merged.append(MergedItem(item=item, source=ItemSource.LOCAL_MIGRATED))
        self._events.emit(
            "cart.sync.item_migrated",
            user_id=user_id,
            item_id=item.id,
            product_id=item.product_id,
            variant=str(item.variant),
            quantity=item.quantity,
        )

    def _merge(
        self,
        user_id: str,
        local: LocalCartItem,
        stock: StockLevel,
        report: SyncReport,
    ) -> None:
        existing = self._cart_repo.get_slot(user_id, local.product_id, local.variant)
        if existing is None:
            self._migrate(user_id, local, stock, report)
            return

        resolution = self._resolver.resolve(local.quantity, existing.quantity)
        if resolution.is_conflict:
            self._record_conflict(user_id, local, existing.quantity, resolution, report)

        if not self._has_stock(local, stock, resolution.quantity, report):
            return

        item: CartLineItem = existing
        source = ItemSource.DATABASE_EXISTING
        if resolution.quantity != existing.quantity:
            item = self._cart_repo.upsert_slot(
                user_id, local.product_id, local.variant, resolution.quantity
            )
            report.writes += 1
            source = ItemSource.CONFLICT_RESOLVED
        report.merged.append(MergedItem(item=item, source=source))

    # --- Reporting helpers ----------------------------------------------------

    def _has_stock(
        self,
        local: LocalCartItem,
        stock: StockLevel,
        quantity: int,
        report: SyncReport,
    ) -> bool:
        if stock.satisfies(quantity):
            return True
        self._reject(
            report,
            local,
            RejectionReason.INSUFFICIENT_STOCK,
            f"Only {stock.available} items available for {stock.name} "
            f"(requested: {quantity})",
        )
        return False

    def _record_conflict(
        self,
        user_id: str,
        local: LocalCartItem,
        persisted_quantity: int,
        resolution: Resolution,
        report: SyncReport,
    ) -> None:
        conflict = MergeConflict(
            product_id=local.product_id,
            variant=local.variant,
            local_quantity=local.quantity,
            persisted_quantity=persisted_quantity,
            resolved_quantity=resolution.quantity,
            reason=resolution.reason,
        )
        report.conflicts.append(conflict)
        logger.info(
            "Cart conflict resolved",
            user_id=user_id,
            product_id=local.product_id,
            variant=str(local.variant),
            local_quantity=local.quantity,
            persisted_quantity=persisted_quantity,
            resolved_quantity=resolution.quantity,
            reason=resolution.reason.value,
        )
        self._events.emit(
            "cart.sync.conflict_resolved",
            user_id=user_id,
            product_id=local.product_id,
            variant=str(local.variant),
            local_quantity=local.quantity,
            persisted_quantity=persisted_quantity,
            resolved_quantity=resolution.quantity,
            reason=resolution.reason.value,
        )

    def _reject(
        self,
        report: SyncReport,
        local: LocalCartItem,
        reason: RejectionReason,
        detail: str,
    ) -> None:
        report.rejected.append(
            RejectionRecord(
                product_id=local.product_id,
                variant=local.variant,
                reason=reason,
                detail=detail,
            )
        )
        logger.warning(
            "Cart sync item rejected",
            product_id=local.product_id,
            variant=str(local.variant),
            reason=reason.value,
            detail=detail,
        )
        self._events.emit(
            "cart.sync.item_rejected",
            product_id=local.product_id,
            variant=str(local.variant),
            reason=reason.value,
            detail=detail,
        )
