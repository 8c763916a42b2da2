"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  They are pydantic
models so the same objects render straight to the storefront's
camelCase JSON (``model_dump(by_alias=True)``); Python code keeps using
the snake_case attribute names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cartsync.domain.model.cart import CartLineItem
from cartsync.domain.model.sync import MergeConflict, RejectionRecord, SyncReport


class WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class LineItemDTO(WireModel):
    id: str
    product_id: str
    color: str | None
    size: str | None
    quantity: int
    created_at: str
    updated_at: str


class MergedItemDTO(WireModel):
    item: LineItemDTO
    source: str  # ItemSource value, e.g. "LocalMigrated"


class MergeConflictDTO(WireModel):
    product_id: str
    color: str | None
    size: str | None
    local_quantity: int
    persisted_quantity: int
    resolved_quantity: int
    resolution_reason: str


class RejectionDTO(WireModel):
    product_id: str
    color: str | None
    size: str | None
    reason: str
    detail: str


class SyncReportDTO(WireModel):
    direction: str
    merged: list[MergedItemDTO]
    conflicts: list[MergeConflictDTO]
    rejected: list[RejectionDTO]
    final_cart: list[LineItemDTO]
    writes: int


class CartSummaryDTO(WireModel):
    item_count: int
    unique_item_count: int
    subtotal: str  # formatted, e.g. "$45.00"
    unpriced_product_ids: list[str] = Field(default_factory=list)


class CheckoutValidationDTO(WireModel):
    items: list[LineItemDTO]
    summary: CartSummaryDTO


# --- Mapping ------------------------------------------------------------------


def line_item_dto(item: CartLineItem) -> LineItemDTO:
    return LineItemDTO(
        id=item.id,
        product_id=item.product_id,
        color=item.variant.color,
        size=item.variant.size,
        quantity=item.quantity,
        created_at=item.created_at.isoformat(),
        updated_at=item.updated_at.isoformat(),
    )


def _conflict_dto(conflict: MergeConflict) -> MergeConflictDTO:
    return MergeConflictDTO(
        product_id=conflict.product_id,
        color=conflict.variant.color,
        size=conflict.variant.size,
        local_quantity=conflict.local_quantity,
        persisted_quantity=conflict.persisted_quantity,
        resolved_quantity=conflict.resolved_quantity,
        resolution_reason=conflict.reason.value,
    )


def _rejection_dto(rejection: RejectionRecord) -> RejectionDTO:
    return RejectionDTO(
        product_id=rejection.product_id,
        color=rejection.variant.color,
        size=rejection.variant.size,
        reason=rejection.reason.value,
        detail=rejection.detail,
    )


def sync_report_dto(report: SyncReport) -> SyncReportDTO:
    return SyncReportDTO(
        direction=report.direction.value,
        merged=[
            MergedItemDTO(item=line_item_dto(m.item), source=m.source.value)
            for m in report.merged
        ],
        conflicts=[_conflict_dto(c) for c in report.conflicts],
        rejected=[_rejection_dto(r) for r in report.rejected],
        final_cart=[line_item_dto(i) for i in report.final_cart],
        writes=report.writes,
    )
