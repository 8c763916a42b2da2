"""Outcome records produced by a cart sync pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cartsync.domain.model.cart import CartLineItem
from cartsync.domain.model.value_objects import VariantKey


class ResolutionReason(Enum):
    NO_CONFLICT = "NoConflict"
    RESET_BOTH_SUSPICIOUS = "ResetBothSuspicious"
    REJECTED_SUSPICIOUS_LOCAL = "RejectedSuspiciousLocal"
    REJECTED_SUSPICIOUS_DATABASE = "RejectedSuspiciousDatabase"
    RECENT_LOCAL_ACTIVITY = "RecentLocalActivity"
    DATABASE_IS_TRUTH = "DatabaseIsTruth"
    CAPPED_SUSPICIOUS_NEW_ITEM = "CappedSuspiciousNewItem"


class ItemSource(Enum):
    LOCAL_MIGRATED = "LocalMigrated"
    CONFLICT_RESOLVED = "ConflictResolved"
    DATABASE_EXISTING = "DatabaseExisting"


class SyncDirection(Enum):
    MERGE = "merge"
    PUSH = "push"  # local cart replaces the persisted one
    PULL = "pull"  # read-only; client adopts the persisted cart


class RejectionReason(Enum):
    INSUFFICIENT_STOCK = "insufficient stock"
    PRODUCT_UNAVAILABLE = "product unavailable"
    INVALID_QUANTITY = "invalid quantity"
    UNKNOWN_VARIANT = "unknown variant"
    DUPLICATE_SLOT = "duplicate slot"


@dataclass(frozen=True)
class MergeConflict:
    product_id: str
    variant: VariantKey
    local_quantity: int
    persisted_quantity: int
    resolved_quantity: int
    reason: ResolutionReason


@dataclass(frozen=True)
class RejectionRecord:
    product_id: str
    variant: VariantKey
    reason: RejectionReason
    detail: str


@dataclass(frozen=True)
class MergedItem:
    item: CartLineItem
    source: ItemSource


@dataclass
class SyncReport:
    """Everything a sync pass did, per item, plus the resulting cart."""

    direction: SyncDirection = SyncDirection.MERGE
    merged: list[MergedItem] = field(default_factory=list)
    conflicts: list[MergeConflict] = field(default_factory=list)
    rejected: list[RejectionRecord] = field(default_factory=list)
    final_cart: list[CartLineItem] = field(default_factory=list)
    writes: int = 0
