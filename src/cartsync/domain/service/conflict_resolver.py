"""Domain service: Conflict Resolution between local and persisted carts.

When the same slot exists both in the client snapshot and in the store,
exactly one quantity must win.  Neither ``max`` nor ``sum`` is acceptable:
a retried or doubled merge would inflate the cart every time it runs.

The policy below is deliberately asymmetric:
  - an implausibly large quantity on one side is treated as corrupt and
    the other side wins;
  - a difference of exactly one unit is read as the user's latest click
    on the client, so the local side wins;
  - any larger divergence defers to the store, the durable record across
    sessions;
  - if both sides are implausible, the slot is reset to a small safe
    quantity.

Re-running ``resolve`` on its own output always yields ``NO_CONFLICT``.
"""

from __future__ import annotations

from dataclasses import dataclass

from cartsync.domain.exceptions import ValidationError
from cartsync.domain.model.sync import ResolutionReason

# Default policy values; overridable through ConflictPolicy.
MAX_REASONABLE_QTY = 10
QUANTITY_HARD_CAP = 50
SUSPICIOUS_RESET_QTY = 1


@dataclass(frozen=True)
class ConflictPolicy:
    """Tunable thresholds of the resolver.

    ``suspicious_threshold`` is the largest quantity considered plausible.
    Both inputs are first clamped to ``hard_cap``; ``reset_quantity`` is
    what a slot is reset to when nothing can be trusted.
    """

    suspicious_threshold: int = MAX_REASONABLE_QTY
    hard_cap: int = QUANTITY_HARD_CAP
    reset_quantity: int = SUSPICIOUS_RESET_QTY

    def __post_init__(self) -> None:
        if self.suspicious_threshold < 1:
            raise ValidationError("Suspicious threshold must be at least 1")
        if self.hard_cap < self.suspicious_threshold:
            raise ValidationError(
                f"Hard cap {self.hard_cap} below suspicious threshold "
                f"{self.suspicious_threshold}"
            )
        if not 1 <= self.reset_quantity <= self.suspicious_threshold:
            raise ValidationError(
                f"Reset quantity must be between 1 and {self.suspicious_threshold}"
            )

    def is_suspicious(self, quantity: int) -> bool:
        return quantity > self.suspicious_threshold


@dataclass(frozen=True)
class Resolution:
    quantity: int
    reason: ResolutionReason
    local_quantity: int  # after clamping
    persisted_quantity: int  # after clamping

    @property
    def is_conflict(self) -> bool:
        return self.reason is not ResolutionReason.NO_CONFLICT


class ConflictResolver:

    def __init__(self, policy: ConflictPolicy | None = None) -> None:
        self._policy = policy or ConflictPolicy()

    @property
    def policy(self) -> ConflictPolicy:
        return self._policy

    def resolve(self, local: int, persisted: int) -> Resolution:
        """Decide the quantity of a slot present on both sides."""
        if local <= 0 or persisted <= 0:
            raise ValidationError(
                f"Cannot resolve non-positive quantities ({local}, {persisted})"
            )
        policy = self._policy
        local = min(local, policy.hard_cap)
        persisted = min(persisted, policy.hard_cap)
        local_bad = policy.is_suspicious(local)
        persisted_bad = policy.is_suspicious(persisted)

        if local_bad and persisted_bad:
            return Resolution(
                policy.reset_quantity,
                ResolutionReason.RESET_BOTH_SUSPICIOUS,
                local,
                persisted,
            )
        if local == persisted:
            return Resolution(local, ResolutionReason.NO_CONFLICT, local, persisted)
        if local_bad:
            return Resolution(
                persisted, ResolutionReason.REJECTED_SUSPICIOUS_LOCAL, local, persisted
            )
        if persisted_bad:
            return Resolution(
                local, ResolutionReason.REJECTED_SUSPICIOUS_DATABASE, local, persisted
            )
        if abs(local - persisted) == 1:
            return Resolution(
                local, ResolutionReason.RECENT_LOCAL_ACTIVITY, local, persisted
            )
        return Resolution(persisted, ResolutionReason.DATABASE_IS_TRUTH, local, persisted)

    def assess_new(self, local: int) -> Resolution:
        """Decide the quantity of a slot only the client knows about."""
        if local <= 0:
            raise ValidationError(f"Cannot migrate non-positive quantity {local}")
        if self._policy.is_suspicious(local):
            return Resolution(
                self._policy.reset_quantity,
                ResolutionReason.CAPPED_SUSPICIOUS_NEW_ITEM,
                local,
                0,
            )
        return Resolution(local, ResolutionReason.NO_CONFLICT, local, 0)
