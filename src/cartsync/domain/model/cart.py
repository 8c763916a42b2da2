"""Cart line items: the persisted cart and the client-held snapshot.

A ``CartLineItem`` is owned by the cart store.  A ``LocalCartItem`` is
whatever the client says it has; it is never trusted for stock or price
decisions, only reconciled against the store.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from cartsync.domain.exceptions import ValidationError
from cartsync.domain.model.value_objects import Quantity, VariantKey


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CartLineItem:
    """One slot of a user's persisted cart.

    Invariants:
    - ``quantity`` is always positive
    - per user, ``slot`` is unique across all line items (enforced by
      the store's upsert)
    """

    id: str
    user_id: str
    product_id: str
    variant: VariantKey
    quantity: int
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        user_id: str,
        product_id: str,
        variant: VariantKey,
        quantity: int,
        now: datetime | None = None,
    ) -> CartLineItem:
        """Create a brand new line; the ID is assigned here and never changes."""
        if not user_id:
            raise ValidationError("User ID is required")
        if not product_id:
            raise ValidationError("Product ID is required")
        Quantity(quantity)
        now = now or utcnow()
        return CartLineItem(
            id=uuid.uuid4().hex,
            user_id=user_id,
            product_id=product_id,
            variant=variant,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )

    @property
    def slot(self) -> tuple[str, VariantKey]:
        return (self.product_id, self.variant)

    def set_quantity(self, quantity: int, now: datetime | None = None) -> None:
        """Replace the quantity.  Callers decide whether that is a sum or not."""
        Quantity(quantity)
        self.quantity = quantity
        self.updated_at = now or utcnow()


@dataclass(frozen=True)
class ProductSnapshot:
    """Product details as the client last saw them.  Display only."""

    name: str | None = None
    price: str | None = None


@dataclass(frozen=True)
class LocalCartItem:
    """A line of the client-held cart, exactly as supplied."""

    product_id: str
    quantity: int
    color: str | None = None
    size: str | None = None
    product: ProductSnapshot = field(default_factory=ProductSnapshot)

    @property
    def variant(self) -> VariantKey:
        return VariantKey(self.color, self.size)

    @property
    def slot(self) -> tuple[str, VariantKey]:
        return (self.product_id, self.variant)

    @property
    def display_name(self) -> str:
        return self.product.name or self.product_id


@dataclass(frozen=True)
class LocalCartSnapshot:
    """Immutable client cart state handed to the sync engine."""

    items: tuple[LocalCartItem, ...] = ()

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
