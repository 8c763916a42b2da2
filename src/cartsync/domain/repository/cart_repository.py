"""Abstract repository for persisted cart line items.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.

Implementations raise ``StoreUnavailableError`` when the underlying
storage cannot be reached; they never perform stock checks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cartsync.domain.model.cart import CartLineItem
from cartsync.domain.model.value_objects import VariantKey


class CartRepository(ABC):

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[CartLineItem]:
        """Return every line of a user's cart in creation order."""

    @abstractmethod
    def list_all(self) -> list[CartLineItem]:
        """Return every line of every cart (maintenance scans)."""

    @abstractmethod
    def get_slot(
        self, user_id: str, product_id: str, variant: VariantKey
    ) -> CartLineItem | None:
        """Return the line occupying a slot, or None."""

    @abstractmethod
    def get_by_id(self, item_id: str, user_id: str) -> CartLineItem | None:
        """Return a line by ID if it exists and belongs to ``user_id``."""

    @abstractmethod
    def upsert_slot(
        self, user_id: str, product_id: str, variant: VariantKey, quantity: int
    ) -> CartLineItem:
        """Set the quantity of a slot, creating the line if needed.

        The quantity *replaces* any existing value. Must be atomic per
        slot: two concurrent calls for the same slot never produce two
        lines.
        """

    @abstractmethod
    def replace_slot_if(
        self,
        user_id: str,
        product_id: str,
        variant: VariantKey,
        expected: int | None,
        quantity: int,
    ) -> CartLineItem | None:
        """Set a slot's quantity only if it still holds ``expected``.

        ``expected=None`` means the slot must still be empty; the line is
        created.  Returns None, writing nothing, when another writer got
        there first.  The check and the write happen atomically.
        """

    @abstractmethod
    def delete(self, item_id: str, user_id: str) -> None:
        """Remove a line; EntityNotFoundError if absent or not owned."""

    @abstractmethod
    def clear(self, user_id: str) -> int:
        """Remove every line of a user's cart and return how many."""
