"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    ``messages`` carries every individual problem when several were
    collected at once (checkout validation); it always holds at least the
    main message.
    """

    def __init__(self, message: str, messages: list[str] | tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.messages: list[str] = list(messages) or [message]


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds what the catalog can supply."""

    def __init__(
        self,
        product_name: str,
        available: int,
        requested: int,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message or f"Only {available} items available for {product_name}"
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


class EntityNotFoundError(DomainException):
    """A requested entity does not exist (or is not owned by the caller)."""


class StoreUnavailableError(DomainException):
    """The cart store could not be read or written. Safe to retry."""


class CatalogUnavailableError(DomainException):
    """The product catalog could not be read or written."""
