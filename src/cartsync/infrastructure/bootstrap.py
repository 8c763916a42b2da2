"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from cartsync.domain.events import CartEventEmitter
from cartsync.domain.repository.cart_repository import CartRepository
from cartsync.domain.service.conflict_resolver import ConflictPolicy, ConflictResolver
from cartsync.infrastructure.catalog.json_product_catalog import JsonProductCatalog
from cartsync.infrastructure.config import Settings, get_settings
from cartsync.infrastructure.observability import StructlogEventEmitter
from cartsync.infrastructure.persistence.json_cart_repository import (
    JsonCartRepository,
)
from cartsync.infrastructure.persistence.sql_cart_repository import (
    SqlCartRepository,
    create_cart_engine,
)


def cart_repository(settings: Settings | None = None) -> CartRepository:
    settings = settings or get_settings()
    if settings.cart_backend == "sql":
        return SqlCartRepository(create_cart_engine(settings.resolved_database_url))
    return JsonCartRepository(settings.data_dir / "cart_items.json")


def product_catalog(settings: Settings | None = None) -> JsonProductCatalog:
    settings = settings or get_settings()
    return JsonProductCatalog(settings.data_dir / "products.json")


def conflict_policy(settings: Settings | None = None) -> ConflictPolicy:
    settings = settings or get_settings()
    return ConflictPolicy(
        suspicious_threshold=settings.suspicious_quantity_threshold,
        hard_cap=settings.quantity_hard_cap,
        reset_quantity=settings.suspicious_reset_quantity,
    )


def conflict_resolver(settings: Settings | None = None) -> ConflictResolver:
    return ConflictResolver(conflict_policy(settings))


def event_emitter() -> CartEventEmitter:
    return StructlogEventEmitter()
