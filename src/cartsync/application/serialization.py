"""Wire formats spoken with storefront clients.

Inbound, the client-held cart posted for a sync is validated with the
pydantic models below and turned into a ``LocalCartSnapshot``.  Browser
carts send ``productId``/``selectedColor``/``selectedSize``; older
clients send ``product_id``/``color``/``size``.  Both are accepted.

Outbound, DTOs are rendered with their camelCase aliases (``productId``,
``resolvedQuantity``, ``itemCount`` ...).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic import ValidationError as SchemaError

from cartsync.domain.exceptions import ValidationError
from cartsync.domain.model.cart import LocalCartItem, LocalCartSnapshot, ProductSnapshot


class LocalProductIn(BaseModel):
    """Product details as the client last displayed them."""

    model_config = ConfigDict(extra="ignore")

    name: StrictStr | None = None
    price: Decimal | None = None


class LocalCartItemIn(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_id: StrictStr = Field(
        min_length=1, validation_alias=AliasChoices("productId", "product_id")
    )
    # Range is not checked here: the sync engine rejects bad quantities per item.
    quantity: StrictInt
    color: StrictStr | None = Field(
        default=None, validation_alias=AliasChoices("selectedColor", "color")
    )
    size: StrictStr | None = Field(
        default=None, validation_alias=AliasChoices("selectedSize", "size")
    )
    product: LocalProductIn | None = None

    def to_domain(self) -> LocalCartItem:
        product = self.product or LocalProductIn()
        return LocalCartItem(
            product_id=self.product_id,
            quantity=self.quantity,
            color=self.color,
            size=self.size,
            product=ProductSnapshot(
                name=product.name,
                price=None if product.price is None else str(product.price),
            ),
        )


class SyncRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    local_cart_items: list[LocalCartItemIn] = Field(
        validation_alias=AliasChoices("localCartItems", "items")
    )


def _describe(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def parse_local_cart(payload: Any) -> LocalCartSnapshot:
    """Validate a sync request body (or a bare list of items).

    Raises ValidationError listing every malformed field; nothing of a
    malformed request is synced.
    """
    if isinstance(payload, list):
        payload = {"localCartItems": payload}
    try:
        request = SyncRequest.model_validate(payload)
    except SchemaError as exc:
        raise ValidationError(
            "Invalid local cart", [_describe(error) for error in exc.errors()]
        ) from exc
    return LocalCartSnapshot(tuple(item.to_domain() for item in request.local_cart_items))


def to_wire(dto: Any) -> Any:
    """Render a DTO (or list of DTOs) as JSON-ready camelCase data."""
    if isinstance(dto, list):
        return [to_wire(d) for d in dto]
    if isinstance(dto, BaseModel):
        return dto.model_dump(mode="json", by_alias=True)
    raise TypeError(f"Cannot serialize {type(dto).__name__}")
