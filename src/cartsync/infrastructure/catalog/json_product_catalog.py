"""JSON-file-backed product catalog.

Serves both read ports the cart needs (StockOracle and PriceCatalog)
and lets the CLI maintain the catalog file.  Colours and sizes are
stored as real JSON arrays.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from cartsync.domain.exceptions import CatalogUnavailableError, EntityNotFoundError
from cartsync.domain.model.product import Product
from cartsync.domain.model.stock import StockLevel
from cartsync.domain.model.value_objects import Money
from cartsync.domain.repository.product_repository import ProductRepository
from cartsync.domain.repository.stock_oracle import PriceCatalog, StockOracle


class JsonProductCatalog(ProductRepository, StockOracle, PriceCatalog):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- StockOracle / PriceCatalog -------------------------------------------

    def get_stock(self, product_id: str) -> StockLevel:
        return self._require(product_id).stock_level()

    def get_current_price(self, product_id: str) -> Money:
        return self._require(product_id).price

    # --- Catalog maintenance --------------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for product in self._load().values():
            if product.name.lower() == name.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        products = self._load()
        products[product.id] = product
        self._persist(products)

    # --- Serialization helpers ------------------------------------------------

    def _require(self, product_id: str) -> Product:
        product = self.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
        return product

    def _load(self) -> dict[str, Product]:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogUnavailableError(
                f"Cannot read product catalog {self._file_path}: {exc}"
            ) from exc
        try:
            return {
                item["id"]: Product(
                    id=item["id"],
                    name=item["name"],
                    price=Money(Decimal(item["price"]), item.get("currency", "USD")),
                    stock_quantity=item.get("stock_quantity", 0),
                    is_active=item.get("is_active", True),
                    colors=list(item.get("colors", [])),
                    sizes=list(item.get("sizes", [])),
                )
                for item in raw
            }
        except (KeyError, TypeError, ArithmeticError) as exc:
            raise CatalogUnavailableError(
                f"Malformed product catalog {self._file_path}: {exc!r}"
            ) from exc

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [
            {
                "id": p.id,
                "name": p.name,
                "price": str(p.price.amount),
                "currency": p.price.currency,
                "stock_quantity": p.stock_quantity,
                "is_active": p.is_active,
                "colors": p.colors,
                "sizes": p.sizes,
            }
            for p in products.values()
        ]
        try:
            self._file_path.write_text(json.dumps(raw, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise CatalogUnavailableError(
                f"Cannot write product catalog {self._file_path}: {exc}"
            ) from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
            except OSError as exc:
                raise CatalogUnavailableError(
                    f"Cannot create product catalog {self._file_path}: {exc}"
                ) from exc
