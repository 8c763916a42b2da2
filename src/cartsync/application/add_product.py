"""Application service: Add Product use case (catalog maintenance)."""

from __future__ import annotations

from cartsync.domain.exceptions import ValidationError
from cartsync.domain.model.product import Product
from cartsync.domain.model.value_objects import Money
from cartsync.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        stock: int = 0,
        colors: list[str] | None = None,
        sizes: list[str] | None = None,
    ) -> Product:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        existing = self._product_repo.get_by_name(name.strip())
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        # Auto-assign ID based on existing products
        all_products = self._product_repo.list_all()
        numeric_ids = [int(p.id) for p in all_products if p.id.isdigit()]
        next_id = str(max(numeric_ids) + 1) if numeric_ids else "1"

        product = Product(
            id=next_id,
            name=name.strip(),
            price=Money.of(price),
            colors=[c.strip() for c in colors or [] if c.strip()],
            sizes=[s.strip() for s in sizes or [] if s.strip()],
        )
        product.update_price(product.price)
        product.set_stock(stock)
        self._product_repo.save(product)
        return product
