"""Application service: Update Product use case (catalog maintenance)."""

from __future__ import annotations

from cartsync.domain.exceptions import EntityNotFoundError
from cartsync.domain.model.product import Product
from cartsync.domain.model.value_objects import Money
from cartsync.domain.repository.product_repository import ProductRepository


class UpdateProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        new_price: str | None = None,
        stock: int | None = None,
        active: bool | None = None,
    ) -> Product:
        """Change price, stock level and/or availability of a product.

        Cart lines are not touched: summaries re-price from the catalog
        and checkout re-validates stock and availability.
        """
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        if new_price is not None:
            product.update_price(Money.of(new_price))
        if stock is not None:
            product.set_stock(stock)
        if active is True:
            product.activate()
        elif active is False:
            product.deactivate()

        self._product_repo.save(product)
        return product
