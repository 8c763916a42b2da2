"""CLI commands for the local product catalog."""

from __future__ import annotations

import click

from cartsync.application.add_product import AddProductHandler
from cartsync.application.update_product import UpdateProductHandler
from cartsync.domain.exceptions import DomainException
from cartsync.infrastructure.bootstrap import product_catalog


def _split(raw: str | None) -> list[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=int, show_default=True, help="Units in stock.")
@click.option("--colors", default=None, help="Offered colours, e.g. 'Red,Blue'.")
@click.option("--sizes", default=None, help="Offered sizes, e.g. 'S,M,L'.")
def product_add(
    name: str, price: str, stock: int, colors: str | None, sizes: str | None
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_catalog())

    try:
        product = handler.handle(
            name=name, price=price, stock=stock, colors=_split(colors), sizes=_split(sizes)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added at {product.price} "
        f"({product.stock_quantity} in stock)"
    )


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = product_catalog().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>10} {'Stock':>7} {'Active':>7}  Options")
    click.echo("-" * 70)
    for p in products:
        options = " ".join(
            part for part in (",".join(p.colors), ",".join(p.sizes)) if part
        )
        click.echo(
            f"{p.id:<6} {p.name:<20} {str(p.price):>10} {p.stock_quantity:>7} "
            f"{'yes' if p.is_active else 'no':>7}  {options}"
        )


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--stock", default=None, type=int, help="New stock level.")
@click.option("--active/--inactive", default=None, help="Sell or stop selling the product.")
def product_update(
    product_id: str, price: str | None, stock: int | None, active: bool | None
) -> None:
    """Update a product's price, stock or availability."""
    handler = UpdateProductHandler(product_repo=product_catalog())

    try:
        product = handler.handle(product_id=product_id, new_price=price, stock=stock, active=active)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} updated: {product.price}, {product.stock_quantity} in stock, "
        f"{'active' if product.is_active else 'inactive'}"
    )
