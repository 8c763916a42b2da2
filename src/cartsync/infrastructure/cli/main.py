import click

from cartsync.infrastructure.cli.cart_commands import (
    cart_add,
    cart_checkout,
    cart_clean,
    cart_clear,
    cart_remove,
    cart_show,
    cart_summary,
    cart_sync,
    cart_update,
)
from cartsync.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_update,
)
from cartsync.infrastructure.config import get_settings
from cartsync.infrastructure.observability import configure_logging


@click.group()
def cli() -> None:
    """cartsync: cart synchronization engine"""
    configure_logging(get_settings())


@cli.group()
def cart() -> None:
    """Manage carts."""


@cli.group()
def product() -> None:
    """Manage the local product catalog."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_checkout)
cart.add_command(cart_clean)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_summary)
cart.add_command(cart_sync)
cart.add_command(cart_update)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
