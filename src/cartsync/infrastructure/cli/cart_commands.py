"""CLI commands for a user's cart."""

from __future__ import annotations

import json

import click

from cartsync.application.add_to_cart import AddToCartHandler
from cartsync.application.cart_summary import CartSummaryHandler
from cartsync.application.clean_quantities import CleanSuspiciousQuantitiesHandler
from cartsync.application.clear_cart import ClearCartHandler
from cartsync.application.dto import LineItemDTO, SyncReportDTO
from cartsync.application.remove_cart_item import RemoveCartItemHandler
from cartsync.application.serialization import parse_local_cart, to_wire
from cartsync.application.show_cart import ShowCartHandler
from cartsync.application.sync_cart import SyncCartHandler
from cartsync.application.update_cart_item import UpdateCartItemHandler
from cartsync.application.validate_checkout import ValidateCheckoutHandler
from cartsync.domain.exceptions import DomainException, ValidationError
from cartsync.domain.model.sync import SyncDirection
from cartsync.infrastructure.bootstrap import (
    cart_repository,
    conflict_policy,
    conflict_resolver,
    event_emitter,
    product_catalog,
)

_user_option = click.option("--user", "user_id", required=True, help="Owning user ID.")


def _display_items(items: list[LineItemDTO]) -> None:
    click.echo(f"  {'ID':<34} {'Product':<12} {'Color':<10} {'Size':<6} {'Qty':>5}")
    click.echo(f"  {'-'*71}")
    for item in items:
        click.echo(
            f"  {item.id:<34} {item.product_id:<12} {item.color or '-':<10} "
            f"{item.size or '-':<6} {item.quantity:>5}"
        )


def _echo_problems(exc: ValidationError) -> None:
    if len(exc.messages) > 1 or exc.messages[0] != str(exc):
        for message in exc.messages:
            click.echo(f"  - {message}", err=True)


@click.command("add")
@_user_option
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units to add.")
@click.option("--color", default=None, help="Selected colour.")
@click.option("--size", default=None, help="Selected size.")
def cart_add(
    user_id: str, product_id: str, quantity: int, color: str | None, size: str | None
) -> None:
    """Add units of a product to a cart (adds to any existing line)."""
    handler = AddToCartHandler(
        cart_repo=cart_repository(),
        stock_oracle=product_catalog(),
        events=event_emitter(),
    )

    try:
        dto = handler.handle(user_id, product_id, quantity, color=color, size=size)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart item {dto.id}: {dto.product_id} x {dto.quantity}")


@click.command("update")
@_user_option
@click.option("--id", "item_id", required=True, help="Cart item ID.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
def cart_update(user_id: str, item_id: str, quantity: int) -> None:
    """Set the quantity of a cart line."""
    handler = UpdateCartItemHandler(
        cart_repo=cart_repository(),
        stock_oracle=product_catalog(),
        events=event_emitter(),
    )

    try:
        dto = handler.handle(user_id, item_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart item {dto.id} quantity set to {dto.quantity}")


@click.command("remove")
@_user_option
@click.option("--id", "item_id", required=True, help="Cart item ID.")
def cart_remove(user_id: str, item_id: str) -> None:
    """Remove a line from a cart."""
    handler = RemoveCartItemHandler(cart_repo=cart_repository(), events=event_emitter())

    try:
        handler.handle(user_id, item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart item {item_id} removed.")


@click.command("show")
@_user_option
def cart_show(user_id: str) -> None:
    """Show the lines of a cart."""
    try:
        items = ShowCartHandler(cart_repo=cart_repository()).handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not items:
        click.echo("Cart is empty.")
        return
    _display_items(items)


@click.command("clear")
@_user_option
def cart_clear(user_id: str) -> None:
    """Remove every line of a cart."""
    handler = ClearCartHandler(cart_repo=cart_repository(), events=event_emitter())

    try:
        deleted = handler.handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cleared {deleted} items from cart.")


@click.command("summary")
@_user_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON.")
def cart_summary(user_id: str, as_json: bool) -> None:
    """Show item counts and the subtotal at current prices."""
    handler = CartSummaryHandler(cart_repo=cart_repository(), price_catalog=product_catalog())

    try:
        dto = handler.handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if as_json:
        click.echo(json.dumps(to_wire(dto), indent=2))
        return
    click.echo(f"Items:        {dto.item_count}")
    click.echo(f"Unique items: {dto.unique_item_count}")
    click.echo(f"Subtotal:     {dto.subtotal}")
    if dto.unpriced_product_ids:
        click.echo(f"Unpriced:     {', '.join(dto.unpriced_product_ids)}")


@click.command("checkout")
@_user_option
def cart_checkout(user_id: str) -> None:
    """Validate a cart for checkout, listing every problem found."""
    catalog = product_catalog()
    handler = ValidateCheckoutHandler(
        cart_repo=cart_repository(),
        stock_oracle=catalog,
        price_catalog=catalog,
        events=event_emitter(),
    )

    try:
        dto = handler.handle(user_id)
    except ValidationError as exc:
        _echo_problems(exc)
        raise click.ClickException(str(exc))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart is ready for checkout ({dto.summary.item_count} items).")
    _display_items(dto.items)
    click.echo(f"  Subtotal: {dto.summary.subtotal}")


def _display_report(dto: SyncReportDTO) -> None:
    click.echo(
        f"Sync ({dto.direction}): {len(dto.merged)} merged, "
        f"{len(dto.conflicts)} conflicts, {len(dto.rejected)} rejected, "
        f"{dto.writes} writes"
    )
    for conflict in dto.conflicts:
        click.echo(
            f"  conflict  {conflict.product_id}: local {conflict.local_quantity}, "
            f"stored {conflict.persisted_quantity} -> {conflict.resolved_quantity} "
            f"({conflict.resolution_reason})"
        )
    for rejection in dto.rejected:
        click.echo(f"  rejected  {rejection.product_id}: {rejection.detail}")
    if dto.final_cart:
        click.echo()
        _display_items(dto.final_cart)


@click.command("sync")
@_user_option
@click.option(
    "--file",
    "snapshot_file",
    type=click.File("r", encoding="utf-8"),
    default="-",
    show_default=True,
    help="JSON file with the local cart ('-' for stdin).",
)
@click.option(
    "--direction",
    type=click.Choice([d.value for d in SyncDirection]),
    default=SyncDirection.MERGE.value,
    show_default=True,
    help="merge: reconcile; push: local replaces stored; pull: read stored.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON.")
def cart_sync(user_id: str, snapshot_file, direction: str, as_json: bool) -> None:
    """Reconcile a client-held cart with the stored cart."""
    try:
        payload = json.load(snapshot_file)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Invalid JSON: {exc}", param_hint="--file")

    handler = SyncCartHandler(
        cart_repo=cart_repository(),
        stock_oracle=product_catalog(),
        resolver=conflict_resolver(),
        events=event_emitter(),
    )

    try:
        snapshot = parse_local_cart(payload)
        dto = handler.handle(user_id, snapshot, SyncDirection(direction))
    except ValidationError as exc:
        _echo_problems(exc)
        raise click.ClickException(str(exc))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if as_json:
        click.echo(json.dumps(to_wire(dto), indent=2))
    else:
        _display_report(dto)


@click.command("clean")
@click.option("--user", "user_id", default=None, help="Limit to one user's cart.")
@click.option("--dry-run", is_flag=True, default=False, help="Only list suspicious lines.")
def cart_clean(user_id: str | None, dry_run: bool) -> None:
    """Reset implausibly large quantities left by old sync bugs."""
    policy = conflict_policy()
    handler = CleanSuspiciousQuantitiesHandler(
        cart_repo=cart_repository(),
        policy=policy,
        events=event_emitter(),
    )

    try:
        found = handler.handle(user_id=user_id, dry_run=dry_run)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not found:
        click.echo("No suspicious quantities found.")
        return
    verb = "Would reset" if dry_run else "Reset"
    click.echo(f"{verb} {len(found)} cart items to quantity {policy.reset_quantity}:")
    _display_items(found)
