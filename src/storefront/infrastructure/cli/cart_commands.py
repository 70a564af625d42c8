"""CLI commands for shopping carts and reservation leases."""

from __future__ import annotations

import logging
import time

import click

from storefront.application.dto import CartDTO
from storefront.application.remove_cart_line import RemoveCartLineHandler
from storefront.application.set_cart_line import SetCartLineHandler
from storefront.application.show_cart import ShowCartHandler
from storefront.application.sweep_reservations import SweepReservationsHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import settings, unit_of_work

logger = logging.getLogger(__name__)


def _display_cart(cart: CartDTO) -> None:
    for name in cart.removed:
        click.echo(f"Removed '{name}': no longer available.")
    if not cart.lines:
        click.echo(f"Cart of {cart.holder_id} is empty.")
        return

    click.echo(f"  {'Product':<28} {'Qty':>5} {'Price':>10} {'Stock':>6}  Reserved until")
    click.echo(f"  {'-' * 74}")
    for line in cart.lines:
        click.echo(
            f"  {line.product_name:<28} {line.quantity:>5} {line.unit_price:>10} "
            f"{line.stock_quantity:>6}  {line.reservation_expires_at or '-'}"
        )


@click.command("show")
@click.option("--user", "holder_id", required=True, help="Cart holder (user or session id).")
def cart_show(holder_id: str) -> None:
    """Show a cart, dropping lines that can no longer be bought."""
    cart = ShowCartHandler(unit_of_work()).handle(holder_id)
    _display_cart(cart)


@click.command("set")
@click.option("--user", "holder_id", required=True, help="Cart holder (user or session id).")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New quantity (0 removes the line).")
@click.option("--price", default=None, help="Price shown to the shopper.")
def cart_set(holder_id: str, product_id: str, quantity: int, price: str | None) -> None:
    """Add a product to a cart or change its quantity."""
    handler = SetCartLineHandler(unit_of_work(), reservation_ttl=settings().reservation_ttl)

    try:
        line = handler.handle(holder_id, product_id, quantity, unit_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if line is None:
        click.echo(f"Product {product_id} removed from the cart.")
        return
    click.echo(f"'{line.product_name}' x{line.quantity} in the cart.")
    if line.reservation_expires_at:
        click.echo(f"Last unit reserved until {line.reservation_expires_at}.")


@click.command("remove")
@click.option("--user", "holder_id", required=True, help="Cart holder (user or session id).")
@click.option("--product", "product_id", required=True, help="Product ID.")
def cart_remove(holder_id: str, product_id: str) -> None:
    """Remove a product from a cart."""
    if RemoveCartLineHandler(unit_of_work()).handle(holder_id, product_id):
        click.echo(f"Product {product_id} removed from the cart.")
    else:
        click.echo(f"Product {product_id} was not in the cart.")


@click.command("sweep")
@click.option("--watch", is_flag=True, default=False, help="Keep sweeping periodically.")
@click.option("--interval", default=None, type=int, help="Seconds between sweeps with --watch.")
def cart_sweep(watch: bool, interval: int | None) -> None:
    """Remove expired reservations and the cart lines carrying them."""
    interval = interval or settings().reservation_sweep_interval_seconds or 60

    while True:
        result = SweepReservationsHandler(unit_of_work()).handle()
        click.echo(f"Removed {result.removed} expired reservation(s).")
        for holder_id, product_id in result.items:
            click.echo(f"  {holder_id}: {product_id}")
        if not watch:
            return
        try:
            time.sleep(interval)
        except KeyboardInterrupt:
            logger.info("Sweeper stopped")
            return
