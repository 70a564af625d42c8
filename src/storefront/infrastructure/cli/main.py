import click

from storefront.infrastructure.bootstrap import database, settings
from storefront.infrastructure.cli.address_commands import address_add
from storefront.infrastructure.cli.cart_commands import (
    cart_remove,
    cart_set,
    cart_show,
    cart_sweep,
)
from storefront.infrastructure.cli.coupon_commands import coupon_issue, coupon_validate
from storefront.infrastructure.cli.inventory_commands import (
    inventory_alerts,
    inventory_movements,
    inventory_predictions,
)
from storefront.infrastructure.cli.order_commands import (
    checkout,
    order_cancel,
    order_deliver,
    order_list,
    order_pay,
    order_refund,
    order_show,
    order_track,
)
from storefront.infrastructure.cli.product_commands import (
    product_add,
    product_adjust_stock,
    product_list,
)
from storefront.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """Storefront: carts, reservations and orders for auto parts"""
    configure_logging(settings().log_level)


@cli.group()
def product() -> None:
    """Manage the catalog and stock."""


@cli.group()
def cart() -> None:
    """Manage shopping carts."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def inventory() -> None:
    """Inspect the stock ledger."""


@cli.group()
def coupon() -> None:
    """Manage coupons."""


@cli.group()
def address() -> None:
    """Manage customer addresses."""


@cli.group()
def db() -> None:
    """Database maintenance."""


@db.command("init")
def db_init() -> None:
    """Create the database tables."""
    database()
    click.echo(f"Database ready at {settings().database_url}")


# Register subcommands
cli.add_command(checkout)
product.add_command(product_add)
product.add_command(product_adjust_stock)
product.add_command(product_list)
cart.add_command(cart_remove)
cart.add_command(cart_set)
cart.add_command(cart_show)
cart.add_command(cart_sweep)
order.add_command(order_cancel)
order.add_command(order_deliver)
order.add_command(order_list)
order.add_command(order_pay)
order.add_command(order_refund)
order.add_command(order_show)
order.add_command(order_track)
inventory.add_command(inventory_alerts)
inventory.add_command(inventory_movements)
inventory.add_command(inventory_predictions)
coupon.add_command(coupon_issue)
coupon.add_command(coupon_validate)
address.add_command(address_add)
