"""CLI commands for the catalog and admin stock operations."""

from __future__ import annotations

import click

from storefront.application.add_product import AddProductHandler
from storefront.application.adjust_stock import AdjustStockHandler, SetStockHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.inventory import MovementType
from storefront.infrastructure.bootstrap import unit_of_work


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Opening stock.")
@click.option("--sku", default=None, help="Stock keeping unit.")
@click.option("--low-stock-threshold", default=None, type=int, help="Own low-stock alert level.")
def product_add(
    name: str,
    price: str,
    stock: int,
    sku: str | None,
    low_stock_threshold: int | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(unit_of_work())

    try:
        product = handler.handle(
            name=name,
            price=price,
            stock_quantity=stock,
            sku=sku,
            low_stock_threshold=low_stock_threshold,
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
    with unit_of_work() as uow:
        products = uow.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<28} {'SKU':<12} {'Price':>10} {'Stock':>6} {'Active':>7}")
    click.echo("-" * 74)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.name:<28} {p.sku or '-':<12} {str(p.price):>10} "
            f"{p.stock_quantity:>6} {'yes' if p.active else 'no':>7}"
        )


@click.command("adjust-stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--delta", default=None, type=int, help="Units to add (negative to remove).")
@click.option("--set", "absolute", default=None, type=int, help="Set the stock to this level.")
@click.option(
    "--type",
    "movement_type",
    type=click.Choice(["purchase", "adjustment"], case_sensitive=False),
    default="adjustment",
    show_default=True,
    help="Ledger movement type for --delta.",
)
@click.option("--reason", default=None, help="Reason recorded in the ledger.")
def product_adjust_stock(
    product_id: str,
    delta: int | None,
    absolute: int | None,
    movement_type: str,
    reason: str | None,
) -> None:
    """Change a product's stock and record it in the ledger."""
    if (delta is None) == (absolute is None):
        raise click.UsageError("Give exactly one of --delta or --set.")

    try:
        if absolute is not None:
            level = SetStockHandler(unit_of_work()).handle(
                product_id=product_id, quantity=absolute, reason=reason
            )
        else:
            level = AdjustStockHandler(unit_of_work()).handle(
                product_id=product_id,
                delta=delta,
                movement_type=MovementType(movement_type.upper()),
                reason=reason,
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock of '{level.product_name}' is now {level.stock_quantity}")
