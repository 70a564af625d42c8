"""CLI commands for the inventory ledger and stock reports."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from storefront.application.show_movements import ShowMovementsHandler
from storefront.application.stock_reports import StockAlertsHandler, StockPredictionsHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.inventory import MovementType
from storefront.infrastructure.bootstrap import settings, unit_of_work


def _as_utc(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=timezone.utc) if value is not None else None


@click.command("movements")
@click.option("--product", "product_id", default=None, help="Only this product ID.")
@click.option(
    "--type",
    "movement_type",
    type=click.Choice(["sale", "purchase", "adjustment"], case_sensitive=False),
    default=None,
)
@click.option("--since", type=click.DateTime(), default=None, help="From this UTC date/time.")
@click.option("--until", type=click.DateTime(), default=None, help="Up to this UTC date/time.")
@click.option("--limit", default=50, show_default=True, type=int)
@click.option("--skip", default=0, show_default=True, type=int)
def inventory_movements(
    product_id: str | None,
    movement_type: str | None,
    since: datetime | None,
    until: datetime | None,
    limit: int,
    skip: int,
) -> None:
    """Show the stock ledger, newest first."""
    try:
        page = ShowMovementsHandler(unit_of_work()).handle(
            product_id=product_id,
            movement_type=MovementType(movement_type.upper()) if movement_type else None,
            start=_as_utc(since),
            end=_as_utc(until),
            limit=limit,
            skip=skip,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not page.movements:
        click.echo("No movements found.")
        return

    click.echo(f"{'When':<26} {'Product':<8} {'Type':<11} {'Qty':>6} {'After':>6}  Reason")
    click.echo("-" * 80)
    for m in page.movements:
        click.echo(
            f"{m.created_at:<26} {m.product_id:<8} {m.type:<11} {m.quantity:>+6} {m.quantity_after:>6}  {m.reason}"
        )
    click.echo(f"Showing {len(page.movements)} of {page.total}.")
    for stat in page.statistics:
        click.echo(f"  {stat.type:<11} {stat.count:>5} movement(s), {stat.total_quantity:+d} units")


@click.command("alerts")
def inventory_alerts() -> None:
    """List active products that are running low."""
    config = settings()
    alerts = StockAlertsHandler(
        unit_of_work(),
        low_threshold=config.low_stock_threshold,
        critical_threshold=config.critical_stock_threshold,
    ).handle()

    if not alerts:
        click.echo("No low-stock products.")
        return

    click.echo(f"{'Level':<9} {'ID':<6} {'Product':<28} {'Stock':>6} {'Threshold':>10}")
    click.echo("-" * 63)
    for a in alerts:
        click.echo(
            f"{a.level:<9} {a.product_id:<6} {a.product_name:<28} {a.stock_quantity:>6} {a.threshold:>10}"
        )


@click.command("predictions")
def inventory_predictions() -> None:
    """Predict which products will sell out soon."""
    config = settings()
    predictions = StockPredictionsHandler(
        unit_of_work(),
        average_days=config.sales_average_days,
        horizon_days=config.prediction_horizon_days,
    ).handle()

    if not predictions:
        click.echo("No products expected to sell out.")
        return

    click.echo(f"{'Risk':<9} {'Product':<28} {'Stock':>6} {'Per day':>8} {'Days':>5}  Out of stock on")
    click.echo("-" * 80)
    for p in predictions:
        click.echo(
            f"{p.risk_level:<9} {p.product_name:<28} {p.current_stock:>6} "
            f"{p.daily_average:>8.2f} {p.days_until_out_of_stock:>5}  {p.predicted_out_of_stock_date}"
        )
