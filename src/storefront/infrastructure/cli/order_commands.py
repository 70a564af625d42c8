"""CLI commands for checkout and the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.cancel_order import CancelOrderHandler, RefundOrderHandler
from storefront.application.commit_order import CommitOrderHandler
from storefront.application.dto import CheckoutLine, OrderDTO
from storefront.application.record_payment import RecordPaymentHandler
from storefront.application.ship_order import AttachTrackingHandler, MarkDeliveredHandler
from storefront.application.show_cart import ShowCartHandler
from storefront.application.show_order import ListOrdersHandler, ShowOrderHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.order import PaymentStatus
from storefront.infrastructure.bootstrap import settings, unit_of_work


def _parse_items(raw: str) -> list[CheckoutLine]:
    """Parse '12:1,40:2' into CheckoutLine list."""
    lines: list[CheckoutLine] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        lines.append(CheckoutLine(product_id=product_id.strip(), quantity=qty))
    return lines


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number} (#{dto.id})  status={dto.status}  payment={dto.payment_status}")
    click.echo(f"Customer: {dto.holder_id}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.tracking_number:
        carrier = f" ({dto.shipping_carrier})" if dto.shipping_carrier else ""
        click.echo(f"Tracking: {dto.tracking_number}{carrier}")
    click.echo()

    click.echo(f"  {'Product':<28} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-' * 56}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<28} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-' * 56}")
    click.echo(f"  {'Subtotal':<34} {dto.subtotal:>21}")
    if dto.coupon_code:
        click.echo(f"  {'Discount (' + dto.coupon_code + ')':<34} {'-' + dto.discount_amount:>21}")
    click.echo(f"  {'Shipping':<34} {dto.shipping_cost:>21}")
    click.echo(f"  {'Tax':<34} {dto.tax:>21}")
    click.echo(f"  {'Order Total':<34} {dto.total:>21}")


@click.command("checkout")
@click.option("--user", "holder_id", required=True, help="Cart holder (user or session id).")
@click.option("--items", default=None, help="Items as 'ProductId:Qty,...' (default: the cart).")
@click.option("--shipping-address", required=True, type=int, help="Shipping address ID.")
@click.option("--billing-address", default=None, type=int, help="Billing address ID (default: shipping).")
@click.option("--coupon", default=None, help="Coupon code.")
@click.option("--shipping-cost", default="0", show_default=True, help="Shipping cost.")
@click.option("--tax", default="0", show_default=True, help="Tax amount.")
@click.option("--total", "client_total", default=None, help="Total the shopper saw.")
@click.option(
    "--payment-status",
    type=click.Choice(["pending", "paid"], case_sensitive=False),
    default="paid",
    show_default=True,
)
def checkout(
    holder_id: str,
    items: str | None,
    shipping_address: int,
    billing_address: int | None,
    coupon: str | None,
    shipping_cost: str,
    tax: str,
    client_total: str | None,
    payment_status: str,
) -> None:
    """Turn a cart into an order."""
    if items:
        lines = _parse_items(items)
    else:
        cart = ShowCartHandler(unit_of_work()).handle(holder_id)
        lines = [CheckoutLine(line.product_id, line.quantity) for line in cart.lines]

    config = settings()
    handler = CommitOrderHandler(
        unit_of_work(),
        max_number_attempts=config.order_number_max_attempts,
        delay_threshold_days=config.delay_threshold_days,
    )

    try:
        dto = handler.handle(
            holder_id=holder_id,
            lines=lines,
            shipping_address_id=shipping_address,
            billing_address_id=billing_address or shipping_address,
            coupon_code=coupon,
            shipping_cost=shipping_cost,
            tax=tax,
            client_total=client_total,
            payment_status=PaymentStatus(payment_status.upper()),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} placed.")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.option("--user", "holder_id", default=None, help="Only show it if it belongs to this holder.")
def order_show(order_id: int, holder_id: str | None) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(unit_of_work(), delay_threshold_days=settings().delay_threshold_days)

    try:
        dto = handler.handle(order_id, holder_id=holder_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--user", "holder_id", required=True, help="Order owner.")
def order_list(holder_id: str) -> None:
    """List a customer's orders, newest first."""
    handler = ListOrdersHandler(unit_of_work(), delay_threshold_days=settings().delay_threshold_days)
    orders = handler.handle(holder_id)

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Number':<18} {'Status':<10} {'Payment':<9} {'Total':>10}  Created")
    click.echo("-" * 80)
    for o in orders:
        click.echo(
            f"{o.id:<6} {o.order_number:<18} {o.status:<10} {o.payment_status:<9} {o.total:>10}  {o.created_at}"
        )


@click.command("pay")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--status",
    type=click.Choice(["paid", "failed"], case_sensitive=False),
    default="paid",
    show_default=True,
    help="Payment outcome reported by the gateway.",
)
def order_pay(order_id: int, status: str) -> None:
    """Record a payment outcome."""
    handler = RecordPaymentHandler(unit_of_work(), delay_threshold_days=settings().delay_threshold_days)

    try:
        dto = handler.handle(order_id, PaymentStatus(status.upper()))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number}: payment {dto.payment_status}, status {dto.status}")


@click.command("track")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--tracking", "tracking_number", required=True, help="Carrier tracking number.")
@click.option("--carrier", default=None, help="Carrier name.")
def order_track(order_id: int, tracking_number: str, carrier: str | None) -> None:
    """Attach a tracking number (marks the order shipped)."""
    handler = AttachTrackingHandler(unit_of_work(), delay_threshold_days=settings().delay_threshold_days)

    try:
        dto = handler.handle(order_id, tracking_number, carrier=carrier)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} shipped with tracking {dto.tracking_number}")


@click.command("deliver")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_deliver(order_id: int) -> None:
    """Mark an order delivered."""
    handler = MarkDeliveredHandler(unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} delivered.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
def order_cancel(order_id: int) -> None:
    """Cancel an order."""
    try:
        dto = CancelOrderHandler(unit_of_work()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} cancelled.")


@click.command("refund")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to refund.")
def order_refund(order_id: int) -> None:
    """Refund a paid order."""
    try:
        dto = RefundOrderHandler(unit_of_work()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} refunded.")
