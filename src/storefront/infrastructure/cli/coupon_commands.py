"""CLI commands for coupons."""

from __future__ import annotations

import click

from storefront.application.coupons import IssueCouponsHandler, ValidateCouponHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import unit_of_work


@click.command("issue")
@click.option("--count", default=1, show_default=True, type=int, help="How many codes (1-100).")
@click.option("--percent", required=True, help="Discount percent (1-100).")
def coupon_issue(count: int, percent: str) -> None:
    """Issue one-shot percentage coupons."""
    try:
        coupons = IssueCouponsHandler(unit_of_work()).handle(count, percent)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for coupon in coupons:
        click.echo(f"{coupon.code}  {coupon.discount_percent}%")


@click.command("validate")
@click.option("--code", required=True, help="Coupon code.")
def coupon_validate(code: str) -> None:
    """Check that a coupon exists and is unused."""
    try:
        coupon = ValidateCouponHandler(unit_of_work()).handle(code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {coupon.code} is valid: {coupon.discount_percent}% off.")
