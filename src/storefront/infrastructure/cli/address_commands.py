"""CLI commands for customer addresses."""

from __future__ import annotations

import click

from storefront.application.add_address import AddAddressHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import unit_of_work


@click.command("add")
@click.option("--user", "owner_id", required=True, help="Address owner.")
@click.option("--name", "full_name", required=True, help="Recipient name.")
@click.option("--street", required=True)
@click.option("--city", required=True)
@click.option("--postal-code", required=True)
@click.option("--country", default="IT", show_default=True, help="ISO country code.")
def address_add(
    owner_id: str,
    full_name: str,
    street: str,
    city: str,
    postal_code: str,
    country: str,
) -> None:
    """Add a shipping/billing address for a customer."""
    try:
        address = AddAddressHandler(unit_of_work()).handle(
            owner_id, full_name, street, city, postal_code, country
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Address #{address.id} added for {address.owner_id}")
