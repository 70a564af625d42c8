"""Application service: Add Address use case."""

from __future__ import annotations

from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.address import Address


class AddAddressHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        owner_id: str,
        full_name: str,
        street: str,
        city: str,
        postal_code: str,
        country: str = "IT",
    ) -> Address:
        fields = {
            "owner": owner_id,
            "full name": full_name,
            "street": street,
            "city": city,
            "postal code": postal_code,
        }
        for label, value in fields.items():
            if not value or not value.strip():
                raise ValidationError(f"Address {label} is required")

        address = Address(
            owner_id=owner_id.strip(),
            full_name=full_name.strip(),
            street=street.strip(),
            city=city.strip(),
            postal_code=postal_code.strip(),
            country=country.strip().upper() or "IT",
        )
        with self._uow as uow:
            uow.addresses.add(address)
            uow.commit()
        return address
