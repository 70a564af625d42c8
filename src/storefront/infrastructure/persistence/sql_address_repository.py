"""SQLAlchemy-backed implementation of AddressRepository."""

from __future__ import annotations

from sqlalchemy.orm import Session

from storefront.domain.model.address import Address
from storefront.domain.repository.address_repository import AddressRepository
from storefront.infrastructure.persistence.models import AddressRow


class SqlAddressRepository(AddressRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, address_id: int) -> Address | None:
        row = self._session.get(AddressRow, address_id)
        if row is None:
            return None
        return Address(
            owner_id=row.owner_id,
            full_name=row.full_name,
            street=row.street,
            city=row.city,
            postal_code=row.postal_code,
            country=row.country,
            id=row.id,
        )

    def add(self, address: Address) -> None:
        row = AddressRow(
            owner_id=address.owner_id,
            full_name=address.full_name,
            street=address.street,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
        )
        self._session.add(row)
        self._session.flush()
        address.id = row.id
