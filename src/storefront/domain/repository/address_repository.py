"""Abstract repository for customer addresses."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.address import Address


class AddressRepository(ABC):

    @abstractmethod
    def get_by_id(self, address_id: int) -> Address | None:
        """Return an address by its ID, or None if not found."""

    @abstractmethod
    def add(self, address: Address) -> None:
        """Insert an address and assign its ID."""
