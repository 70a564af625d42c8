"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def number_exists(self, order_number: str) -> bool:
        """True if an order already uses this order number."""

    @abstractmethod
    def list_for_holder(self, holder_id: str) -> list[Order]:
        """Return the holder's orders, newest first."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order with its items and assign ``order.id``."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist status, payment and shipping fields of an existing order."""
