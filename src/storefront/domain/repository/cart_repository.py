"""Abstract repository for cart lines, keyed by (holder, product)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from storefront.domain.model.cart import CartLine


class CartRepository(ABC):

    @abstractmethod
    def list_for_holder(self, holder_id: str) -> list[CartLine]:
        """Return the holder's lines, newest first."""

    @abstractmethod
    def get_line(self, holder_id: str, product_id: str) -> CartLine | None:
        """Return one line, or None."""

    @abstractmethod
    def save_line(self, line: CartLine) -> None:
        """Insert or update the line for (holder, product)."""

    @abstractmethod
    def delete_line(self, holder_id: str, product_id: str) -> bool:
        """Delete one line.  Returns False if there was nothing to delete."""

    @abstractmethod
    def clear(self, holder_id: str) -> int:
        """Delete every line of the holder; returns how many went."""

    @abstractmethod
    def delete_lapsed(self, now: datetime) -> list[CartLine]:
        """Delete and return every line whose reservation expired before ``now``."""

    @abstractmethod
    def clear_reservation_expiry(self, product_id: str) -> int:
        """Drop the mirrored lease expiry on every line for a product."""
