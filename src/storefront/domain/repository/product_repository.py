"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory) live in the
infrastructure layer and in the test fakes.

Stock is never written through ``save``.  The two stock methods are
conditional writes that must be evaluated by the store itself, so two
concurrent callers can never both succeed from the same stale read.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def add(self, product: Product) -> None:
        """Insert a new catalog product."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist catalog fields (name, price, active, ...) but not stock."""

    @abstractmethod
    def apply_stock_delta(self, product_id: str, delta: int) -> int | None:
        """Add ``delta`` to the stock if the result stays >= 0.

        Also recomputes ``in_stock``.  Returns the new stock level, or
        None when the product is missing or the stock is insufficient.
        """

    @abstractmethod
    def compare_and_set_stock(self, product_id: str, expected: int, new: int) -> bool:
        """Set the stock to ``new`` only if it currently equals ``expected``."""
