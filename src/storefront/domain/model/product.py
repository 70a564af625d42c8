"""Product aggregate.

Products are owned by the catalog.  The core only reads them, except
for the stock fields which are mutated by checkout (sales) and by
explicit admin stock operations, both through conditional writes in the
repository.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money

# A product whose stock is exactly this value can only be held by one
# shopper at a time.
SCARCE_STOCK = 1


@dataclass
class Product:
    """A part in the catalog.

    Invariants:
    - ``stock_quantity`` is never negative
    - ``in_stock`` always equals ``stock_quantity > 0``
    """

    id: str
    name: str
    price: Money
    stock_quantity: int = 0
    active: bool = True
    sku: str | None = None
    low_stock_threshold: int | None = None

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise ValidationError(
                f"Stock for {self.name} cannot be negative, got {self.stock_quantity}"
            )

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def is_available(self) -> bool:
        """Sellable right now: active and with at least one unit."""
        return self.active and self.in_stock

    @property
    def is_scarce(self) -> bool:
        """Only the last unit is left, so holds must be exclusive."""
        return self.stock_quantity == SCARCE_STOCK

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at commit time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price
