"""InventoryMovement: one row of the append-only stock ledger.

Every change to ``Product.stock_quantity`` is recorded here with its
signed delta and the stock level it produced.  Rows are never updated
or deleted; they are the audit trail and the input for sales-velocity
analytics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from storefront.domain.exceptions import InvariantViolationError, ValidationError
from storefront.domain.model.cart import utcnow


class MovementType(Enum):
    SALE = "SALE"
    PURCHASE = "PURCHASE"
    ADJUSTMENT = "ADJUSTMENT"


@dataclass(frozen=True)
class InventoryMovement:
    """Invariants:
    - ``quantity`` is a non-zero signed delta
    - ``quantity_after`` is never negative
    - a SALE always removes stock
    """

    product_id: str
    type: MovementType
    quantity: int
    quantity_after: int
    reason: str
    order_id: int | None = None
    holder_id: str | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.quantity == 0:
            raise ValidationError("Inventory movement quantity cannot be zero")
        if self.quantity_after < 0:
            raise InvariantViolationError(
                f"Ledger write would leave product {self.product_id} "
                f"at {self.quantity_after} units",
                product_id=self.product_id,
                quantity_after=self.quantity_after,
            )
        if self.type is MovementType.SALE and self.quantity > 0:
            raise ValidationError("A sale movement must have a negative quantity")

    @staticmethod
    def sale(
        product_id: str,
        quantity: int,
        quantity_after: int,
        order_id: int,
        order_number: str,
        holder_id: str | None = None,
        created_at: datetime | None = None,
    ) -> InventoryMovement:
        return InventoryMovement(
            product_id=product_id,
            type=MovementType.SALE,
            quantity=-quantity,
            quantity_after=quantity_after,
            reason=f"Order {order_number}",
            order_id=order_id,
            holder_id=holder_id,
            created_at=created_at or utcnow(),
        )
