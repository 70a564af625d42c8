"""Application service: Add Product use case.

A new product starts with zero stock; its opening quantity is booked as
a PURCHASE so the ledger accounts for every unit from day one.
"""

from __future__ import annotations

from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.inventory import InventoryMovement, MovementType
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        price: str,
        stock_quantity: int = 0,
        sku: str | None = None,
        low_stock_threshold: int | None = None,
    ) -> Product:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if stock_quantity < 0:
            raise ValidationError("Opening stock cannot be negative")

        with self._uow as uow:
            existing = uow.products.get_by_name(name)
            if existing is not None:
                raise ValidationError(f"Product '{name}' already exists")

            # Auto-assign ID based on existing products
            numeric_ids = [int(p.id) for p in uow.products.list_all() if p.id.isdigit()]
            next_id = str(max(numeric_ids, default=0) + 1)

            product = Product(
                id=next_id,
                name=name.strip(),
                price=Money.zero(),
                sku=sku,
                low_stock_threshold=low_stock_threshold,
            )
            product.update_price(Money.of(price).rounded())
            uow.products.add(product)
            if stock_quantity > 0:
                product.stock_quantity = uow.products.apply_stock_delta(product.id, stock_quantity) or 0
                uow.movements.append(
                    InventoryMovement(
                        product_id=product.id,
                        type=MovementType.PURCHASE,
                        quantity=stock_quantity,
                        quantity_after=product.stock_quantity,
                        reason="Opening stock",
                    )
                )
            uow.commit()
        return product
