"""Application service: admin stock operations (adjust by delta, set level).

Purchases and corrections go through the same discipline as sales: a
conditional write evaluated by the store, plus one ledger row carrying
the resulting stock level.  Lifting a product above a single unit
releases any lease on it at once, so restocked units are immediately
buyable by everyone.
"""

from __future__ import annotations

import logging

from storefront.application.dto import StockLevelDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from storefront.domain.model.inventory import InventoryMovement, MovementType
from storefront.domain.model.product import SCARCE_STOCK
from storefront.domain.service.reservation_manager import ReservationManager

logger = logging.getLogger(__name__)


class AdjustStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: str,
        delta: int,
        movement_type: MovementType = MovementType.ADJUSTMENT,
        reason: str | None = None,
        holder_id: str | None = None,
    ) -> StockLevelDTO:
        """Add (or with a negative ``delta`` remove) stock."""
        if delta == 0:
            raise ValidationError("Stock adjustment cannot be zero")
        if movement_type is MovementType.SALE:
            raise ValidationError("Sales are recorded by checkout only")
        if movement_type is MovementType.PURCHASE and delta < 0:
            raise ValidationError("A purchase must add stock")

        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product not found: '{product_id}'")

            remaining = uow.products.apply_stock_delta(product_id, delta)
            if remaining is None:
                raise InsufficientStockError(
                    f"Cannot remove {-delta} units of {product.name}: "
                    f"only {product.stock_quantity} in stock",
                    product_id=product_id,
                    available=product.stock_quantity,
                )
            uow.movements.append(
                InventoryMovement(
                    product_id=product_id,
                    type=movement_type,
                    quantity=delta,
                    quantity_after=remaining,
                    reason=reason or f"Manual {movement_type.value.lower()}",
                    holder_id=holder_id,
                )
            )
            if remaining > SCARCE_STOCK:
                ReservationManager(uow.reservations, uow.cart).release_product(product_id)
            uow.commit()

        logger.info(
            "Stock of %s %+d (%s) -> %d", product_id, delta, movement_type.value, remaining
        )
        return StockLevelDTO(
            product_id=product_id,
            product_name=product.name,
            stock_quantity=remaining,
            in_stock=remaining > 0,
        )


class SetStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: str,
        quantity: int,
        reason: str | None = None,
        holder_id: str | None = None,
    ) -> StockLevelDTO:
        """Set the absolute stock level, recording the difference."""
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")

        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product not found: '{product_id}'")

            current = product.stock_quantity
            if quantity != current:
                if not uow.products.compare_and_set_stock(product_id, current, quantity):
                    raise ConflictError(
                        f"Stock of {product.name} changed while updating; please retry",
                        product_id=product_id,
                    )
                uow.movements.append(
                    InventoryMovement(
                        product_id=product_id,
                        type=MovementType.ADJUSTMENT,
                        quantity=quantity - current,
                        quantity_after=quantity,
                        reason=reason or "Stock level set",
                        holder_id=holder_id,
                    )
                )
                if quantity > SCARCE_STOCK:
                    ReservationManager(uow.reservations, uow.cart).release_product(product_id)
            uow.commit()

        logger.info("Stock of %s set %d -> %d", product_id, current, quantity)
        return StockLevelDTO(
            product_id=product_id,
            product_name=product.name,
            stock_quantity=quantity,
            in_stock=quantity > 0,
        )
