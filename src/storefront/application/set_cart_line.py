"""Application service: Add / Set Cart Line use case.

Puts a product in the shopper's cart, or changes its quantity.  For a
product with a single unit left the shopper must also win (or renew)
the exclusive lease on it; the lease and the cart line are written in
the same unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

from storefront.application.dto import CartLineDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ProductUnavailableError,
    ValidationError,
)
from storefront.domain.model.cart import RESERVATION_TTL, CartLine, utcnow
from storefront.domain.model.value_objects import Money
from storefront.domain.service.reservation_manager import ReservationManager

logger = logging.getLogger(__name__)


class SetCartLineHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        reservation_ttl: timedelta = RESERVATION_TTL,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._reservation_ttl = reservation_ttl

    def handle(
        self,
        holder_id: str,
        product_id: str,
        quantity: int,
        unit_price: str | Decimal | None = None,
        require_existing: bool = False,
    ) -> CartLineDTO | None:
        """Create or update the line for (holder, product).

        ``quantity <= 0`` removes the line and returns None.  With
        ``require_existing`` the line must already be in the cart (a
        quantity change rather than an add).  ``unit_price`` is the
        price shown to the shopper; when omitted an existing line keeps
        the one it already had.
        """
        if not holder_id:
            raise ValidationError("Holder id is required")
        if not product_id:
            raise ValidationError("Product id is required")

        now = self._clock()
        with self._uow as uow:
            manager = ReservationManager(uow.reservations, uow.cart, self._reservation_ttl)
            manager.remove_expired_reservations(now)

            existing = uow.cart.get_line(holder_id, product_id)
            if require_existing and existing is None and quantity > 0:
                raise EntityNotFoundError(
                    f"Product {product_id} is not in the cart", product_id=product_id
                )

            if quantity <= 0:
                uow.cart.delete_line(holder_id, product_id)
                manager.release(holder_id, product_id)
                uow.commit()
                return None

            product = uow.products.get_by_id(product_id)
            if product is None or not product.is_available:
                raise ProductUnavailableError(
                    f"Product {product.name if product else product_id} is not available",
                    product_id=product_id,
                )

            # a conflicting lease wins over a quantity problem
            expires_at = manager.create_or_update_reservation(
                holder_id, product, quantity, now
            )
            if quantity > product.stock_quantity:
                raise InsufficientStockError(
                    f"Quantity not available for {product.name}. "
                    f"Only {product.stock_quantity} left.",
                    product_id=product.id,
                    product_name=product.name,
                    available=product.stock_quantity,
                )
            if expires_at is None:
                manager.release(holder_id, product.id)

            if unit_price is not None:
                price: Money | None = Money.of(unit_price).rounded()
            else:
                price = existing.snapshot_price if existing else None

            if existing is None:
                line = CartLine(
                    holder_id=holder_id,
                    product_id=product.id,
                    quantity=quantity,
                    snapshot_price=price,
                    reservation_expires_at=expires_at,
                    created_at=now,
                )
            else:
                line = existing
                line.quantity = quantity
                line.snapshot_price = price
                line.reservation_expires_at = expires_at

            uow.cart.save_line(line)
            uow.commit()

        logger.info(
            "Cart of %s: %s x%d%s",
            holder_id,
            product.id,
            quantity,
            f" (reserved until {expires_at.isoformat()})" if expires_at else "",
        )
        return CartLineDTO.from_domain(line, product)
