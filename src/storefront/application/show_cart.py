"""Application service: Show Cart use case.

Reading the cart is also when it gets repaired: expired leases are swept
and lines that can no longer be bought are deleted, so the shopper
always sees a cart they can actually check out.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.application.dto import CartDTO, CartLineDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.model.cart import utcnow
from storefront.domain.service.reservation_manager import ReservationManager


class ShowCartHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, holder_id: str) -> CartDTO:
        now = self._clock()
        valid: list[CartLineDTO] = []
        removed: list[str] = []

        with self._uow as uow:
            manager = ReservationManager(uow.reservations, uow.cart)
            manager.remove_expired_reservations(now)

            for line in uow.cart.list_for_holder(holder_id):
                product = uow.products.get_by_id(line.product_id)
                if product is None or not product.is_available or line.reservation_lapsed(now):
                    uow.cart.delete_line(holder_id, line.product_id)
                    manager.release(holder_id, line.product_id)
                    removed.append(product.name if product else line.product_id)
                    continue
                valid.append(CartLineDTO.from_domain(line, product))

            uow.commit()

        return CartDTO(holder_id=holder_id, lines=valid, removed=removed)
