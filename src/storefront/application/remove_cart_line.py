"""Application service: Remove Cart Line use case (idempotent)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.model.cart import utcnow
from storefront.domain.service.reservation_manager import ReservationManager


class RemoveCartLineHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, holder_id: str, product_id: str) -> bool:
        """Delete the line and release its lease.  False if it wasn't there."""
        with self._uow as uow:
            manager = ReservationManager(uow.reservations, uow.cart)
            manager.remove_expired_reservations(self._clock())
            removed = uow.cart.delete_line(holder_id, product_id)
            manager.release(holder_id, product_id)
            uow.commit()
        return removed
