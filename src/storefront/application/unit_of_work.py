"""Unit of Work: the transaction boundary for one use case.

Every handler opens exactly one unit of work per request.  Writes made
through its repositories become visible together on ``commit()``; leaving
the ``with`` block without committing rolls every one of them back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.repository.address_repository import AddressRepository
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.domain.repository.movement_repository import MovementRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.reservation_repository import (
    ReservationRepository,
)


class UnitOfWork(ABC):

    products: ProductRepository
    cart: CartRepository
    reservations: ReservationRepository
    orders: OrderRepository
    coupons: CouponRepository
    movements: MovementRepository
    addresses: AddressRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # committed work is unaffected; anything pending is discarded
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every uncommitted write."""
