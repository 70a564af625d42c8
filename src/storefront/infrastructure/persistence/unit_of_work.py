"""SQLAlchemy Unit of Work: one Session, one transaction per use case."""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from storefront.application.unit_of_work import UnitOfWork
from storefront.infrastructure.persistence.sql_address_repository import SqlAddressRepository
from storefront.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from storefront.infrastructure.persistence.sql_coupon_repository import SqlCouponRepository
from storefront.infrastructure.persistence.sql_movement_repository import SqlMovementRepository
from storefront.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from storefront.infrastructure.persistence.sql_product_repository import SqlProductRepository
from storefront.infrastructure.persistence.sql_reservation_repository import (
    SqlReservationRepository,
)


class SqlUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlUnitOfWork:
        self._session = self._session_factory()
        self.products = SqlProductRepository(self._session)
        self.cart = SqlCartRepository(self._session)
        self.reservations = SqlReservationRepository(self._session)
        self.orders = SqlOrderRepository(self._session)
        self.coupons = SqlCouponRepository(self._session)
        self.movements = SqlMovementRepository(self._session)
        self.addresses = SqlAddressRepository(self._session)
        super().__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._session.close()
            self._session = None

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
