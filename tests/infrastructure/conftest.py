"""Shared fixtures for tests that run against a real (SQLite) database."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.domain.model.address import Address
from storefront.domain.model.coupon import Coupon
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.infrastructure.persistence.database import Database
from storefront.infrastructure.persistence.unit_of_work import SqlUnitOfWork
from tests.fakes import FakeClock

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'storefront.db'}")
    db.create_tables()
    yield db
    db.close()


@pytest.fixture
def session(database):
    with database.session_factory() as session:
        yield session


@pytest.fixture
def uow_factory(database):
    return lambda: SqlUnitOfWork(database.session_factory)


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def seeded(uow_factory):
    """A small catalog, one address per shopper and two coupons."""
    with uow_factory() as uow:
        uow.products.add(Product(id="P", name="Brake pad", price=Money.of("10.00"), stock_quantity=5, sku="BP-1"))
        uow.products.add(Product(id="Q", name="Wiper", price=Money.of("5.00"), stock_quantity=3))
        uow.products.add(Product(id="L", name="Headlight", price=Money.of("50.00"), stock_quantity=1))
        uow.products.add(Product(id="R", name="Radiator", price=Money.of("30.00"), stock_quantity=2))
        uow.addresses.add(Address("alice", "Alice", "Via Roma 1", "Milano", "20100"))
        uow.addresses.add(Address("bob", "Bob", "Via Po 2", "Torino", "10100"))
        uow.coupons.add(Coupon(code="SAVE10", discount_percent=Decimal("10")))
        uow.coupons.add(Coupon(code="USED", discount_percent=Decimal("20"), is_used=True))
        uow.commit()
    return uow_factory
