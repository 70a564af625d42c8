"""Tests for admin stock operations and adding products."""

import copy
from datetime import datetime, timezone

import pytest

from storefront.application.add_product import AddProductHandler
from storefront.application.adjust_stock import AdjustStockHandler, SetStockHandler
from storefront.application.set_cart_line import SetCartLineHandler
from storefront.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from storefront.domain.model.inventory import MovementType
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from tests.fakes import FakeClock, FakeUnitOfWork

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _setup() -> FakeUnitOfWork:
    return FakeUnitOfWork(
        products=[
            Product(id="1", name="Brake pad", price=Money.of("10.00"), stock_quantity=5),
            Product(id="2", name="Headlight", price=Money.of("50.00"), stock_quantity=1),
        ]
    )


class TestAdjustStock:

    def test_purchase_adds_stock_and_records_movement(self):
        uow = _setup()
        level = AdjustStockHandler(uow).handle("1", 10, MovementType.PURCHASE, reason="Supplier delivery")

        assert level.stock_quantity == 15
        assert level.in_stock
        [movement] = uow.movements.all()
        assert movement.type is MovementType.PURCHASE
        assert movement.quantity == 10
        assert movement.quantity_after == 15
        assert movement.reason == "Supplier delivery"

    def test_negative_adjustment(self):
        uow = _setup()
        level = AdjustStockHandler(uow).handle("1", -5)
        assert level.stock_quantity == 0
        assert not level.in_stock
        assert uow.movements.all()[0].reason == "Manual adjustment"

    def test_cannot_go_below_zero(self):
        uow = _setup()
        with pytest.raises(InsufficientStockError) as excinfo:
            AdjustStockHandler(uow).handle("1", -6)
        assert excinfo.value.details["available"] == 5
        assert uow.products.stock_of("1") == 5
        assert uow.movements.all() == []

    @pytest.mark.parametrize(
        "delta,movement_type",
        [(0, MovementType.ADJUSTMENT), (-1, MovementType.SALE), (-1, MovementType.PURCHASE)],
    )
    def test_rejected_adjustments(self, delta, movement_type):
        uow = _setup()
        with pytest.raises(ValidationError):
            AdjustStockHandler(uow).handle("1", delta, movement_type)

    def test_unknown_product(self):
        uow = _setup()
        with pytest.raises(EntityNotFoundError):
            AdjustStockHandler(uow).handle("nope", 1)

    def test_restock_releases_last_unit_lease(self):
        uow = _setup()
        clock = FakeClock(NOW)
        SetCartLineHandler(uow, clock).handle("alice", "2", 1)
        assert uow.reservations.get("2").holder_id == "alice"

        AdjustStockHandler(uow).handle("2", 3, MovementType.PURCHASE)

        assert uow.reservations.get("2") is None
        assert uow.cart.get_line("alice", "2").reservation_expires_at is None
        # anyone can now add it
        line = SetCartLineHandler(uow, clock).handle("bob", "2", 2)
        assert line.reservation_expires_at is None

    def test_write_off_keeps_lease(self):
        uow = _setup()
        SetCartLineHandler(uow, FakeClock(NOW)).handle("alice", "2", 1)
        AdjustStockHandler(uow).handle("2", -1, reason="Damaged")
        assert uow.reservations.get("2").holder_id == "alice"
        assert uow.products.stock_of("2") == 0


class TestSetStock:

    def test_set_records_difference(self):
        uow = _setup()
        level = SetStockHandler(uow).handle("1", 2, reason="Stock count")
        assert level.stock_quantity == 2
        [movement] = uow.movements.all()
        assert movement.type is MovementType.ADJUSTMENT
        assert movement.quantity == -3
        assert movement.quantity_after == 2

    def test_same_level_writes_nothing(self):
        uow = _setup()
        SetStockHandler(uow).handle("1", 5)
        assert uow.movements.all() == []

    def test_negative_rejected(self):
        uow = _setup()
        with pytest.raises(ValidationError):
            SetStockHandler(uow).handle("1", -1)

    def test_concurrent_change_is_a_conflict(self, monkeypatch):
        uow = _setup()
        stale = uow.products.get_by_id("1")
        AdjustStockHandler(uow).handle("1", -1)
        monkeypatch.setattr(uow.products, "get_by_id", lambda product_id: copy.deepcopy(stale))

        with pytest.raises(ConflictError):
            SetStockHandler(uow).handle("1", 10)
        assert uow.products.stock_of("1") == 4
        assert len(uow.movements.all()) == 1

    def test_restock_releases_lease(self):
        uow = _setup()
        clock = FakeClock(NOW)
        SetCartLineHandler(uow, clock).handle("alice", "2", 1)
        SetStockHandler(uow).handle("2", 4)
        assert uow.reservations.all() == []


class TestAddProduct:

    def test_assigns_next_id_and_books_opening_stock(self):
        uow = _setup()
        product = AddProductHandler(uow).handle("  Spark plug ", "4.499", stock_quantity=20, sku="SP-9")

        assert product.id == "3"
        assert product.name == "Spark plug"
        assert product.price == Money.of("4.50")
        assert product.stock_quantity == 20
        assert uow.products.stock_of("3") == 20
        [movement] = uow.movements.all()
        assert movement.type is MovementType.PURCHASE
        assert movement.reason == "Opening stock"

    def test_first_product_gets_id_one(self):
        uow = FakeUnitOfWork()
        assert AddProductHandler(uow).handle("Fuse", "0.50").id == "1"
        assert uow.movements.all() == []

    def test_duplicate_name_rejected(self):
        uow = _setup()
        with pytest.raises(ValidationError):
            AddProductHandler(uow).handle("brake pad", "9.00")

    @pytest.mark.parametrize("price", ["0", "-1"])
    def test_price_must_be_positive(self, price):
        uow = _setup()
        with pytest.raises(ValidationError):
            AddProductHandler(uow).handle("Fuse", price)
