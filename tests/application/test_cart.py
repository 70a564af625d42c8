"""Integration tests for the cart use cases and last-unit reservations.

Uses in-memory fake repositories, no database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.application.remove_cart_line import RemoveCartLineHandler
from storefront.application.set_cart_line import SetCartLineHandler
from storefront.application.show_cart import ShowCartHandler
from storefront.application.sweep_reservations import SweepReservationsHandler
from storefront.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ProductUnavailableError,
    ReservationConflictError,
)
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from tests.fakes import FakeClock, FakeUnitOfWork

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _setup() -> tuple[FakeUnitOfWork, FakeClock]:
    uow = FakeUnitOfWork(
        products=[
            Product(id="P", name="Side mirror", price=Money.of("80.00"), stock_quantity=1),
            Product(id="Q", name="Oil filter", price=Money.of("9.00"), stock_quantity=40),
            Product(id="R", name="Spark plug", price=Money.of("4.50"), stock_quantity=0),
            Product(id="S", name="Old wiper", price=Money.of("6.00"), stock_quantity=5, active=False),
        ]
    )
    return uow, FakeClock(NOW)


class TestLastUnitReservation:

    def test_scenario_a_second_shopper_gets_conflict(self):
        uow, clock = _setup()
        handler = SetCartLineHandler(uow, clock)

        line = handler.handle("alice", "P", 1, unit_price="80.00")
        assert line.reservation_expires_at == (NOW + timedelta(minutes=20)).isoformat()

        clock.advance(minutes=19)
        with pytest.raises(ReservationConflictError) as excinfo:
            handler.handle("bob", "P", 1)
        assert excinfo.value.http_status == 409
        assert uow.cart.get_line("bob", "P") is None
        assert uow.reservations.get("P").holder_id == "alice"

    def test_scenario_b_lapsed_lease_goes_to_next_shopper(self):
        uow, clock = _setup()
        handler = SetCartLineHandler(uow, clock)
        handler.handle("alice", "P", 1)

        clock.advance(minutes=21)
        line = handler.handle("bob", "P", 1)

        assert line.reservation_expires_at == (clock.now + timedelta(minutes=20)).isoformat()
        assert uow.reservations.get("P").holder_id == "bob"
        assert uow.cart.get_line("alice", "P") is None

    def test_cart_write_renews_lease(self):
        uow, clock = _setup()
        handler = SetCartLineHandler(uow, clock)
        handler.handle("alice", "P", 1)

        clock.advance(minutes=15)
        handler.handle("alice", "P", 1)
        assert uow.reservations.get("P").expires_at == clock.now + timedelta(minutes=20)

    def test_conflict_wins_over_quantity_problem(self):
        uow, clock = _setup()
        handler = SetCartLineHandler(uow, clock)
        handler.handle("alice", "P", 1)
        with pytest.raises(ReservationConflictError):
            handler.handle("bob", "P", 5)

    def test_plentiful_product_gets_no_lease(self):
        uow, clock = _setup()
        line = SetCartLineHandler(uow, clock).handle("alice", "Q", 3)
        assert line.reservation_expires_at is None
        assert uow.reservations.all() == []

    def test_configured_ttl(self):
        uow, clock = _setup()
        handler = SetCartLineHandler(uow, clock, reservation_ttl=timedelta(minutes=5))
        handler.handle("alice", "P", 1)
        assert uow.reservations.get("P").expires_at == NOW + timedelta(minutes=5)


class TestSetCartLine:

    def test_quantity_above_stock_rejected(self):
        uow, clock = _setup()
        with pytest.raises(InsufficientStockError) as excinfo:
            SetCartLineHandler(uow, clock).handle("alice", "Q", 41)
        assert excinfo.value.details["available"] == 40
        assert uow.cart.get_line("alice", "Q") is None

    @pytest.mark.parametrize("product_id", ["R", "S", "missing"])
    def test_unavailable_product_rejected(self, product_id):
        uow, clock = _setup()
        with pytest.raises(ProductUnavailableError):
            SetCartLineHandler(uow, clock).handle("alice", product_id, 1)

    def test_price_rounded_and_kept_on_update(self):
        uow, clock = _setup()
        handler = SetCartLineHandler(uow, clock)
        handler.handle("alice", "Q", 1, unit_price="8.999")
        line = handler.handle("alice", "Q", 4)
        assert line.quantity == 4
        assert line.snapshot_price == "9.00"
        assert line.unit_price == "9.00"

    def test_zero_quantity_removes_line_and_lease(self):
        uow, clock = _setup()
        handler = SetCartLineHandler(uow, clock)
        handler.handle("alice", "P", 1)
        assert handler.handle("alice", "P", 0) is None
        assert uow.cart.get_line("alice", "P") is None
        assert uow.reservations.all() == []

    def test_set_quantity_requires_existing_line(self):
        uow, clock = _setup()
        with pytest.raises(EntityNotFoundError):
            SetCartLineHandler(uow, clock).handle("alice", "Q", 2, require_existing=True)

    def test_failed_write_leaves_nothing_behind(self):
        uow, clock = _setup()
        with pytest.raises(InsufficientStockError):
            SetCartLineHandler(uow, clock).handle("alice", "P", 2)
        # the lease taken before the stock check is rolled back with it
        assert uow.reservations.all() == []


class TestShowCart:

    def test_drops_lines_that_can_no_longer_be_bought(self):
        uow, clock = _setup()
        SetCartLineHandler(uow, clock).handle("alice", "Q", 2)
        SetCartLineHandler(uow, clock).handle("alice", "P", 1)

        withdrawn = uow.products.get_by_id("Q")
        withdrawn.active = False
        uow.products.save(withdrawn)

        cart = ShowCartHandler(uow, clock).handle("alice")
        assert [l.product_id for l in cart.lines] == ["P"]
        assert cart.removed == ["Oil filter"]
        assert uow.cart.get_line("alice", "Q") is None

    def test_drops_lapsed_reservation(self):
        uow, clock = _setup()
        SetCartLineHandler(uow, clock).handle("alice", "P", 1)
        clock.advance(minutes=25)
        cart = ShowCartHandler(uow, clock).handle("alice")
        assert cart.lines == []
        assert uow.reservations.all() == []

    def test_empty_cart(self):
        uow, clock = _setup()
        cart = ShowCartHandler(uow, clock).handle("nobody")
        assert cart.lines == []
        assert cart.removed == []


class TestRemoveCartLine:

    def test_remove_is_idempotent_and_frees_the_unit(self):
        uow, clock = _setup()
        SetCartLineHandler(uow, clock).handle("alice", "P", 1)

        handler = RemoveCartLineHandler(uow, clock)
        assert handler.handle("alice", "P") is True
        assert handler.handle("alice", "P") is False

        line = SetCartLineHandler(uow, clock).handle("bob", "P", 1)
        assert line.reservation_expires_at is not None


class TestSweepReservations:

    def test_sweep_reports_and_is_idempotent(self):
        uow, clock = _setup()
        SetCartLineHandler(uow, clock).handle("alice", "P", 1)
        SetCartLineHandler(uow, clock).handle("alice", "Q", 1)
        clock.advance(minutes=30)

        handler = SweepReservationsHandler(uow, clock)
        first = handler.handle()
        assert first.removed == 1
        assert first.items == [("alice", "P")]

        cart_after_first = uow.cart.all_lines()
        second = handler.handle()
        assert second.removed == 0
        assert uow.cart.all_lines() == cart_after_first
        assert [l.product_id for l in cart_after_first] == ["Q"]
