"""Integration tests for the Commit Order use case (checkout).

Uses in-memory fake repositories, no database.  Concurrent checkouts
are simulated by letting one shopper's validation run against a stale
read while another shopper's commit has already changed the store.
"""

import copy
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.application.commit_order import CommitOrderHandler
from storefront.application.dto import CheckoutLine
from storefront.domain.exceptions import (
    CommitFailedError,
    CouponAlreadyUsedError,
    EmptyCartError,
    InsufficientStockError,
    InvalidAddressError,
    InvalidCouponError,
    ProductUnavailableError,
    ReservationExpiredError,
)
from storefront.domain.model.address import Address
from storefront.domain.model.cart import CartLine, Reservation
from storefront.domain.model.coupon import Coupon
from storefront.domain.model.inventory import MovementType
from storefront.domain.model.order import PaymentStatus
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from tests.fakes import FakeClock, FakeProductRepository, FakeUnitOfWork

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
ALICE_ADDRESS = 1
BOB_ADDRESS = 2


class StaleReadProductRepository(FakeProductRepository):
    """Serves reads from a frozen copy while writes hit the live store."""

    def freeze(self) -> None:
        self._frozen = copy.deepcopy(self._store)

    def get_by_id(self, product_id: str) -> Product | None:
        return copy.deepcopy(self._frozen.get(product_id))


def _products() -> list[Product]:
    return [
        Product(id="P", name="Brake pad", price=Money.of("10.00"), stock_quantity=5, sku="BP-1"),
        Product(id="Q", name="Wiper", price=Money.of("5.00"), stock_quantity=3),
        Product(id="L", name="Headlight", price=Money.of("50.00"), stock_quantity=1),
        Product(id="R", name="Radiator", price=Money.of("30.00"), stock_quantity=2),
        Product(id="X", name="Discontinued", price=Money.of("7.00"), stock_quantity=4, active=False),
    ]


def _setup(cart: list[CartLine] | None = None) -> tuple[FakeUnitOfWork, FakeClock]:
    uow = FakeUnitOfWork(
        products=_products(),
        coupons=[
            Coupon(code="SAVE10", discount_percent=Decimal("10")),
            Coupon(code="USED", discount_percent=Decimal("20"), is_used=True),
        ],
        addresses=[
            Address(owner_id="alice", full_name="Alice", street="Via Roma 1", city="Milano", postal_code="20100"),
            Address(owner_id="bob", full_name="Bob", street="Via Po 2", city="Torino", postal_code="10100"),
        ],
        cart_lines=cart,
    )
    return uow, FakeClock(NOW)


def _checkout(uow, clock, holder="alice", lines=None, address=ALICE_ADDRESS, **kwargs):
    if lines is None:
        lines = [CheckoutLine("P", 2), CheckoutLine("Q", 1)]
    kwargs.setdefault("shipping_cost", "3.00")
    handler_kwargs = {
        k: kwargs.pop(k) for k in ("number_generator", "max_number_attempts") if k in kwargs
    }
    handler = CommitOrderHandler(uow, clock, **handler_kwargs)
    return handler.handle(holder, lines, address, address, **kwargs)


class TestCommitOrder:

    def test_scenario_c_happy_path(self):
        uow, clock = _setup(cart=[
            CartLine("alice", "P", 2, snapshot_price=Money.of("10.00"), created_at=NOW),
            CartLine("alice", "Q", 1, snapshot_price=Money.of("5.00"), created_at=NOW),
        ])

        order = _checkout(uow, clock)

        assert order.subtotal == "25.00"
        assert order.discount_amount == "0.00"
        assert order.shipping_cost == "3.00"
        assert order.total == "28.00"
        assert order.status == "CONFIRMED"
        assert order.payment_status == "PAID"
        assert order.confirmed_at == NOW.isoformat()
        assert order.order_number.startswith("ORD-20240301-")
        assert [(i.product_id, i.quantity, i.unit_price, i.line_total) for i in order.items] == [
            ("P", 2, "10.00", "20.00"),
            ("Q", 1, "5.00", "5.00"),
        ]
        assert order.items[0].product_sku == "BP-1"

        assert uow.products.stock_of("P") == 3
        assert uow.products.stock_of("Q") == 2
        movements = uow.movements.all()
        assert [(m.product_id, m.type, m.quantity, m.quantity_after) for m in movements] == [
            ("P", MovementType.SALE, -2, 3),
            ("Q", MovementType.SALE, -1, 2),
        ]
        assert all(m.order_id == order.id for m in movements)
        assert movements[0].reason == f"Order {order.order_number}"
        assert uow.cart.list_for_holder("alice") == []
        assert uow.commits == 1

    def test_price_comes_from_catalog(self):
        uow, clock = _setup()
        repriced = uow.products.get_by_id("P")
        repriced.update_price(Money.of("12.00"))
        uow.products.save(repriced)

        order = _checkout(uow, clock, lines=[CheckoutLine("P", 1)], shipping_cost="0")
        assert order.items[0].unit_price == "12.00"
        assert order.total == "12.00"

    def test_duplicate_lines_are_merged(self):
        uow, clock = _setup()
        order = _checkout(uow, clock, lines=[CheckoutLine("P", 1), CheckoutLine("P", 2)])
        assert [(i.product_id, i.quantity) for i in order.items] == [("P", 3)]
        assert uow.products.stock_of("P") == 2

    def test_tax_and_pending_payment(self):
        uow, clock = _setup()
        order = _checkout(
            uow, clock, tax="2.20", payment_status=PaymentStatus.PENDING,
        )
        assert order.tax == "2.20"
        assert order.total == "30.20"
        assert order.status == "PENDING"
        assert order.confirmed_at is None

    def test_client_total_never_overrides_computed_total(self):
        uow, clock = _setup()
        order = _checkout(uow, clock, client_total="1.00")
        assert order.total == "28.00"

    def test_sale_rows_share_the_order_timestamp(self):
        uow, clock = _setup()
        clock.advance(days=3, minutes=7)

        order = _checkout(uow, clock)

        assert order.created_at == clock.now.isoformat()
        assert [m.created_at for m in uow.movements.all()] == [clock.now, clock.now]

    def test_large_order_with_many_distinct_parts(self):
        parts = [
            Product(id=f"K{i}", name=f"Kit part {i}", price=Money.of("2.00"), stock_quantity=5)
            for i in range(51)
        ]
        uow = FakeUnitOfWork(
            products=parts,
            addresses=[
                Address(owner_id="alice", full_name="Alice", street="Via Roma 1", city="Milano", postal_code="20100"),
            ],
        )

        order = _checkout(
            uow, FakeClock(NOW), lines=[CheckoutLine(p.id, 1) for p in parts], shipping_cost="0",
        )

        assert len(order.items) == 51
        assert order.total == "102.00"
        assert all(uow.products.stock_of(p.id) == 4 for p in parts)
        assert len(uow.movements.all()) == 51


class TestCheckoutValidation:

    def test_empty_cart(self):
        uow, clock = _setup()
        with pytest.raises(EmptyCartError):
            _checkout(uow, clock, lines=[])

    @pytest.mark.parametrize("address", [None, BOB_ADDRESS, 99])
    def test_address_must_belong_to_shopper(self, address):
        uow, clock = _setup()
        with pytest.raises(InvalidAddressError):
            _checkout(uow, clock, address=address)
        assert uow.orders.all() == []

    def test_scenario_d_used_coupon(self):
        uow, clock = _setup()
        with pytest.raises(CouponAlreadyUsedError) as excinfo:
            _checkout(uow, clock, coupon_code="USED")
        assert excinfo.value.code == "CouponAlreadyUsed"
        assert uow.products.stock_of("P") == 5
        assert uow.orders.all() == []
        assert uow.movements.all() == []
        assert uow.commits == 0

    def test_unknown_coupon(self):
        uow, clock = _setup()
        with pytest.raises(InvalidCouponError):
            _checkout(uow, clock, coupon_code="NOPE")

    def test_insufficient_stock(self):
        uow, clock = _setup()
        with pytest.raises(InsufficientStockError) as excinfo:
            _checkout(uow, clock, lines=[CheckoutLine("P", 6)])
        assert excinfo.value.details["available"] == 5
        assert uow.products.stock_of("P") == 5

    @pytest.mark.parametrize("product_id", ["X", "missing"])
    def test_unavailable_product(self, product_id):
        uow, clock = _setup()
        with pytest.raises(ProductUnavailableError):
            _checkout(uow, clock, lines=[CheckoutLine(product_id, 1)])


class TestCoupons:

    def test_coupon_discount_and_single_use(self):
        uow, clock = _setup()
        order = _checkout(uow, clock, coupon_code=" save10 ")

        assert order.coupon_code == "SAVE10"
        assert order.discount_amount == "2.50"
        assert order.total == "25.50"
        coupon = uow.coupons.get_by_code("SAVE10")
        assert coupon.is_used
        assert coupon.used_by_order_id == order.id
        assert coupon.used_by_holder_id == "alice"

        with pytest.raises(CouponAlreadyUsedError):
            _checkout(uow, clock, coupon_code="SAVE10")
        assert len(uow.orders.all()) == 1

    def test_coupon_race_rolls_back_the_loser(self, monkeypatch):
        uow, clock = _setup()
        stale = uow.coupons.get_by_code("SAVE10")

        _checkout(uow, clock, holder="alice", coupon_code="SAVE10")
        monkeypatch.setattr(uow.coupons, "get_by_code", lambda code: copy.deepcopy(stale))

        with pytest.raises(CouponAlreadyUsedError):
            _checkout(uow, clock, holder="bob", address=BOB_ADDRESS, coupon_code="SAVE10")

        assert uow.products.stock_of("P") == 3
        assert uow.products.stock_of("Q") == 2
        assert len(uow.orders.all()) == 1
        assert len(uow.movements.all()) == 2


class TestLastUnitAtCheckout:

    def test_lease_holder_buys_the_last_unit(self):
        uow, clock = _setup(cart=[CartLine("alice", "L", 1, reservation_expires_at=NOW + timedelta(minutes=5))])
        uow.reservations.try_acquire("L", "alice", NOW + timedelta(minutes=5), NOW)

        order = _checkout(uow, clock, lines=[CheckoutLine("L", 1)])

        assert order.total == "53.00"
        assert uow.products.stock_of("L") == 0
        assert uow.reservations.all() == []
        assert uow.cart.list_for_holder("alice") == []

    def test_expired_lease_removes_line_and_fails(self):
        uow, clock = _setup(cart=[CartLine("alice", "L", 1, reservation_expires_at=NOW + timedelta(minutes=20))])
        uow.reservations.try_acquire("L", "alice", NOW + timedelta(minutes=20), NOW)
        clock.advance(minutes=21)

        with pytest.raises(ReservationExpiredError) as excinfo:
            _checkout(uow, clock, lines=[CheckoutLine("L", 1)])

        assert excinfo.value.details["product_name"] == "Headlight"
        assert uow.cart.get_line("alice", "L") is None
        assert uow.products.stock_of("L") == 1
        assert uow.orders.all() == []

    def test_lease_held_by_someone_else(self):
        uow, clock = _setup(cart=[CartLine("bob", "L", 1)])
        uow.reservations.try_acquire("L", "alice", NOW + timedelta(minutes=10), NOW)

        with pytest.raises(ReservationExpiredError):
            _checkout(uow, clock, holder="bob", address=BOB_ADDRESS, lines=[CheckoutLine("L", 1)])

        assert uow.cart.get_line("bob", "L") is None
        assert uow.reservations.get("L").holder_id == "alice"
        assert uow.products.stock_of("L") == 1


class TestConcurrentCheckout:

    def test_scenario_e_only_one_checkout_wins(self):
        uow, clock = _setup(cart=[CartLine("bob", "R", 2)])
        stale = StaleReadProductRepository(_products())
        stale.freeze()
        uow.products = stale

        _checkout(uow, clock, holder="alice", lines=[CheckoutLine("R", 2)])
        with pytest.raises(InsufficientStockError):
            _checkout(uow, clock, holder="bob", address=BOB_ADDRESS, lines=[CheckoutLine("R", 2)])

        assert uow.products.stock_of("R") == 0
        assert len(uow.orders.all()) == 1
        assert [m.quantity for m in uow.movements.all()] == [-2]
        assert uow.cart.get_line("bob", "R") is not None


class TestCommitFailures:

    def test_order_number_collision_is_retried(self):
        uow, clock = _setup()
        numbers = iter(["ORD-20240301-0001", "ORD-20240301-0001", "ORD-20240301-0002"])
        generator = lambda now: next(numbers)

        first = _checkout(uow, clock, lines=[CheckoutLine("P", 1)], number_generator=generator)
        second = _checkout(uow, clock, lines=[CheckoutLine("P", 1)], number_generator=generator)

        assert first.order_number == "ORD-20240301-0001"
        assert second.order_number == "ORD-20240301-0002"

    def test_gives_up_after_max_attempts(self):
        uow, clock = _setup()
        _checkout(uow, clock, lines=[CheckoutLine("P", 1)], number_generator=lambda now: "ORD-X")

        with pytest.raises(CommitFailedError):
            _checkout(
                uow, clock,
                lines=[CheckoutLine("P", 1)],
                number_generator=lambda now: "ORD-X",
                max_number_attempts=3,
            )
        assert uow.products.stock_of("P") == 4
        assert len(uow.orders.all()) == 1

    def test_unexpected_error_rolls_back(self, monkeypatch):
        uow, clock = _setup(cart=[CartLine("alice", "P", 2)])

        def broken_append(movement):
            raise RuntimeError("disk full")

        monkeypatch.setattr(uow.movements, "append", broken_append)

        with pytest.raises(CommitFailedError) as excinfo:
            _checkout(uow, clock)

        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert excinfo.value.http_status == 503
        assert uow.products.stock_of("P") == 5
        assert uow.orders.all() == []
        assert uow.cart.get_line("alice", "P") is not None
