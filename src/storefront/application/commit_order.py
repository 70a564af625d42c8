"""Application service: Commit Order use case (checkout).

The single atomic boundary that turns a cart into a durable Order.

Cheap validation runs first (cart, addresses, leases, stock, coupon) and
fails before anything is written, with one exception: a scarce line
whose lease lapsed is deleted from the cart so the shopper sees an
accurate cart on retry.

The write phase then creates the order, decrements stock, appends the
ledger rows, consumes the coupon and clears the cart inside one unit of
work.  Stock and coupon writes are conditional and re-evaluated by the
store at this point, so a concurrent checkout that slipped in after
validation makes this one fail and roll back instead of overselling.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from storefront.application.dto import CheckoutLine, OrderDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import (
    CommitFailedError,
    CouponAlreadyUsedError,
    DomainException,
    EmptyCartError,
    InsufficientStockError,
    InvalidAddressError,
    InvalidCouponError,
    InvariantViolationError,
    ProductUnavailableError,
    ReservationExpiredError,
)
from storefront.domain.model.cart import utcnow
from storefront.domain.model.coupon import Coupon, normalize_code
from storefront.domain.model.inventory import InventoryMovement
from storefront.domain.model.order import (
    DEFAULT_DELAY_THRESHOLD_DAYS,
    Order,
    OrderItem,
    PaymentStatus,
)
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.reservation_manager import ReservationManager

logger = logging.getLogger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 10


def generate_order_number(now: datetime) -> str:
    """``ORD-YYYYMMDD-NNNN`` with a random four-digit suffix."""
    return f"ORD-{now:%Y%m%d}-{random.randrange(10000):04d}"


class CommitOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        number_generator: Callable[[datetime], str] = generate_order_number,
        max_number_attempts: int = MAX_ORDER_NUMBER_ATTEMPTS,
        delay_threshold_days: int = DEFAULT_DELAY_THRESHOLD_DAYS,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._number_generator = number_generator
        self._max_number_attempts = max_number_attempts
        self._delay_threshold_days = delay_threshold_days

    def handle(
        self,
        holder_id: str,
        lines: list[CheckoutLine],
        shipping_address_id: int | None,
        billing_address_id: int | None,
        coupon_code: str | None = None,
        shipping_cost: str | Decimal = "0",
        tax: str | Decimal = "0",
        client_total: str | Decimal | None = None,
        payment_status: PaymentStatus = PaymentStatus.PAID,
        payment_reference: str | None = None,
        notes: str | None = None,
    ) -> OrderDTO:
        """Commit the checkout, or raise without a partial write.

        ``client_total`` is only compared with the authoritative total
        (a mismatch is logged); the order always stores the total derived
        from server-side prices.
        """
        # Step 1: something to buy
        if not lines:
            raise EmptyCartError("Cart is empty")
        quantities = self._merge_lines(lines)
        shipping = Money.of(shipping_cost).rounded()
        tax_amount = Money.of(tax).rounded()
        now = self._clock()

        with self._uow as uow:
            # Step 2: both addresses must belong to the shopper
            self._check_addresses(uow, holder_id, shipping_address_id, billing_address_id)

            # Step 3: scarce products need a live lease held by this shopper
            manager = ReservationManager(uow.reservations, uow.cart)
            manager.remove_expired_reservations(now)
            self._check_reservations(uow, manager, holder_id, quantities, now)

            # Step 4: live stock, re-read now
            products = self._check_stock(uow, quantities)

            # Step 5: coupon still unused
            coupon = self._check_coupon(uow, coupon_code)

            # Step 6: authoritative amounts
            items = [
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    product_sku=product.sku,
                    quantity=Quantity(quantities[product.id]),
                    unit_price=product.price.rounded(),
                )
                for product in products
            ]
            subtotal = Money.zero()
            for item in items:
                subtotal = subtotal + item.line_total
            discount = coupon.discount_for(subtotal) if coupon else Money.zero()

            # Steps 7-9: the transaction
            try:
                order = Order.create(
                    order_number=self._next_order_number(uow.orders, now),
                    holder_id=holder_id,
                    items=items,
                    shipping_cost=shipping,
                    tax=tax_amount,
                    discount_amount=discount,
                    discount_percent=coupon.discount_percent if coupon else None,
                    coupon_code=coupon.code if coupon else None,
                    payment_status=payment_status,
                    shipping_address_id=shipping_address_id,
                    billing_address_id=billing_address_id,
                    payment_reference=payment_reference,
                    notes=notes,
                    now=now,
                )
                order.refresh_status(now, self._delay_threshold_days)
                uow.orders.add(order)
                self._decrement_stock(uow, order, holder_id, now)
                if coupon is not None:
                    self._consume_coupon(uow, coupon, order, holder_id, now)
                uow.cart.clear(holder_id)
                for product in products:
                    manager.release(holder_id, product.id)
                uow.commit()
            except InvariantViolationError:
                logger.critical(
                    "Invariant violated while committing order for %s; rolled back",
                    holder_id,
                    exc_info=True,
                )
                raise
            except DomainException as exc:
                logger.warning(
                    "Checkout for %s aborted and rolled back: %s", holder_id, exc.message
                )
                raise
            except Exception as exc:
                logger.exception("Unexpected failure committing order for %s", holder_id)
                raise CommitFailedError(
                    "The order could not be saved. Please try again."
                ) from exc

        if client_total is not None and Money.of(client_total).rounded() != order.total:
            logger.warning(
                "Client total %s for order %s differs from computed total %s",
                client_total, order.order_number, order.total,
            )
        logger.info(
            "Order %s committed for %s: %d item(s), total %s, status %s",
            order.order_number, holder_id, len(order.items), order.total,
            order.status.value,
        )
        return OrderDTO.from_domain(order)

    # --- Validation steps -----------------------------------------------------

    @staticmethod
    def _merge_lines(lines: list[CheckoutLine]) -> dict[str, int]:
        """Sum duplicate product lines, keeping first-seen order."""
        merged: dict[str, int] = {}
        for line in lines:
            Quantity(line.quantity)
            merged[line.product_id] = merged.get(line.product_id, 0) + line.quantity
        return merged

    @staticmethod
    def _check_addresses(
        uow: UnitOfWork,
        holder_id: str,
        shipping_address_id: int | None,
        billing_address_id: int | None,
    ) -> None:
        for label, address_id in (
            ("shipping", shipping_address_id),
            ("billing", billing_address_id),
        ):
            address = uow.addresses.get_by_id(address_id) if address_id is not None else None
            if address is None or not address.belongs_to(holder_id):
                raise InvalidAddressError(
                    f"Invalid {label} address", address_id=address_id
                )

    @staticmethod
    def _check_reservations(
        uow: UnitOfWork,
        manager: ReservationManager,
        holder_id: str,
        quantities: dict[str, int],
        now: datetime,
    ) -> None:
        for product_id in quantities:
            product = uow.products.get_by_id(product_id)
            if product is None or not product.is_scarce:
                continue
            if manager.holds_reservation(holder_id, product_id, now):
                continue
            uow.cart.delete_line(holder_id, product_id)
            uow.commit()
            raise ReservationExpiredError(
                f"The reservation for {product.name} has expired and the product "
                "was removed from your cart. Please try again if it is still available.",
                product_id=product.id,
                product_name=product.name,
            )

    @staticmethod
    def _check_stock(uow: UnitOfWork, quantities: dict[str, int]) -> list[Product]:
        products: list[Product] = []
        for product_id, quantity in quantities.items():
            product = uow.products.get_by_id(product_id)
            if product is None or not product.is_available:
                raise ProductUnavailableError(
                    f"Product {product.name if product else product_id} is not available",
                    product_id=product_id,
                )
            if quantity > product.stock_quantity:
                raise InsufficientStockError(
                    f"Quantity not available for {product.name}. "
                    f"Only {product.stock_quantity} left.",
                    product_id=product.id,
                    product_name=product.name,
                    available=product.stock_quantity,
                )
            products.append(product)
        return products

    @staticmethod
    def _check_coupon(uow: UnitOfWork, coupon_code: str | None) -> Coupon | None:
        if not coupon_code or not coupon_code.strip():
            return None
        coupon = uow.coupons.get_by_code(normalize_code(coupon_code))
        if coupon is None:
            raise InvalidCouponError("Invalid coupon", coupon_code=coupon_code)
        if coupon.is_used:
            raise CouponAlreadyUsedError(
                f"Coupon {coupon.code} has already been used", coupon_code=coupon.code
            )
        return coupon

    # --- Write steps ----------------------------------------------------------

    def _next_order_number(self, orders: OrderRepository, now: datetime) -> str:
        for _ in range(self._max_number_attempts):
            candidate = self._number_generator(now)
            if not orders.number_exists(candidate):
                return candidate
        raise CommitFailedError(
            f"Could not allocate a unique order number after "
            f"{self._max_number_attempts} attempts"
        )

    @staticmethod
    def _decrement_stock(
        uow: UnitOfWork,
        order: Order,
        holder_id: str,
        now: datetime,
    ) -> None:
        for item in order.items:
            remaining = uow.products.apply_stock_delta(item.product_id, -item.quantity.value)
            if remaining is None:
                # sold to someone else between validation and now
                current = uow.products.get_by_id(item.product_id)
                available = current.stock_quantity if current else 0
                raise InsufficientStockError(
                    f"Quantity not available for {item.product_name}. "
                    f"Only {available} left.",
                    product_id=item.product_id,
                    product_name=item.product_name,
                    available=available,
                )
            uow.movements.append(
                InventoryMovement.sale(
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                    quantity_after=remaining,
                    order_id=order.id,  # type: ignore[arg-type]
                    order_number=order.order_number,
                    holder_id=holder_id,
                    created_at=now,
                )
            )

    @staticmethod
    def _consume_coupon(
        uow: UnitOfWork,
        coupon: Coupon,
        order: Order,
        holder_id: str,
        now: datetime,
    ) -> None:
        if not uow.coupons.mark_used(coupon.id, order.id, holder_id, now):  # type: ignore[arg-type]
            raise CouponAlreadyUsedError(
                f"Coupon {coupon.code} has already been used", coupon_code=coupon.code
            )
