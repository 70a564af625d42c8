"""Order aggregate: the durable result of a checkout.

The Order owns its item snapshots.  Once created, only payment,
shipping and the explicit admin actions (cancel, refund) mutate it, and
every mutation ends by re-deriving ``status`` from the stored facts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import utcnow
from storefront.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELAYED = "DELAYED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a product at commit time.

    Name, SKU and price are copied so later catalog edits don't rewrite
    order history.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at commit time
    product_sku: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
DEFAULT_DELAY_THRESHOLD_DAYS = 3


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it computes and
    reconciles the totals.  The ``__init__`` is intentionally simple so
    the repository can reconstitute persisted orders without
    re-validating.
    """

    id: int | None
    order_number: str
    holder_id: str
    items: list[OrderItem]
    subtotal: Money
    discount_amount: Money
    shipping_cost: Money
    tax: Money
    total: Money
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = OrderStatus.PENDING
    discount_percent: Decimal | None = None
    coupon_code: str | None = None
    shipping_address_id: int | None = None
    billing_address_id: int | None = None
    tracking_number: str | None = None
    shipping_carrier: str | None = None
    payment_reference: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    confirmed_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        holder_id: str,
        items: list[OrderItem],
        shipping_cost: Money,
        tax: Money,
        discount_amount: Money | None = None,
        discount_percent: Decimal | None = None,
        coupon_code: str | None = None,
        payment_status: PaymentStatus = PaymentStatus.PAID,
        shipping_address_id: int | None = None,
        billing_address_id: int | None = None,
        payment_reference: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Create a new order, computing the authoritative totals."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        now = now or utcnow()
        subtotal = Money.zero()
        for item in items:
            subtotal = subtotal + item.line_total
        subtotal = subtotal.rounded()
        discount = (discount_amount or Money.zero()).rounded()
        if discount > subtotal:
            raise ValidationError(
                f"Discount {discount} exceeds order subtotal {subtotal}"
            )
        shipping_cost = shipping_cost.rounded()
        tax = tax.rounded()
        total = (subtotal - discount + shipping_cost + tax).rounded()

        order = Order(
            id=None,
            order_number=order_number,
            holder_id=holder_id,
            items=list(items),
            subtotal=subtotal,
            discount_amount=discount,
            shipping_cost=shipping_cost,
            tax=tax,
            total=total,
            payment_status=payment_status,
            discount_percent=discount_percent,
            coupon_code=coupon_code,
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id,
            payment_reference=payment_reference,
            notes=notes,
            created_at=now,
        )
        if payment_status is PaymentStatus.PAID:
            order.confirmed_at = now
        order.assert_totals_reconcile()
        order.refresh_status(now)
        return order

    # --- State transitions ----------------------------------------------------

    def record_payment(self, payment_status: PaymentStatus, now: datetime) -> None:
        """Apply a payment outcome reported by the gateway."""
        self._assert_not_terminal("record a payment for")
        self.payment_status = payment_status
        if payment_status is PaymentStatus.PAID and self.confirmed_at is None:
            self.confirmed_at = now
        elif payment_status is PaymentStatus.FAILED and self.shipped_at is None:
            self.status = OrderStatus.CANCELLED
        self.refresh_status(now)

    def attach_tracking(
        self,
        tracking_number: str,
        now: datetime,
        carrier: str | None = None,
    ) -> None:
        """Attach a carrier tracking number; the first one marks shipment."""
        self._assert_not_terminal("ship")
        if not tracking_number or not tracking_number.strip():
            raise ValidationError("Tracking number is required")
        self.tracking_number = tracking_number.strip()
        if carrier is not None:
            self.shipping_carrier = carrier.strip() or None
        if self.status not in (OrderStatus.SHIPPED, OrderStatus.DELIVERED) and self.shipped_at is None:
            self.shipped_at = now
        self.refresh_status(now)

    def mark_delivered(self, now: datetime) -> None:
        self._assert_not_terminal("deliver")
        if self.delivered_at is None:
            self.delivered_at = now
        self.refresh_status(now)

    def cancel(self) -> None:
        if self.status is OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        if self.status in (OrderStatus.DELIVERED, OrderStatus.REFUNDED):
            raise ValidationError(f"Cannot cancel order in {self.status.value} status")
        self.status = OrderStatus.CANCELLED

    def refund(self) -> None:
        if self.status is OrderStatus.REFUNDED:
            raise ValidationError("Order is already refunded")
        if self.payment_status is not PaymentStatus.PAID:
            raise ValidationError(
                f"Cannot refund order with payment status {self.payment_status.value}"
            )
        self.payment_status = PaymentStatus.REFUNDED
        self.status = OrderStatus.REFUNDED

    def refresh_status(
        self,
        now: datetime,
        delay_threshold_days: int = DEFAULT_DELAY_THRESHOLD_DAYS,
    ) -> bool:
        """Re-derive the cached ``status``.  Returns True if it changed."""
        from storefront.domain.service.order_status_resolver import resolve_status

        resolved = resolve_status(self, now, delay_threshold_days)
        if resolved is self.status:
            return False
        self.status = resolved
        return True

    # --- Invariants -----------------------------------------------------------

    def assert_totals_reconcile(self) -> None:
        expected = self.subtotal - self.discount_amount + self.shipping_cost + self.tax
        if expected.amount != self.total.amount:
            raise ValidationError(
                f"Order total {self.total} does not reconcile with "
                f"subtotal - discount + shipping + tax = {expected}"
            )

    def _assert_not_terminal(self, action: str) -> None:
        if self.status in TERMINAL_STATUSES:
            raise ValidationError(
                f"Cannot {action} order in {self.status.value} status"
            )
