"""SQLAlchemy-backed implementation of OrderRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.domain.model.order import Order, OrderItem, OrderStatus, PaymentStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.models import OrderItemRow, OrderRow


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        row = self._session.get(OrderRow, order_id)
        return self._to_domain(row) if row is not None else None

    def number_exists(self, order_number: str) -> bool:
        found = self._session.scalar(
            select(OrderRow.id).where(OrderRow.order_number == order_number)
        )
        return found is not None

    def list_for_holder(self, holder_id: str) -> list[Order]:
        rows = self._session.scalars(
            select(OrderRow)
            .where(OrderRow.holder_id == holder_id)
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
        )
        return [self._to_domain(row) for row in rows]

    def add(self, order: Order) -> None:
        row = OrderRow(
            order_number=order.order_number,
            holder_id=order.holder_id,
            currency=order.total.currency,
            subtotal=order.subtotal.amount,
            discount_amount=order.discount_amount.amount,
            discount_percent=order.discount_percent,
            coupon_code=order.coupon_code,
            shipping_cost=order.shipping_cost.amount,
            tax=order.tax.amount,
            total=order.total.amount,
            shipping_address_id=order.shipping_address_id,
            billing_address_id=order.billing_address_id,
            payment_reference=order.payment_reference,
            notes=order.notes,
            created_at=order.created_at,
            items=[
                OrderItemRow(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    product_sku=item.product_sku,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price.amount,
                )
                for item in order.items
            ],
        )
        self._apply_state(row, order)
        self._session.add(row)
        self._session.flush()
        order.id = row.id

    def save(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        if row is None:
            raise LookupError(f"Order {order.id} does not exist")
        self._apply_state(row, order)
        self._session.flush()

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _apply_state(row: OrderRow, order: Order) -> None:
        """Copy the fields that change after creation."""
        row.status = order.status.value
        row.payment_status = order.payment_status.value
        row.tracking_number = order.tracking_number
        row.shipping_carrier = order.shipping_carrier
        row.confirmed_at = order.confirmed_at
        row.shipped_at = order.shipped_at
        row.delivered_at = order.delivered_at
        row.notes = order.notes

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        currency = row.currency

        def money(value) -> Money:
            return Money(Decimal(value), currency)

        items = [
            OrderItem(
                product_id=i.product_id,
                product_name=i.product_name,
                product_sku=i.product_sku,
                quantity=Quantity(i.quantity),
                unit_price=money(i.unit_price),
            )
            for i in row.items
        ]
        return Order(
            id=row.id,
            order_number=row.order_number,
            holder_id=row.holder_id,
            items=items,
            subtotal=money(row.subtotal),
            discount_amount=money(row.discount_amount),
            shipping_cost=money(row.shipping_cost),
            tax=money(row.tax),
            total=money(row.total),
            payment_status=PaymentStatus(row.payment_status),
            status=OrderStatus(row.status),
            discount_percent=(
                Decimal(row.discount_percent) if row.discount_percent is not None else None
            ),
            coupon_code=row.coupon_code,
            shipping_address_id=row.shipping_address_id,
            billing_address_id=row.billing_address_id,
            tracking_number=row.tracking_number,
            shipping_carrier=row.shipping_carrier,
            payment_reference=row.payment_reference,
            notes=row.notes,
            created_at=row.created_at,
            confirmed_at=row.confirmed_at,
            shipped_at=row.shipped_at,
            delivered_at=row.delivered_at,
        )
