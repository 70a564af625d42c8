"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP adapters and the application layer
without exposing domain internals to the outside world.  Money is
carried as a plain ``"12.50"`` string so adapters can render or
serialise it without knowing about ``Money``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from storefront.domain.model.cart import CartLine
from storefront.domain.model.inventory import InventoryMovement
from storefront.domain.model.order import Order
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money


def _amount(money: Money | None) -> str | None:
    return None if money is None else money.plain()


def _iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class CheckoutLine:
    """Input: one line the shopper is checking out."""

    product_id: str
    quantity: int


# --- Cart ---------------------------------------------------------------------


@dataclass(frozen=True)
class CartLineDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # current catalog price
    snapshot_price: str | None
    stock_quantity: int
    reservation_expires_at: str | None

    @staticmethod
    def from_domain(line: CartLine, product: Product) -> CartLineDTO:
        return CartLineDTO(
            product_id=line.product_id,
            product_name=product.name,
            quantity=line.quantity,
            unit_price=_amount(product.price),  # type: ignore[arg-type]
            snapshot_price=_amount(line.snapshot_price),
            stock_quantity=product.stock_quantity,
            reservation_expires_at=_iso(line.reservation_expires_at),
        )


@dataclass(frozen=True)
class CartDTO:
    holder_id: str
    lines: list[CartLineDTO]
    removed: list[str] = field(default_factory=list)  # names of dropped products


@dataclass(frozen=True)
class SweepResultDTO:
    removed: int
    items: list[tuple[str, str]]  # (holder_id, product_id)


# --- Orders -------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemDTO:
    product_id: str
    product_name: str
    product_sku: str | None
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    id: int
    order_number: str
    holder_id: str
    status: str
    payment_status: str
    items: list[OrderItemDTO]
    subtotal: str
    discount_amount: str
    shipping_cost: str
    tax: str
    total: str
    coupon_code: str | None
    tracking_number: str | None
    shipping_carrier: str | None
    created_at: str
    confirmed_at: str | None
    shipped_at: str | None
    delivered_at: str | None

    @staticmethod
    def from_domain(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            order_number=order.order_number,
            holder_id=order.holder_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            items=[
                OrderItemDTO(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    product_sku=item.product_sku,
                    quantity=item.quantity.value,
                    unit_price=_amount(item.unit_price),  # type: ignore[arg-type]
                    line_total=_amount(item.line_total),  # type: ignore[arg-type]
                )
                for item in order.items
            ],
            subtotal=_amount(order.subtotal),  # type: ignore[arg-type]
            discount_amount=_amount(order.discount_amount),  # type: ignore[arg-type]
            shipping_cost=_amount(order.shipping_cost),  # type: ignore[arg-type]
            tax=_amount(order.tax),  # type: ignore[arg-type]
            total=_amount(order.total),  # type: ignore[arg-type]
            coupon_code=order.coupon_code,
            tracking_number=order.tracking_number,
            shipping_carrier=order.shipping_carrier,
            created_at=order.created_at.isoformat(),
            confirmed_at=_iso(order.confirmed_at),
            shipped_at=_iso(order.shipped_at),
            delivered_at=_iso(order.delivered_at),
        )


# --- Inventory ----------------------------------------------------------------


@dataclass(frozen=True)
class MovementDTO:
    id: int
    product_id: str
    type: str
    quantity: int
    quantity_after: int
    reason: str
    order_id: int | None
    created_at: str

    @staticmethod
    def from_domain(movement: InventoryMovement) -> MovementDTO:
        return MovementDTO(
            id=movement.id,  # type: ignore[arg-type]
            product_id=movement.product_id,
            type=movement.type.value,
            quantity=movement.quantity,
            quantity_after=movement.quantity_after,
            reason=movement.reason,
            order_id=movement.order_id,
            created_at=movement.created_at.isoformat(),
        )


@dataclass(frozen=True)
class MovementStatsDTO:
    type: str
    total_quantity: int
    count: int


@dataclass(frozen=True)
class MovementPageDTO:
    movements: list[MovementDTO]
    total: int
    limit: int
    skip: int
    statistics: list[MovementStatsDTO]

    @property
    def has_more(self) -> bool:
        return self.skip + self.limit < self.total


@dataclass(frozen=True)
class StockLevelDTO:
    product_id: str
    product_name: str
    stock_quantity: int
    in_stock: bool


@dataclass(frozen=True)
class StockAlertDTO:
    product_id: str
    product_name: str
    stock_quantity: int
    threshold: int
    level: str  # "CRITICAL" | "LOW"


@dataclass(frozen=True)
class StockPredictionDTO:
    product_id: str
    product_name: str
    sku: str | None
    current_stock: int
    total_sold: int
    daily_average: float
    days_until_out_of_stock: int
    predicted_out_of_stock_date: str
    risk_level: str


@dataclass(frozen=True)
class CouponDTO:
    code: str
    discount_percent: str
    is_used: bool
