"""Request and response bodies for the HTTP adapter.

Fields are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests -----------------------------------------------------------------


class CartLineRequest(ApiModel):
    """Set a cart line; a quantity of 0 or less removes it."""
    product_id: str = Field(min_length=1)
    quantity: int
    price: Decimal | None = Field(default=None, ge=0)
    require_existing: bool = False


class CheckoutLineRequest(ApiModel):
    product_id: str = Field(min_length=1)
    quantity: int


class CheckoutRequest(ApiModel):
    lines: list[CheckoutLineRequest] = Field(default_factory=list)
    shipping_address_id: int | None = None
    billing_address_id: int | None = None
    coupon_code: str | None = None
    shipping_cost: Decimal = Field(default=Decimal("0"), ge=0)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    total: Decimal | None = None
    payment_status: Literal["PENDING", "PAID"] = "PAID"
    payment_reference: str | None = None
    notes: str | None = None


# --- Responses ----------------------------------------------------------------


class CartLineResponse(ApiModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: str
    snapshot_price: str | None
    stock_quantity: int
    reservation_expires_at: str | None


class CartResponse(ApiModel):
    holder_id: str
    lines: list[CartLineResponse]
    removed: list[str]


class CartLineResult(ApiModel):
    removed: bool
    line: CartLineResponse | None = None


class OrderItemResponse(ApiModel):
    product_id: str
    product_name: str
    product_sku: str | None
    quantity: int
    unit_price: str
    line_total: str


class OrderResponse(ApiModel):
    id: int
    order_number: str
    holder_id: str
    status: str
    payment_status: str
    items: list[OrderItemResponse]
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


class SweptLine(ApiModel):
    holder_id: str
    product_id: str


class CleanupResponse(ApiModel):
    removed: int
    items: list[SweptLine]
