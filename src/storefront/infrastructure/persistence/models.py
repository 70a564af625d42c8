"""SQLAlchemy table mappings.

Rows are plain persistence records; the repositories translate them to
and from the domain model.  Stock, lease and coupon rules that must
survive concurrent writers are also declared here as constraints.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from storefront.infrastructure.persistence.database import Base, UTCDateTime


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False, unique=True, index=True)
    sku = Column(String(64), nullable=True, unique=True)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    stock_quantity = Column(Integer, nullable=False, default=0)
    in_stock = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)
    low_stock_threshold = Column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )


class CartLineRow(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    holder_id = Column(String(64), nullable=False, index=True)
    product_id = Column(String(64), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    snapshot_price = Column(Numeric(12, 2), nullable=True)
    reservation_expires_at = Column(UTCDateTime, nullable=True, index=True)
    created_at = Column(UTCDateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("holder_id", "product_id", name="uq_cart_lines_holder_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_lines_quantity_positive"),
    )


class ReservationRow(Base):
    """At most one row per product: the primary key is the lease."""

    __tablename__ = "reservations"

    product_id = Column(String(64), ForeignKey("products.id"), primary_key=True)
    holder_id = Column(String(64), nullable=False, index=True)
    expires_at = Column(UTCDateTime, nullable=False, index=True)


class AddressRow(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    street = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(2), nullable=False, default="IT")


class OrderRow(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(32), nullable=False, unique=True)
    holder_id = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    discount_percent = Column(Numeric(5, 2), nullable=True)
    coupon_code = Column(String(32), nullable=True)
    shipping_cost = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    shipping_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=True)
    billing_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=True)
    tracking_number = Column(String(100), nullable=True)
    shipping_carrier = Column(String(50), nullable=True)
    payment_reference = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, index=True)
    confirmed_at = Column(UTCDateTime, nullable=True)
    shipped_at = Column(UTCDateTime, nullable=True)
    delivered_at = Column(UTCDateTime, nullable=True)

    items = relationship(
        "OrderItemRow",
        cascade="all, delete-orphan",
        order_by="OrderItemRow.id",
        lazy="selectin",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(64), nullable=False)
    product_name = Column(String(200), nullable=False)
    product_sku = Column(String(64), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )


class CouponRow(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(32), nullable=False, unique=True, index=True)
    discount_percent = Column(Numeric(5, 2), nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(UTCDateTime, nullable=True)
    used_by_order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    used_by_holder_id = Column(String(64), nullable=True)


class MovementRow(Base):
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(64), ForeignKey("products.id"), nullable=False)
    type = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False)
    quantity_after = Column(Integer, nullable=False)
    reason = Column(String(255), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    holder_id = Column(String(64), nullable=True)
    created_at = Column(UTCDateTime, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity <> 0", name="ck_movements_quantity_non_zero"),
        CheckConstraint("quantity_after >= 0", name="ck_movements_after_non_negative"),
        Index("ix_movements_product_created", "product_id", "created_at"),
        Index("ix_movements_type_created", "type", "created_at"),
    )
