from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, Depends, status

from storefront.application.commit_order import CommitOrderHandler
from storefront.application.dto import CheckoutLine
from storefront.application.show_order import ListOrdersHandler, ShowOrderHandler
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.model.order import PaymentStatus
from storefront.infrastructure.api import schemas
from storefront.infrastructure.api.dependencies import (
    get_app_settings,
    get_clock,
    get_holder_id,
    get_uow,
)
from storefront.infrastructure.config import Settings

router = APIRouter(tags=["Orders"])


@router.post("/checkout", response_model=schemas.OrderResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: schemas.CheckoutRequest,
    holder_id: str = Depends(get_holder_id),
    uow: UnitOfWork = Depends(get_uow),
    clock: Callable[[], datetime] = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
):
    """Commit the cart as an order.

    Amounts are recomputed from server-side prices; ``total`` is only
    compared with the result.
    """
    handler = CommitOrderHandler(
        uow,
        clock,
        max_number_attempts=settings.order_number_max_attempts,
        delay_threshold_days=settings.delay_threshold_days,
    )
    return handler.handle(
        holder_id=holder_id,
        lines=[CheckoutLine(line.product_id, line.quantity) for line in payload.lines],
        shipping_address_id=payload.shipping_address_id,
        billing_address_id=payload.billing_address_id,
        coupon_code=payload.coupon_code,
        shipping_cost=payload.shipping_cost,
        tax=payload.tax,
        client_total=payload.total,
        payment_status=PaymentStatus(payload.payment_status),
        payment_reference=payload.payment_reference,
        notes=payload.notes,
    )


@router.get("/orders", response_model=list[schemas.OrderResponse])
def list_orders(
    holder_id: str = Depends(get_holder_id),
    uow: UnitOfWork = Depends(get_uow),
    clock: Callable[[], datetime] = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
):
    return ListOrdersHandler(uow, clock, settings.delay_threshold_days).handle(holder_id)


@router.get("/orders/{order_id}", response_model=schemas.OrderResponse)
def show_order(
    order_id: int,
    holder_id: str = Depends(get_holder_id),
    uow: UnitOfWork = Depends(get_uow),
    clock: Callable[[], datetime] = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
):
    """Return one of the caller's orders with its status re-derived."""
    return ShowOrderHandler(uow, clock, settings.delay_threshold_days).handle(
        order_id, holder_id=holder_id
    )
