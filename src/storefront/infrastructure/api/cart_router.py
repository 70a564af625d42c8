from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from storefront.application.remove_cart_line import RemoveCartLineHandler
from storefront.application.set_cart_line import SetCartLineHandler
from storefront.application.show_cart import ShowCartHandler
from storefront.application.sweep_reservations import SweepReservationsHandler
from storefront.application.unit_of_work import UnitOfWork
from storefront.infrastructure.api import schemas
from storefront.infrastructure.api.dependencies import (
    get_app_settings,
    get_clock,
    get_holder_id,
    get_uow,
)
from storefront.infrastructure.config import Settings

router = APIRouter(
    prefix="/cart",
    tags=["Cart"],
)


@router.get("", response_model=schemas.CartResponse)
def show_cart(
    holder_id: str = Depends(get_holder_id),
    uow: UnitOfWork = Depends(get_uow),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Return the cart after dropping lines that can no longer be bought."""
    return ShowCartHandler(uow, clock).handle(holder_id)


@router.put("/line", response_model=schemas.CartLineResult)
def set_cart_line(
    payload: schemas.CartLineRequest,
    holder_id: str = Depends(get_holder_id),
    uow: UnitOfWork = Depends(get_uow),
    clock: Callable[[], datetime] = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
):
    """Add a product or change its quantity.

    A product with a single unit left is leased to this shopper for the
    reservation TTL; another shopper holding it answers 409.
    """
    handler = SetCartLineHandler(uow, clock, reservation_ttl=settings.reservation_ttl)
    line = handler.handle(
        holder_id,
        payload.product_id,
        payload.quantity,
        unit_price=payload.price,
        require_existing=payload.require_existing,
    )
    return {"removed": line is None, "line": line}


@router.delete("/line", response_model=schemas.CartLineResult)
def remove_cart_line(
    product_id: str = Query(..., alias="productId", min_length=1),
    holder_id: str = Depends(get_holder_id),
    uow: UnitOfWork = Depends(get_uow),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Remove a product from the cart.  Removing a missing line is not an error."""
    removed = RemoveCartLineHandler(uow, clock).handle(holder_id, product_id)
    return {"removed": removed}


@router.post("/cleanup", response_model=schemas.CleanupResponse)
def cleanup_reservations(
    uow: UnitOfWork = Depends(get_uow),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Sweep expired reservations for every shopper."""
    result = SweepReservationsHandler(uow, clock).handle()
    return {
        "removed": result.removed,
        "items": [
            {"holder_id": holder_id, "product_id": product_id}
            for holder_id, product_id in result.items
        ],
    }
