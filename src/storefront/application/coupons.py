"""Application services: issue and validate coupons."""

from __future__ import annotations

import logging
import secrets
import string
from collections.abc import Callable
from decimal import Decimal, InvalidOperation

from storefront.application.dto import CouponDTO
from storefront.application.unit_of_work import UnitOfWork
from storefront.domain.exceptions import (
    CommitFailedError,
    CouponAlreadyUsedError,
    InvalidCouponError,
    ValidationError,
)
from storefront.domain.model.coupon import Coupon, normalize_code

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
MAX_BATCH = 100
MAX_CODE_ATTEMPTS = 10


def generate_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def _coupon_dto(coupon: Coupon) -> CouponDTO:
    return CouponDTO(
        code=coupon.code,
        discount_percent=f"{Decimal(coupon.discount_percent):f}",
        is_used=coupon.is_used,
    )


class IssueCouponsHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        code_generator: Callable[[], str] = generate_code,
    ) -> None:
        self._uow = uow
        self._code_generator = code_generator

    def handle(self, count: int, discount_percent: str | int) -> list[CouponDTO]:
        """Issue ``count`` one-shot coupons, all with the same discount."""
        if not 1 <= count <= MAX_BATCH:
            raise ValidationError(f"Count must be between 1 and {MAX_BATCH}")
        try:
            percent = Decimal(str(discount_percent))
        except InvalidOperation:
            raise ValidationError(f"Invalid discount percent: {discount_percent}") from None
        if not percent.is_finite() or not 1 <= percent <= 100:
            raise ValidationError(
                f"Discount percent must be between 1 and 100, got {discount_percent}"
            )

        issued: list[Coupon] = []
        with self._uow as uow:
            taken: set[str] = set()
            for _ in range(count):
                code = self._unique_code(uow, taken)
                taken.add(code)
                coupon = Coupon(code=code, discount_percent=percent)
                uow.coupons.add(coupon)
                issued.append(coupon)
            uow.commit()

        logger.info("Issued %d coupon(s) at %s%%", len(issued), percent)
        return [_coupon_dto(c) for c in issued]

    def _unique_code(self, uow: UnitOfWork, taken: set[str]) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = normalize_code(self._code_generator())
            if code not in taken and uow.coupons.get_by_code(code) is None:
                return code
        raise CommitFailedError(
            f"Could not generate a unique coupon code after {MAX_CODE_ATTEMPTS} attempts"
        )


class ValidateCouponHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, code: str) -> CouponDTO:
        if not code or not code.strip():
            raise InvalidCouponError("Coupon code is required")
        with self._uow as uow:
            coupon = uow.coupons.get_by_code(normalize_code(code))
        if coupon is None:
            raise InvalidCouponError("Invalid coupon", coupon_code=code)
        if coupon.is_used:
            raise CouponAlreadyUsedError(
                f"Coupon {coupon.code} has already been used", coupon_code=coupon.code
            )
        return _coupon_dto(coupon)
