"""Unit tests for the one-shot Coupon."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.coupon import Coupon
from storefront.domain.model.value_objects import Money


def test_code_is_normalised():
    assert Coupon(code="  save10 ", discount_percent=Decimal("10")).code == "SAVE10"


@pytest.mark.parametrize("percent", ["0", "0.5", "-5", "100.01"])
def test_percent_out_of_range_rejected(percent):
    with pytest.raises(ValidationError, match="Discount percent"):
        Coupon(code="BAD", discount_percent=Decimal(percent))


def test_discount_for_subtotal():
    coupon = Coupon(code="SAVE10", discount_percent=Decimal("10"))
    assert coupon.discount_for(Money.of("25.00")) == Money.of("2.50")

