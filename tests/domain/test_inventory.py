"""Unit tests for the stock ledger and the Product stock rules."""

import pytest

from storefront.domain.exceptions import InvariantViolationError, ValidationError
from storefront.domain.model.inventory import InventoryMovement, MovementType
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money


class TestInventoryMovement:

    def test_sale_factory_records_negative_delta(self):
        movement = InventoryMovement.sale(
            product_id="P",
            quantity=2,
            quantity_after=3,
            order_id=1,
            order_number="ORD-20240301-0001",
        )
        assert movement.type is MovementType.SALE
        assert movement.quantity == -2
        assert movement.quantity_after == 3
        assert movement.reason == "Order ORD-20240301-0001"

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="cannot be zero"):
            InventoryMovement("P", MovementType.ADJUSTMENT, 0, 5, "noop")

    def test_positive_sale_rejected(self):
        with pytest.raises(ValidationError, match="negative quantity"):
            InventoryMovement("P", MovementType.SALE, 2, 5, "bogus")

    def test_negative_resulting_stock_is_an_invariant_violation(self):
        with pytest.raises(InvariantViolationError):
            InventoryMovement("P", MovementType.SALE, -2, -1, "oversell")


class TestProductStock:

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Product(id="1", name="Brake pad", price=Money.of("10"), stock_quantity=-1)

    def test_in_stock_follows_quantity(self):
        assert not Product(id="1", name="Brake pad", price=Money.of("10")).in_stock
        assert Product(id="1", name="Brake pad", price=Money.of("10"), stock_quantity=3).in_stock

    def test_inactive_product_is_not_available(self):
        product = Product(id="1", name="Brake pad", price=Money.of("10"), stock_quantity=3, active=False)
        assert not product.is_available

    def test_only_the_last_unit_is_scarce(self):
        assert Product(id="1", name="Mirror", price=Money.of("10"), stock_quantity=1).is_scarce
        assert not Product(id="1", name="Mirror", price=Money.of("10"), stock_quantity=2).is_scarce
        assert not Product(id="1", name="Mirror", price=Money.of("10"), stock_quantity=0).is_scarce

    def test_price_must_be_positive(self):
        product = Product(id="1", name="Mirror", price=Money.of("10"))
        with pytest.raises(ValidationError, match="greater than zero"):
            product.update_price(Money.zero())
