"""SQLAlchemy-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.models import ProductRow


class SqlProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        row = self._session.get(ProductRow, product_id, populate_existing=True)
        return self._to_domain(row) if row is not None else None

    def get_by_name(self, name: str) -> Product | None:
        row = self._session.scalars(
            select(ProductRow).where(func.lower(ProductRow.name) == name.strip().lower())
        ).first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        rows = self._session.scalars(select(ProductRow).order_by(ProductRow.name))
        return [self._to_domain(row) for row in rows]

    def add(self, product: Product) -> None:
        self._session.add(
            ProductRow(
                id=product.id,
                name=product.name,
                sku=product.sku,
                price=product.price.amount,
                currency=product.price.currency,
                stock_quantity=product.stock_quantity,
                in_stock=product.in_stock,
                active=product.active,
                low_stock_threshold=product.low_stock_threshold,
            )
        )
        self._session.flush()

    def save(self, product: Product) -> None:
        row = self._session.get(ProductRow, product.id)
        if row is None:
            raise LookupError(f"Product {product.id} does not exist")
        row.name = product.name
        row.sku = product.sku
        row.price = product.price.amount
        row.currency = product.price.currency
        row.active = product.active
        row.low_stock_threshold = product.low_stock_threshold
        self._session.flush()

    # --- Conditional stock writes ---------------------------------------------

    def apply_stock_delta(self, product_id: str, delta: int) -> int | None:
        # SET expressions see the pre-update row, so in_stock uses the same sum
        result = self._session.execute(
            update(ProductRow)
            .where(
                ProductRow.id == product_id,
                ProductRow.stock_quantity + delta >= 0,
            )
            .values(
                stock_quantity=ProductRow.stock_quantity + delta,
                in_stock=ProductRow.stock_quantity + delta > 0,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return self._session.scalar(
            select(ProductRow.stock_quantity).where(ProductRow.id == product_id)
        )

    def compare_and_set_stock(self, product_id: str, expected: int, new: int) -> bool:
        result = self._session.execute(
            update(ProductRow)
            .where(
                ProductRow.id == product_id,
                ProductRow.stock_quantity == expected,
            )
            .values(stock_quantity=new, in_stock=new > 0)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(Decimal(row.price), row.currency),
            stock_quantity=row.stock_quantity,
            active=row.active,
            sku=row.sku,
            low_stock_threshold=row.low_stock_threshold,
        )
