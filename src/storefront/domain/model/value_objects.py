"""Money and Quantity.

Both are immutable and compared by value; construction validates, so
an instance that exists can always take part in a price calculation.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from storefront.domain.exceptions import ValidationError

CURRENCY = "EUR"
CENTS = Decimal("0.01")
_SYMBOLS = {"EUR": "€"}


@total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative amount in one currency.

    Arithmetic keeps full Decimal precision.  ``rounded()`` (half-up to
    the cent) is applied wherever an amount is stored or shown, which is
    what lets an order total reconcile exactly with its parts.
    """

    amount: Decimal
    currency: str = CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    @classmethod
    def of(cls, amount: str | int | Decimal) -> Money:
        """Parse user or wire input (``"12.5"``, ``12``, ``Decimal``)."""
        try:
            return cls(Decimal(str(amount).strip()))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @classmethod
    def zero(cls) -> Money:
        return cls(Decimal("0.00"))

    # --- Arithmetic -----------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._same_currency(other).amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        difference = self.amount - self._same_currency(other).amount
        if difference < 0:
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(difference, self.currency)

    def __mul__(self, units: int) -> Money:
        if isinstance(units, bool) or not isinstance(units, int):
            raise TypeError(f"Money can only be multiplied by a unit count, got {units!r}")
        return Money(self.amount * units, self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._same_currency(other).amount

    def rounded(self) -> Money:
        return Money(self.amount.quantize(CENTS, rounding=ROUND_HALF_UP), self.currency)

    def percent(self, rate: Decimal | int) -> Money:
        """``rate`` percent of this amount, rounded to the cent."""
        return Money(self.amount * Decimal(rate) / 100, self.currency).rounded()

    # --- Display --------------------------------------------------------------

    def plain(self) -> str:
        """Two decimals and no symbol, e.g. ``"12.50"``."""
        return f"{self.rounded().amount:.2f}"

    def __str__(self) -> str:
        symbol = _SYMBOLS.get(self.currency, f"{self.currency} ")
        return f"{symbol}{self.plain()}"

    def _same_currency(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return other


@dataclass(frozen=True)
class Quantity:
    """Units of one product on an order line; at least one."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value < 1:
            raise ValidationError(f"Quantity must be positive, got {self.value}")

    def __str__(self) -> str:
        return str(self.value)
