from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from .exceptions import ProductErrorCode, ProductException

DISCOUNT_RATE_MIN = Decimal("0")
DISCOUNT_RATE_MAX = Decimal("100")
# Matches the scale of the products.price column.
PRICE_SCALE = Decimal("0.01")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ProductException(ProductErrorCode.INVALID_PRICE)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ProductException(ProductErrorCode.INVALID_PRICE) from None


@dataclass(frozen=True)
class Price:
    """Strictly positive monetary amount. Immutable and compared by value.

    Amounts are rounded half-up to two decimal places before the positivity
    check, so ``0.004`` is rejected and ``10.005`` becomes ``10.01``.
    """

    amount: Decimal

    def __post_init__(self):
        if self.amount is None:
            raise ProductException(ProductErrorCode.INVALID_PRICE)
        amount = _to_decimal(self.amount)
        if amount.is_finite():
            try:
                amount = amount.quantize(PRICE_SCALE, rounding=ROUND_HALF_UP)
            except InvalidOperation:
                raise ProductException(ProductErrorCode.INVALID_PRICE) from None
        if not amount.is_finite() or amount <= 0:
            raise ProductException(
                ProductErrorCode.INVALID_PRICE,
                f"Price must be greater than zero, got {amount}",
            )
        object.__setattr__(self, "amount", amount)

    @classmethod
    def of(cls, amount: Union[Decimal, int, float, str, None]) -> "Price":
        return cls(amount)  # type: ignore[arg-type]

    def apply_discount(self, rate: Union[Decimal, int, float, str]) -> "Price":
        """Return a new price reduced by ``rate`` percent.

        A rate of 100 yields a zero amount and therefore fails price
        validation. The result is rounded to the same scale as any price.
        """
        if rate is None:
            raise ProductException(ProductErrorCode.INVALID_DISCOUNT_RATE)
        try:
            rate_value = _to_decimal(rate)
        except ProductException:
            raise ProductException(ProductErrorCode.INVALID_DISCOUNT_RATE) from None
        if rate_value < DISCOUNT_RATE_MIN or rate_value > DISCOUNT_RATE_MAX:
            raise ProductException(
                ProductErrorCode.INVALID_DISCOUNT_RATE,
                f"Discount rate must be between 0 and 100, got {rate_value}",
            )
        discount = self.amount * rate_value / Decimal("100")
        return Price.of(self.amount - discount)

    def is_greater_than(self, other: "Price") -> bool:
        return self.amount > other.amount

    def is_less_than(self, other: "Price") -> bool:
        return self.amount < other.amount

    def __str__(self) -> str:
        return str(self.amount)
