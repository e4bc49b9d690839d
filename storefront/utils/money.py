from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

CENTS = Decimal("0.01")

def to_decimal(value) -> Decimal:
    # str() keeps float prices such as 19.99 from turning into 19.989999...
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def line_total(price, quantity: int) -> Decimal:
    return to_decimal(price) * quantity

def calculate_total(lines: Iterable[Tuple[object, int]]) -> Decimal:
    """Exact sum of price * quantity over (price, quantity) pairs."""
    total = Decimal("0")
    for price, quantity in lines:
        total += line_total(price, quantity)
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)

def to_minor_units(amount) -> int:
    """Decimal currency amount to integer minor units, rounding half up."""
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
