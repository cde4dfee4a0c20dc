from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from .payroll_errors import PeriodInvalid

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")

STATUS_PENDING = "pending"
STATUS_PAID = "paid"
STATUS_CANCELLED = "cancelled"

TYPE_DEDUCTION = "deduction"
TYPE_BONUS = "bonus"

MIN_YEAR = 2000
MAX_YEAR = 2100

# largest value a Numeric(10, 2) money column holds
MAX_AMOUNT = Decimal("99999999.99")


def to_money(x) -> Decimal:
    """
    Parse x (str/int/float/Decimal) into a 2-place Decimal.
    Raises InvalidOperation for anything that is not a finite number.
    """
    if x is None or (isinstance(x, str) and not x.strip()):
        raise InvalidOperation(f"not a number: {x!r}")
    d = Decimal(str(x).strip())
    if not d.is_finite():
        raise InvalidOperation(f"not a finite number: {x!r}")
    return d.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def money_float(x) -> Optional[float]:
    if x is None:
        return None
    return float(x)


def validate_period(month, year) -> tuple[int, int]:
    try:
        m, y = int(month), int(year)
    except (TypeError, ValueError):
        raise PeriodInvalid("month and year must be integers")
    if not 1 <= m <= 12:
        raise PeriodInvalid(f"month must be between 1 and 12 (got {m})")
    if not MIN_YEAR <= y <= MAX_YEAR:
        raise PeriodInvalid(f"year must be between {MIN_YEAR} and {MAX_YEAR} (got {y})")
    return m, y
