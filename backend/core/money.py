# core/money.py
"""
Decimal helpers shared by order totals, derived documents, payments and
budgets. Binary floating point never touches money.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation


MONEY_Q = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value, default=None) -> Decimal:
    """
    Coerce value (str, int, Decimal) to Decimal.

    Floats are converted through str() so that 0.1 becomes Decimal("0.1")
    rather than its binary expansion. Raises ValueError on garbage.
    """
    if value is None or value == "":
        if default is None:
            raise ValueError("Amount is required.")
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValueError(f"Invalid amount: {value!r}")


def round_money(value) -> Decimal:
    """Round half-up to two decimal places."""
    return to_decimal(value).quantize(MONEY_Q, rounding=ROUND_HALF_UP)
