# trading/totals.py
"""
Order/document money math.

Per line, with rounding to 0.01 (half-up) applied once per value:
    subtotal   = round(quantity * unit_price)
    tax_amount = round(quantity * unit_price * tax_rate / 100)
    line_total = subtotal + tax_amount

Header totals are exact sums of the rounded line values.
"""

from dataclasses import dataclass
from decimal import Decimal

from core.money import HUNDRED, ZERO, round_money


@dataclass(frozen=True)
class LineAmounts:
    subtotal: Decimal
    tax_amount: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def line_amounts(quantity: Decimal, unit_price: Decimal, tax_rate: Decimal) -> LineAmounts:
    gross = quantity * unit_price
    subtotal = round_money(gross)
    tax_amount = round_money(gross * tax_rate / HUNDRED)
    return LineAmounts(subtotal=subtotal, tax_amount=tax_amount, line_total=subtotal + tax_amount)


def document_totals(lines) -> DocumentTotals:
    """Sum rounded line values; lines need subtotal and tax_amount attributes."""
    subtotal = ZERO
    tax_amount = ZERO
    for line in lines:
        subtotal += line.subtotal
        tax_amount += line.tax_amount
    return DocumentTotals(subtotal=subtotal, tax_amount=tax_amount, total_amount=subtotal + tax_amount)
