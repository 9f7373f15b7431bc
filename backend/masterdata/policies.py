# masterdata/policies.py
"""
Business policy functions for master data.

Policies answer: "Is this change allowed given the current state?"
They return (bool, reason) tuples; commands compose them.
"""

from decimal import Decimal

from masterdata.models import AnalyticalAccount


def can_price_product(purchase_price: Decimal, sale_price: Decimal) -> tuple[bool, str]:
    """
    Rules:
    - Prices are non-negative
    - Sale price is never below purchase price
    """
    if purchase_price < 0 or sale_price < 0:
        return False, "Prices cannot be negative."
    if sale_price < purchase_price:
        return False, "Sale price must be greater than or equal to purchase price."
    return True, ""


def can_use_tax_rate(tax_rate: Decimal) -> tuple[bool, str]:
    if tax_rate < 0 or tax_rate > 100:
        return False, "Tax rate must be between 0 and 100."
    return True, ""


def can_set_parent(account: AnalyticalAccount | None, parent: AnalyticalAccount | None) -> tuple[bool, str]:
    """
    Check a (re-)parenting of an analytical account.

    Rules:
    - Parent must be active
    - An account can't be its own ancestor
    """
    if parent is None:
        return True, ""
    if not parent.is_active:
        return False, "Parent analytical account is inactive."
    if account is None:
        return True, ""
    if parent.pk == account.pk:
        return False, "An analytical account cannot be its own parent."
    if parent.pk in AnalyticalAccount.descendant_ids(account.pk):
        return False, "Re-parenting would create a cycle in the analytical account tree."
    return True, ""


def can_archive_analytical_account(account: AnalyticalAccount) -> tuple[bool, str]:
    if not account.is_active:
        return False, "Analytical account is already archived."
    if account.children.filter(is_active=True).exists():
        return False, "Archive child analytical accounts first."
    return True, ""
