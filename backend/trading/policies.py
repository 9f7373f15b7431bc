# trading/policies.py
"""
Business policy functions for orders and financial documents.

Order state machine:
    DRAFT ──send──> SENT ──confirm──> CONFIRMED
      │               │                  │
      └──────cancel───┴──────cancel──────┴──> CANCELLED

Editing (header and lines) is only possible in DRAFT. Cancelling is
refused once an invoice/vendor bill has been derived from the order.

Policies are pure functions returning (bool, reason); commands compose
them and decide which error kind to report.
"""

from trading.models import Direction, FinancialDocument, Order


def can_trade_with(direction: str, contact) -> tuple[bool, str]:
    """
    Rules:
    - Contact must be active
    - Sales need a customer (or BOTH), purchases a vendor (or BOTH)
    """
    if not contact.is_active:
        return False, f"Contact {contact.code} is inactive."
    if direction == Direction.SALE and not contact.can_sell_to():
        return False, f"Contact {contact.code} is not a customer."
    if direction == Direction.PURCHASE and not contact.can_buy_from():
        return False, f"Contact {contact.code} is not a vendor."
    return True, ""


def can_edit_order(order: Order) -> tuple[bool, str]:
    if order.status != Order.Status.DRAFT:
        return False, f"Only draft orders can be edited (order is {order.status})."
    return True, ""


def can_send_order(order: Order) -> tuple[bool, str]:
    if order.status != Order.Status.DRAFT:
        return False, f"Only draft orders can be sent (order is {order.status})."
    return True, ""


def can_confirm_order(order: Order) -> tuple[bool, str]:
    if order.status != Order.Status.SENT:
        return False, f"Only sent orders can be confirmed (order is {order.status})."
    return True, ""


def can_cancel_order(order: Order) -> tuple[bool, str]:
    if order.status == Order.Status.CANCELLED:
        return False, "Order is already cancelled."
    return True, ""


def has_derived_document(order: Order) -> bool:
    return FinancialDocument.objects.filter(source_order_id=order.pk).exists()


def can_derive_document(order: Order) -> tuple[bool, str]:
    if order.status != Order.Status.CONFIRMED:
        return False, f"Documents can only be generated from confirmed orders (order is {order.status})."
    return True, ""


def can_post_document(document: FinancialDocument) -> tuple[bool, str]:
    if document.status != FinancialDocument.Status.DRAFT:
        return False, f"Only draft documents can be posted (document is {document.status})."
    return True, ""


def can_cancel_document(document: FinancialDocument) -> tuple[bool, str]:
    if document.status == FinancialDocument.Status.CANCELLED:
        return False, "Document is already cancelled."
    return True, ""


def can_receive_payment(document: FinancialDocument) -> tuple[bool, str]:
    if document.status == FinancialDocument.Status.CANCELLED:
        return False, f"{document.number} is cancelled."
    return True, ""
