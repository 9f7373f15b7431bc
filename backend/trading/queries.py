# trading/queries.py
"""
Read-side helpers: what each actor may see.

Staff with orders.view / documents.view see everything. Portal users see
only records whose counterparty is their linked contact.
"""

from django.core.exceptions import PermissionDenied

from accounts.authz import ActorContext
from trading.models import FinancialDocument, Order


def visible_orders(actor: ActorContext):
    qs = Order.objects.select_related("counterparty").prefetch_related("lines")
    if actor.has("orders.view"):
        return qs
    if actor.is_portal and actor.has("portal.view_own"):
        return qs.filter(counterparty_id=actor.contact_id).exclude(status=Order.Status.DRAFT)
    raise PermissionDenied("Permission denied: orders.view")


def visible_documents(actor: ActorContext):
    qs = FinancialDocument.objects.select_related("counterparty", "source_order").prefetch_related("lines")
    if actor.has("documents.view"):
        return qs
    if actor.is_portal and actor.has("portal.view_own"):
        return qs.filter(counterparty_id=actor.contact_id)
    raise PermissionDenied("Permission denied: documents.view")
