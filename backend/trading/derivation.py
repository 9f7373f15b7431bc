# trading/derivation.py
"""
Derived document generation: CONFIRMED order -> invoice / vendor bill.

Idempotency rests on the unique source_order column, not on the
existence check: two concurrent callers may both miss the check, but only
one INSERT can win. The loser's savepoint rolls back and it returns the
winner's document.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.commands import CommandError, ErrorKind
from core.sequences import next_sequence_value
from core.write_barrier import command_writes_allowed
from ops.metrics import record_derivation_failure
from trading.models import FinancialDocument, FinancialDocumentLine, Order
from trading.policies import can_derive_document

logger = logging.getLogger(__name__)


def _due_date(order: Order):
    if order.expected_date:
        return order.expected_date
    return order.order_date + timedelta(days=settings.DEFAULT_PAYMENT_TERM_DAYS)


def _existing_document(order: Order) -> FinancialDocument | None:
    return FinancialDocument.objects.filter(source_order_id=order.pk).first()


def _create_document(order: Order, initial_status: str) -> FinancialDocument:
    sequence = "vendor_bill" if order.is_purchase else "invoice"
    source = "Purchase Order" if order.is_purchase else "Sales Order"

    document = FinancialDocument.objects.create(
        direction=order.direction,
        number=next_sequence_value(sequence),
        counterparty_id=order.counterparty_id,
        source_order=order,
        document_date=timezone.localdate(),
        due_date=_due_date(order),
        status=initial_status,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        total_amount=order.total_amount,
        paid_amount=0,
        notes=f"{order.document_label} created from {source} {order.number}",
        posted_at=timezone.now() if initial_status == FinancialDocument.Status.POSTED else None,
    )

    FinancialDocumentLine.objects.bulk_create([
        FinancialDocumentLine(
            document=document,
            line_no=line.line_no,
            product_id=line.product_id,
            description=line.description,
            quantity=line.quantity,
            unit_price=line.unit_price,
            tax_rate=line.tax_rate,
            subtotal=line.subtotal,
            tax_amount=line.tax_amount,
            line_total=line.line_total,
            analytical_account_id=line.analytical_account_id,
        )
        for line in order.lines.all()
    ])
    return document


def generate_derived_document(
    order: Order,
    initial_status: str = FinancialDocument.Status.DRAFT,
) -> tuple[FinancialDocument, bool]:
    """
    Return the document derived from order, creating it if needed.

    Returns:
        (document, created)

    Raises:
        CommandError(STATE): order is not CONFIRMED
    """
    if initial_status not in (FinancialDocument.Status.DRAFT, FinancialDocument.Status.POSTED):
        raise CommandError(f"Invalid initial document status: {initial_status}.")

    with transaction.atomic():
        # Serialises with cancel_order, which locks the same row.
        order = Order.objects.select_for_update().get(pk=order.pk)
        allowed, reason = can_derive_document(order)
        if not allowed:
            raise CommandError(reason, ErrorKind.STATE)

        existing = _existing_document(order)
        if existing is not None:
            return existing, False

        try:
            with transaction.atomic(), command_writes_allowed():
                document = _create_document(order, initial_status)
        except IntegrityError:
            # source_order is unique: a concurrent creator committed first.
            existing = _existing_document(order)
            if existing is None:
                raise
            logger.info(
                f"{order.number}: document created concurrently as {existing.number}",
                extra={"order_number": order.number},
            )
            return existing, False

    logger.info(
        f"{document.number} generated from {order.number}",
        extra={"order_number": order.number, "document_number": document.number},
    )
    return document, True


def orders_missing_documents():
    """CONFIRMED orders that have no invoice/vendor bill yet."""
    return Order.objects.filter(
        status=Order.Status.CONFIRMED,
        financial_document__isnull=True,
    ).order_by("confirmed_at", "id")


def generate_missing_documents(limit: int | None = None) -> dict:
    """
    Retry generation for every CONFIRMED order without a document.
    One failing order never stops the others.
    """
    orders = orders_missing_documents()
    if limit:
        orders = orders[:limit]

    created = []
    failed = []
    for order in orders:
        try:
            document, was_created = generate_derived_document(order)
        except Exception as e:
            record_derivation_failure(order.direction)
            logger.exception(f"Retry of document generation for {order.number} failed: {e}")
            failed.append(order.number)
            continue
        if was_created:
            created.append(document.number)

    if created or failed:
        logger.info(f"Missing documents: {len(created)} created, {len(failed)} failed")
    return {"created": created, "failed": failed}
