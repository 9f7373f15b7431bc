# payments/commands.py
"""
Command layer for the payment ledger.

paid_amount on a document is never written from a value read earlier.
Recording a payment issues

    UPDATE document SET paid_amount = paid_amount + :amount
    WHERE id = :id AND paid_amount + :amount <= total_amount

and treats "no row updated" as an overpayment. Concurrent payments
against the same document therefore serialise on the row and can never
push paid_amount above total_amount. The payment row is inserted in the
same transaction, so ledger and document move together or not at all.
"""

import logging

from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounts.authz import ActorContext, require
from core.commands import CommandError, CommandResult, ErrorKind
from core.money import round_money
from core.sequences import next_sequence_value
from core.write_barrier import command_writes_allowed
from masterdata.models import Contact
from payments.models import Payment
from trading.models import Direction, FinancialDocument
from trading.policies import can_receive_payment

logger = logging.getLogger(__name__)


PAYMENT_DIRECTION = {
    Payment.PaymentType.INCOMING: Direction.SALE,
    Payment.PaymentType.OUTGOING: Direction.PURCHASE,
}


def _check_document(document: FinancialDocument, payment_type: str, contact: Contact) -> None:
    allowed, reason = can_receive_payment(document)
    if not allowed:
        raise CommandError(reason, ErrorKind.STATE)
    if document.direction != PAYMENT_DIRECTION[payment_type]:
        expected = "an invoice" if payment_type == Payment.PaymentType.INCOMING else "a vendor bill"
        raise CommandError(f"{payment_type.title()} payments must reference {expected}.")
    if document.counterparty_id != contact.pk:
        raise CommandError(f"{document.number} belongs to a different contact.")


def record_payment(
    actor: ActorContext,
    payment_type: str,
    contact_id: int,
    amount,
    document_id: int = None,
    payment_date=None,
    method: str = Payment.Method.BANK_TRANSFER,
    reference: str = "",
    notes: str = "",
) -> CommandResult:
    """
    Record an incoming (customer) or outgoing (vendor) payment.

    Args:
        document_id: Invoice (INCOMING) or vendor bill (OUTGOING) being
                     paid; omit for an on-account payment.

    Returns:
        CommandResult with the created Payment or error
    """
    require(actor, "payments.record")

    if payment_type not in Payment.PaymentType.values:
        return CommandResult.fail(f"Invalid payment type: {payment_type}.")
    if method not in Payment.Method.values:
        return CommandResult.fail(f"Invalid payment method: {method}.")
    try:
        amount = round_money(amount)
    except ValueError as e:
        return CommandResult.fail(str(e))
    if amount <= 0:
        return CommandResult.fail("Payment amount must be greater than zero.")

    if payment_date in (None, ""):
        payment_date = timezone.localdate()
    elif isinstance(payment_date, str):
        parsed = parse_date(payment_date)
        if parsed is None:
            return CommandResult.fail("payment_date must be a date (YYYY-MM-DD).")
        payment_date = parsed

    try:
        contact = Contact.objects.get(pk=contact_id)
    except Contact.DoesNotExist:
        return CommandResult.fail("Contact not found.", kind=ErrorKind.NOT_FOUND)

    try:
        with transaction.atomic(), command_writes_allowed():
            document = None
            if document_id:
                try:
                    document = FinancialDocument.objects.select_for_update().get(pk=document_id)
                except FinancialDocument.DoesNotExist:
                    raise CommandError("Document not found.", ErrorKind.NOT_FOUND)
                _check_document(document, payment_type, contact)

                applied = FinancialDocument.objects.filter(
                    pk=document.pk,
                    paid_amount__lte=F("total_amount") - amount,
                ).update(paid_amount=F("paid_amount") + amount, updated_at=timezone.now())
                if not applied:
                    document.refresh_from_db(fields=["paid_amount", "total_amount"])
                    raise CommandError(
                        f"Payment of {amount} exceeds the amount due on {document.number} "
                        f"({document.amount_due})."
                    )

            payment = Payment.objects.create(
                number=next_sequence_value("payment"),
                type=payment_type,
                contact=contact,
                document=document,
                amount=amount,
                payment_date=payment_date,
                method=method,
                reference=reference or "",
                notes=notes or "",
                recorded_by=actor.user,
            )
    except CommandError as e:
        return e.as_result()

    logger.info(
        f"{payment.number} recorded: {amount}"
        + (f" against {document.number}" if document else " on account"),
        extra={"payment_number": payment.number},
    )
    return CommandResult.ok(payment)


def delete_payment(actor: ActorContext, payment_id: int) -> CommandResult:
    """
    Remove a payment and reverse its effect on the document's paid_amount
    in one transaction.
    """
    require(actor, "payments.delete")

    try:
        with transaction.atomic(), command_writes_allowed():
            try:
                payment = Payment.objects.select_for_update().get(pk=payment_id)
            except Payment.DoesNotExist:
                raise CommandError("Payment not found.", ErrorKind.NOT_FOUND)

            if payment.document_id:
                # Lock the document before touching paid_amount.
                FinancialDocument.objects.select_for_update().filter(pk=payment.document_id).first()
                reversed_ = FinancialDocument.objects.filter(
                    pk=payment.document_id,
                    paid_amount__gte=payment.amount,
                ).update(paid_amount=F("paid_amount") - payment.amount, updated_at=timezone.now())
                if not reversed_:
                    raise CommandError(
                        f"Document paid amount is lower than {payment.number}; ledger is inconsistent.",
                        ErrorKind.CONFLICT,
                    )

            number = payment.number
            payment.delete()
    except CommandError as e:
        return e.as_result()

    logger.info(f"{number} deleted", extra={"payment_number": number})
    return CommandResult.ok({"number": number})


def document_payment_summary(document: FinancialDocument) -> dict:
    """Ledger view of a document; paid_amount is cross-checked against payments."""
    ledger_total = document.payments.aggregate(total=Sum("amount"))["total"] or 0
    return {
        "number": document.number,
        "total_amount": document.total_amount,
        "paid_amount": document.paid_amount,
        "amount_due": document.amount_due,
        "payment_status": document.payment_status,
        "ledger_total": ledger_total,
        "payments": list(
            document.payments.order_by("payment_date", "id").values(
                "id", "number", "payment_date", "amount", "method", "reference",
            )
        ),
    }
