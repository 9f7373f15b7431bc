# trading/commands.py
"""
Command layer for sales/purchase orders and their derived documents.

Pattern:
1. Validate permissions (require)
2. Apply business policies (can_*)
3. Perform the operation inside transaction.atomic()
4. Schedule side effects with transaction.on_commit
5. Return CommandResult

Side effects (counterparty e-mail, invoice/bill generation) never undo a
committed status change. Their failures are logged, counted in metrics
and reported as warnings on the successful result.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounts.authz import ActorContext, require, require_counterparty
from analytics.rules import AnalyticalResolver, LineContext
from core.commands import CommandError, CommandResult, ErrorKind
from core.money import to_decimal
from core.sequences import next_sequence_value
from core.write_barrier import command_writes_allowed
from masterdata.models import AnalyticalAccount, Contact, Product
from masterdata.policies import can_use_tax_rate
from notifications.email_service import render_order_sent
from notifications.tasks import enqueue_notification
from ops.metrics import record_derivation_failure, record_notification_failure
from trading.derivation import generate_derived_document
from trading.models import Direction, FinancialDocument, Order, OrderLine
from trading.policies import (
    can_cancel_document,
    can_cancel_order,
    can_confirm_order,
    can_edit_order,
    can_post_document,
    can_send_order,
    can_trade_with,
    has_derived_document,
)
from trading.totals import document_totals, line_amounts

logger = logging.getLogger(__name__)

QUANTITY_Q = Decimal("0.001")
PRICE_Q = Decimal("0.01")


# =============================================================================
# Helpers
# =============================================================================

def _to_date(value, field: str, required: bool = False) -> date | None:
    if value in (None, ""):
        if required:
            raise CommandError(f"{field} is required.")
        return None
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise CommandError(f"{field} must be a date (YYYY-MM-DD).")
    return parsed


def _load_counterparty(direction: str, counterparty_id: int) -> Contact:
    try:
        contact = Contact.objects.get(pk=counterparty_id)
    except Contact.DoesNotExist:
        raise CommandError("Counterparty not found.", ErrorKind.NOT_FOUND)
    allowed, reason = can_trade_with(direction, contact)
    if not allowed:
        raise CommandError(reason)
    return contact


def _lock_order(order_id: int) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except Order.DoesNotExist:
        raise CommandError("Order not found.", ErrorKind.NOT_FOUND)


def _build_lines(order: Order, lines: list[dict]) -> list[OrderLine]:
    """
    Validate line payloads, price them, resolve cost centers and compute
    amounts. Returns unsaved OrderLine rows; nothing is written here.
    """
    if not lines:
        raise CommandError("Order must have at least one line.")

    product_ids = [line.get("product_id") for line in lines if line.get("product_id")]
    products = Product.objects.select_related("category_ref", "analytical_account").in_bulk(product_ids)

    explicit_ids = [line["analytical_account_id"] for line in lines if line.get("analytical_account_id")]
    accounts = AnalyticalAccount.objects.filter(is_active=True).in_bulk(explicit_ids)

    resolver = AnalyticalResolver(order.counterparty)

    built = []
    for idx, line in enumerate(lines, start=1):
        product_id = line.get("product_id")
        if not product_id:
            raise CommandError(f"Line {idx}: product is required.")
        product = products.get(product_id)
        if product is None:
            raise CommandError(f"Line {idx}: product not found.", ErrorKind.NOT_FOUND)
        if not product.is_active:
            raise CommandError(f"Line {idx}: product {product.code} is inactive.")

        if line.get("quantity") in (None, ""):
            raise CommandError(f"Line {idx}: quantity is required.")
        default_price = product.purchase_price if order.is_purchase else product.sale_price
        try:
            quantity = to_decimal(line.get("quantity")).quantize(QUANTITY_Q, rounding=ROUND_HALF_UP)
            unit_price = to_decimal(line.get("unit_price"), default_price).quantize(PRICE_Q, rounding=ROUND_HALF_UP)
            tax_rate = to_decimal(line.get("tax_rate"), product.tax_rate)
        except ValueError as e:
            raise CommandError(f"Line {idx}: {e}")

        if quantity <= 0:
            raise CommandError(f"Line {idx}: quantity must be greater than zero.")
        if unit_price < 0:
            raise CommandError(f"Line {idx}: unit price cannot be negative.")
        allowed, reason = can_use_tax_rate(tax_rate)
        if not allowed:
            raise CommandError(f"Line {idx}: {reason}")

        explicit_account_id = line.get("analytical_account_id")
        if explicit_account_id and explicit_account_id not in accounts:
            raise CommandError(f"Line {idx}: analytical account not found.", ErrorKind.NOT_FOUND)

        amounts = line_amounts(quantity, unit_price, tax_rate)
        built.append(OrderLine(
            order=order,
            line_no=idx,
            product=product,
            description=line.get("description") or "",
            quantity=quantity,
            unit_price=unit_price,
            tax_rate=tax_rate,
            subtotal=amounts.subtotal,
            tax_amount=amounts.tax_amount,
            line_total=amounts.line_total,
            analytical_account_id=resolver.resolve(
                LineContext.for_product(product, explicit_account_id)
            ),
            analytical_account_manual=bool(explicit_account_id),
        ))
    return built


def _replace_lines(order: Order, lines: list[dict]) -> None:
    """Delete and recreate all lines, then refresh header totals."""
    new_lines = _build_lines(order, lines)
    order.lines.all().delete()
    OrderLine.objects.bulk_create(new_lines)

    totals = document_totals(new_lines)
    order.subtotal = totals.subtotal
    order.tax_amount = totals.tax_amount
    order.total_amount = totals.total_amount


def _reresolve_lines(order: Order) -> None:
    """Re-run cost center resolution for lines whose account was not chosen by hand."""
    resolver = AnalyticalResolver(order.counterparty)
    lines = list(
        order.lines.filter(analytical_account_manual=False)
        .select_related("product__category_ref", "product__analytical_account")
    )
    for line in lines:
        line.analytical_account_id = resolver.resolve(LineContext.for_product(line.product))
    OrderLine.objects.bulk_update(lines, ["analytical_account"])


def _notify_order_sent(order_id: int) -> None:
    """After-commit hook: render and enqueue the order e-mail."""
    try:
        order = Order.objects.select_related("counterparty").get(pk=order_id)
        subject, content = render_order_sent(order)
    except Exception as e:
        record_notification_failure("order_sent")
        logger.error(f"Could not render notification for order {order_id}: {e}")
        return
    enqueue_notification(order.counterparty.email, subject, content, "order_sent")


# =============================================================================
# Order commands
# =============================================================================

def create_order(
    actor: ActorContext,
    direction: str,
    counterparty_id: int,
    lines: list[dict],
    order_date=None,
    expected_date=None,
    notes: str = "",
) -> CommandResult:
    """
    Create a DRAFT sales or purchase order.

    Args:
        direction: Direction.SALE or Direction.PURCHASE
        lines: [{"product_id", "quantity", "unit_price"?, "tax_rate"?,
                 "description"?, "analytical_account_id"?}, ...]
               unit_price defaults to the product's sale/purchase price,
               tax_rate to the product's tax rate.

    Returns:
        CommandResult with the created Order or error
    """
    require(actor, "orders.create")

    if direction not in Direction.values:
        return CommandResult.fail(f"Invalid order direction: {direction}.")

    try:
        with transaction.atomic():
            counterparty = _load_counterparty(direction, counterparty_id)
            order_day = _to_date(order_date, "order_date") or timezone.localdate()
            expected = _to_date(expected_date, "expected_date")
            if expected and expected < order_day:
                raise CommandError("Expected date cannot be before the order date.")

            order = Order(
                direction=direction,
                counterparty=counterparty,
                order_date=order_day,
                expected_date=expected,
                notes=notes or "",
                created_by=actor.user,
            )
            # Validate lines before a number is consumed.
            _build_lines(order, lines)

            order.number = next_sequence_value(order.sequence_name)
            order.save()
            _replace_lines(order, lines)
            order.save(update_fields=["subtotal", "tax_amount", "total_amount", "updated_at"])
    except CommandError as e:
        return e.as_result()

    logger.info(
        f"{order.number} created",
        extra={"order_number": order.number, "status": order.status},
    )
    return CommandResult.ok(order)


def update_order(actor: ActorContext, order_id: int, lines: list[dict] = None, **changes) -> CommandResult:
    """
    Edit a DRAFT order.

    When lines is given all existing lines are replaced: cost centers are
    re-resolved against the current rules and totals recomputed. A new
    counterparty without new lines re-resolves the existing lines, except
    those whose account was given explicitly. Header and lines change
    together or not at all.
    """
    require(actor, "orders.edit_draft")

    try:
        with transaction.atomic():
            order = _lock_order(order_id)
            allowed, reason = can_edit_order(order)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)

            previous_counterparty_id = order.counterparty_id
            if "counterparty_id" in changes:
                order.counterparty = _load_counterparty(order.direction, changes.pop("counterparty_id"))
            if "order_date" in changes:
                order.order_date = _to_date(changes.pop("order_date"), "order_date", required=True)
            if "expected_date" in changes:
                order.expected_date = _to_date(changes.pop("expected_date"), "expected_date")
            if "notes" in changes:
                order.notes = changes.pop("notes") or ""
            if changes:
                raise CommandError(f"Unknown order fields: {', '.join(sorted(changes))}.")

            if order.expected_date and order.expected_date < order.order_date:
                raise CommandError("Expected date cannot be before the order date.")

            if lines is not None:
                _replace_lines(order, lines)
            elif order.counterparty_id != previous_counterparty_id:
                _reresolve_lines(order)
            order.save()
    except CommandError as e:
        return e.as_result()

    return CommandResult.ok(order)


def send_order(actor: ActorContext, order_id: int) -> CommandResult:
    """
    DRAFT -> SENT.

    The counterparty e-mail is enqueued after commit; a delivery problem
    never reverts the transition.
    """
    require(actor, "orders.send")

    try:
        with transaction.atomic():
            order = _lock_order(order_id)
            allowed, reason = can_send_order(order)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)
            if not order.lines.exists():
                raise CommandError("Order has no lines.")

            order.status = Order.Status.SENT
            order.sent_at = timezone.now()
            order.save(update_fields=["status", "sent_at", "updated_at"])

            transaction.on_commit(lambda: _notify_order_sent(order.pk))
    except CommandError as e:
        return e.as_result()

    logger.info(
        f"{order.number} sent",
        extra={"order_number": order.number, "status": order.status},
    )
    return CommandResult.ok(order)


def confirm_order(
    actor: ActorContext,
    order_id: int,
    document_status: str = FinancialDocument.Status.DRAFT,
) -> CommandResult:
    """
    SENT -> CONFIRMED, then generate the invoice/vendor bill.

    The transition commits first. Generation runs in its own transaction;
    if it fails the order stays CONFIRMED, the failure is logged and
    counted, and the result carries a warning. generate_document (or the
    periodic retry) can finish the job later.

    Portal users may confirm orders addressed to their own contact; their
    confirmations always derive a DRAFT document.
    """
    try:
        with transaction.atomic():
            order = _lock_order(order_id)
            require_counterparty(actor, "orders.confirm", order.counterparty_id)
            allowed, reason = can_confirm_order(order)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)

            order.status = Order.Status.CONFIRMED
            order.confirmed_at = timezone.now()
            order.save(update_fields=["status", "confirmed_at", "updated_at"])
    except CommandError as e:
        return e.as_result()

    logger.info(
        f"{order.number} confirmed",
        extra={"order_number": order.number, "status": order.status},
    )

    if not actor.has("orders.confirm"):
        document_status = FinancialDocument.Status.DRAFT

    warnings = []
    try:
        with transaction.atomic():
            generate_derived_document(order, document_status)
    except Exception as e:
        record_derivation_failure(order.direction)
        logger.exception(
            f"{order.document_label} generation failed for {order.number}: {e}",
            extra={"order_number": order.number},
        )
        warnings.append(f"{order.document_label} could not be generated: {e}")

    return CommandResult.ok(order, warnings=warnings)


def cancel_order(actor: ActorContext, order_id: int) -> CommandResult:
    """
    DRAFT/SENT/CONFIRMED -> CANCELLED.

    Refused with a conflict when an invoice/vendor bill exists: the
    document (and any payments against it) must be dealt with first.
    """
    require(actor, "orders.cancel")

    try:
        with transaction.atomic():
            order = _lock_order(order_id)
            allowed, reason = can_cancel_order(order)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)
            if has_derived_document(order):
                raise CommandError(
                    f"{order.number} has a linked {order.document_label.lower()} and cannot be cancelled.",
                    ErrorKind.CONFLICT,
                )

            order.status = Order.Status.CANCELLED
            order.cancelled_at = timezone.now()
            order.save(update_fields=["status", "cancelled_at", "updated_at"])
    except CommandError as e:
        return e.as_result()

    logger.info(
        f"{order.number} cancelled",
        extra={"order_number": order.number, "status": order.status},
    )
    return CommandResult.ok(order)


# =============================================================================
# Financial document commands
# =============================================================================

def generate_document(
    actor: ActorContext,
    order_id: int,
    initial_status: str = FinancialDocument.Status.DRAFT,
) -> CommandResult:
    """Operator retry of derivation. Returns the existing document if any."""
    require(actor, "documents.generate")

    try:
        order = Order.objects.get(pk=order_id)
    except Order.DoesNotExist:
        return CommandResult.fail("Order not found.", kind=ErrorKind.NOT_FOUND)

    try:
        document, _created = generate_derived_document(order, initial_status)
    except CommandError as e:
        return e.as_result()
    return CommandResult.ok(document)


def _lock_document(document_id: int) -> FinancialDocument:
    try:
        return FinancialDocument.objects.select_for_update().get(pk=document_id)
    except FinancialDocument.DoesNotExist:
        raise CommandError("Document not found.", ErrorKind.NOT_FOUND)


def post_document(actor: ActorContext, document_id: int) -> CommandResult:
    require(actor, "documents.post")

    try:
        with transaction.atomic(), command_writes_allowed():
            document = _lock_document(document_id)
            allowed, reason = can_post_document(document)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)

            document.status = FinancialDocument.Status.POSTED
            document.posted_at = timezone.now()
            document.save(update_fields=["status", "posted_at", "updated_at"])
    except CommandError as e:
        return e.as_result()

    logger.info(f"{document.number} posted", extra={"document_number": document.number})
    return CommandResult.ok(document)


def cancel_document(actor: ActorContext, document_id: int) -> CommandResult:
    """Cancel an invoice/bill that has no payments recorded against it."""
    require(actor, "documents.cancel")

    try:
        with transaction.atomic(), command_writes_allowed():
            document = _lock_document(document_id)
            allowed, reason = can_cancel_document(document)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)
            if document.paid_amount > 0 or document.payments.exists():
                raise CommandError(
                    f"{document.number} has payments; delete them before cancelling.",
                    ErrorKind.CONFLICT,
                )

            document.status = FinancialDocument.Status.CANCELLED
            document.cancelled_at = timezone.now()
            document.save(update_fields=["status", "cancelled_at", "updated_at"])
    except CommandError as e:
        return e.as_result()

    logger.info(f"{document.number} cancelled", extra={"document_number": document.number})
    return CommandResult.ok(document)
