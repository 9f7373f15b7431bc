# tests/test_orders.py
"""
Tests for the order lifecycle.

Tests cover:
- Pricing defaults and per-line rounding of totals
- DRAFT -> SENT -> CONFIRMED, cancellation
- Draft-only editing
- Counterparty e-mail on send
"""

from datetime import date
from decimal import Decimal

import pytest

from core.commands import ErrorKind
from trading.commands import (
    cancel_order,
    confirm_order,
    create_order,
    send_order,
    update_order,
)
from trading.models import Direction, Order


@pytest.mark.django_db
class TestCreateOrder:

    def test_sales_order_defaults_to_sale_price(self, sales_order):
        line = sales_order.lines.get()

        assert sales_order.number == "SO-00001"
        assert sales_order.status == Order.Status.DRAFT
        assert line.unit_price == Decimal("1000.00")
        assert line.tax_rate == Decimal("18.00")
        assert sales_order.subtotal == Decimal("2000.00")
        assert sales_order.tax_amount == Decimal("360.00")
        assert sales_order.total_amount == Decimal("2360.00")

    def test_purchase_order_defaults_to_purchase_price(self, purchase_order):
        assert purchase_order.number == "PO-00001"
        assert purchase_order.lines.get().unit_price == Decimal("250.00")
        assert purchase_order.total_amount == Decimal("2800.00")

    def test_explicit_price_and_tax(self, make_order, customer, chair):
        order = make_order(
            Direction.SALE,
            customer,
            [{"product_id": chair.pk, "quantity": "3", "unit_price": "33.33", "tax_rate": "18"}],
        )

        assert order.subtotal == Decimal("99.99")
        assert order.tax_amount == Decimal("18.00")
        assert order.total_amount == Decimal("117.99")

    def test_rounding_is_per_line(self, make_order, customer, chair):
        """Two lines of 0.005 tax each round to 0.01 apiece."""
        lines = [
            {"product_id": chair.pk, "quantity": "1", "unit_price": "0.05", "tax_rate": "10"},
            {"product_id": chair.pk, "quantity": "1", "unit_price": "0.05", "tax_rate": "10"},
        ]
        order = make_order(Direction.SALE, customer, lines)

        assert order.tax_amount == Decimal("0.02")
        assert order.total_amount == Decimal("0.12")
        assert [line.line_no for line in order.lines.all()] == [1, 2]

    def test_wrong_counterparty_type(self, actor, vendor, chair):
        result = create_order(actor, Direction.SALE, vendor.pk, [{"product_id": chair.pk, "quantity": "1"}])

        assert not result.success
        assert result.error == f"Contact {vendor.code} is not a customer."

    def test_lines_required(self, actor, customer):
        result = create_order(actor, Direction.SALE, customer.pk, [])

        assert not result.success
        assert not Order.objects.exists()

    def test_invalid_line_does_not_consume_number(self, actor, customer, chair):
        bad = create_order(actor, Direction.SALE, customer.pk, [{"product_id": chair.pk, "quantity": "0"}])
        good = create_order(actor, Direction.SALE, customer.pk, [{"product_id": chair.pk, "quantity": "1"}])

        assert not bad.success
        assert good.data.number == "SO-00001"

    def test_expected_date_before_order_date(self, actor, customer, chair):
        result = create_order(
            actor,
            Direction.SALE,
            customer.pk,
            [{"product_id": chair.pk, "quantity": "1"}],
            order_date="2026-03-10",
            expected_date="2026-03-01",
        )
        assert not result.success

    def test_unknown_counterparty(self, actor, chair):
        result = create_order(actor, Direction.SALE, 999999, [{"product_id": chair.pk, "quantity": "1"}])
        assert result.kind == ErrorKind.NOT_FOUND


@pytest.mark.django_db
class TestOrderWorkflow:

    def test_draft_can_be_edited(self, actor, sales_order, chair):
        result = update_order(
            actor,
            sales_order.pk,
            lines=[{"product_id": chair.pk, "quantity": "5"}],
            notes="Rush order",
            expected_date=date(2099, 1, 1),
        )

        assert result.success, result.error
        sales_order.refresh_from_db()
        assert sales_order.notes == "Rush order"
        assert sales_order.total_amount == Decimal("5900.00")
        assert sales_order.lines.count() == 1

    def test_sent_order_is_read_only(self, actor, sales_order):
        send_order(actor, sales_order.pk)

        result = update_order(actor, sales_order.pk, notes="too late")

        assert result.kind == ErrorKind.STATE

    def test_full_lifecycle(self, actor, sales_order):
        assert send_order(actor, sales_order.pk).data.status == Order.Status.SENT

        result = confirm_order(actor, sales_order.pk)

        assert result.success
        assert result.warnings == []
        sales_order.refresh_from_db()
        assert sales_order.status == Order.Status.CONFIRMED
        assert sales_order.confirmed_at is not None

    def test_confirm_requires_sent(self, actor, sales_order):
        result = confirm_order(actor, sales_order.pk)
        assert result.kind == ErrorKind.STATE

    def test_send_twice_refused(self, actor, sales_order):
        send_order(actor, sales_order.pk)
        assert send_order(actor, sales_order.pk).kind == ErrorKind.STATE

    def test_cancel_draft(self, actor, sales_order):
        result = cancel_order(actor, sales_order.pk)

        assert result.data.status == Order.Status.CANCELLED
        assert cancel_order(actor, sales_order.pk).kind == ErrorKind.STATE

    def test_cancel_with_document_conflicts(self, actor, invoice):
        result = cancel_order(actor, invoice.source_order_id)

        assert result.kind == ErrorKind.CONFLICT
        assert Order.objects.get(pk=invoice.source_order_id).status == Order.Status.CONFIRMED


@pytest.mark.django_db
class TestOrderNotification:

    def test_send_emails_customer(self, settings, actor, sales_order, django_capture_on_commit_callbacks, mailoutbox):
        settings.COMPANY_NAME = "Shiv Furniture"

        with django_capture_on_commit_callbacks(execute=True):
            send_order(actor, sales_order.pk)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["buyer@acme.test"]
        assert mailoutbox[0].subject == "Sales Order SO-00001 from Shiv Furniture"

    def test_purchase_order_subject(self, settings, actor, purchase_order, django_capture_on_commit_callbacks, mailoutbox):
        settings.COMPANY_NAME = "Shiv Furniture"

        with django_capture_on_commit_callbacks(execute=True):
            send_order(actor, purchase_order.pk)

        assert mailoutbox[0].subject == "Purchase Order PO-00001 from Shiv Furniture - Action Required"

    def test_mail_failure_does_not_revert_send(
        self, actor, sales_order, django_capture_on_commit_callbacks, monkeypatch
    ):
        def broken_send_mail(**kwargs):
            raise ConnectionError("SMTP down")

        monkeypatch.setattr("notifications.email_service.send_mail", broken_send_mail)

        with django_capture_on_commit_callbacks(execute=True):
            result = send_order(actor, sales_order.pk)

        assert result.success
        sales_order.refresh_from_db()
        assert sales_order.status == Order.Status.SENT


@pytest.mark.django_db(transaction=True)
def test_send_emails_after_real_commit(actor, sales_order, mailoutbox):
    result = send_order(actor, sales_order.pk)

    assert result.success
    sent = [m for m in mailoutbox if sales_order.number in m.subject]
    assert [m.to for m in sent] == [["buyer@acme.test"]]
