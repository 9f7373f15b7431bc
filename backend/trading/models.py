# trading/models.py
"""
Orders and the financial documents derived from them.

Order.direction decides the flavour:
- SALE: sales order to a customer -> customer invoice
- PURCHASE: purchase order to a vendor -> vendor bill

Workflow rules (status transitions, edit windows) live in
trading/policies.py. Models only enforce true invariants: amounts are
non-negative, paid_amount never exceeds total_amount, and an order has at
most one derived document (unique source_order).
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.write_barrier import guard_command_write


class Direction(models.TextChoices):
    SALE = "SALE", "Sale"
    PURCHASE = "PURCHASE", "Purchase"


class Order(models.Model):

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SENT = "SENT", "Sent"
        CONFIRMED = "CONFIRMED", "Confirmed"
        CANCELLED = "CANCELLED", "Cancelled"

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    direction = models.CharField(max_length=10, choices=Direction.choices)
    number = models.CharField(max_length=30, unique=True)
    counterparty = models.ForeignKey(
        "masterdata.Contact",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    order_date = models.DateField()
    expected_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT)

    subtotal = models.DecimalField(max_digits=16, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=16, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=16, decimal_places=2, default=0)

    notes = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    sent_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-order_date", "-id"]
        indexes = [
            models.Index(fields=["direction", "status"], name="order_direction_status_idx"),
            models.Index(fields=["counterparty", "direction"], name="order_counterparty_dir_idx"),
        ]

    def __str__(self):
        return self.number

    @property
    def is_purchase(self) -> bool:
        return self.direction == Direction.PURCHASE

    @property
    def sequence_name(self) -> str:
        return "purchase_order" if self.is_purchase else "sales_order"

    @property
    def document_label(self) -> str:
        return "Vendor bill" if self.is_purchase else "Invoice"


class OrderLine(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="lines")
    line_no = models.PositiveIntegerField()
    product = models.ForeignKey("masterdata.Product", on_delete=models.PROTECT, related_name="+")
    description = models.CharField(max_length=255, blank=True, default="")
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    subtotal = models.DecimalField(max_digits=16, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=16, decimal_places=2)
    line_total = models.DecimalField(max_digits=16, decimal_places=2)
    analytical_account = models.ForeignKey(
        "masterdata.AnalyticalAccount",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_lines",
    )
    # Set when the caller chose the account; such lines are never re-resolved.
    analytical_account_manual = models.BooleanField(default=False)

    class Meta:
        ordering = ["line_no"]
        constraints = [
            models.UniqueConstraint(fields=["order", "line_no"], name="uniq_order_line_no"),
            models.CheckConstraint(condition=Q(quantity__gt=0), name="order_line_quantity_positive"),
        ]

    def __str__(self):
        return f"{self.order_id}#{self.line_no}"


class FinancialDocument(models.Model):
    """
    Customer invoice (SALE) or vendor bill (PURCHASE).

    Created only by trading.derivation from a CONFIRMED order.
    paid_amount is maintained by the payment ledger through conditional
    updates; it is never written from a stale in-memory value.
    """

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        POSTED = "POSTED", "Posted"
        CANCELLED = "CANCELLED", "Cancelled"

    class PaymentStatus(models.TextChoices):
        NOT_PAID = "NOT_PAID", "Not paid"
        PARTIAL = "PARTIAL", "Partially paid"
        PAID = "PAID", "Paid"

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    direction = models.CharField(max_length=10, choices=Direction.choices)
    number = models.CharField(max_length=30, unique=True)
    counterparty = models.ForeignKey(
        "masterdata.Contact",
        on_delete=models.PROTECT,
        related_name="financial_documents",
    )
    source_order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name="financial_document",
    )
    document_date = models.DateField()
    due_date = models.DateField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT)

    subtotal = models.DecimalField(max_digits=16, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=16, decimal_places=2)
    total_amount = models.DecimalField(max_digits=16, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=16, decimal_places=2, default=0)

    notes = models.TextField(blank=True, default="")
    posted_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-document_date", "-id"]
        indexes = [
            models.Index(fields=["direction", "status"], name="document_direction_status_idx"),
            models.Index(fields=["counterparty", "direction"], name="document_counterparty_dir_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(paid_amount__gte=0) & Q(paid_amount__lte=F("total_amount")),
                name="financial_document_paid_within_total",
            ),
        ]

    def __str__(self):
        return self.number

    def save(self, *args, **kwargs):
        guard_command_write("FinancialDocument")
        super().save(*args, **kwargs)

    @property
    def is_bill(self) -> bool:
        return self.direction == Direction.PURCHASE

    @property
    def amount_due(self) -> Decimal:
        return Decimal(self.total_amount) - Decimal(self.paid_amount)

    @property
    def payment_status(self) -> str:
        paid = Decimal(self.paid_amount)
        if paid <= 0:
            return self.PaymentStatus.NOT_PAID
        if paid >= Decimal(self.total_amount):
            return self.PaymentStatus.PAID
        return self.PaymentStatus.PARTIAL


class FinancialDocumentLine(models.Model):
    """Copy of an order line at the moment the document was generated."""

    document = models.ForeignKey(FinancialDocument, on_delete=models.CASCADE, related_name="lines")
    line_no = models.PositiveIntegerField()
    product = models.ForeignKey("masterdata.Product", on_delete=models.PROTECT, related_name="+")
    description = models.CharField(max_length=255, blank=True, default="")
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    subtotal = models.DecimalField(max_digits=16, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=16, decimal_places=2)
    line_total = models.DecimalField(max_digits=16, decimal_places=2)
    analytical_account = models.ForeignKey(
        "masterdata.AnalyticalAccount",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="document_lines",
    )

    class Meta:
        ordering = ["line_no"]
        constraints = [
            models.UniqueConstraint(fields=["document", "line_no"], name="uniq_document_line_no"),
        ]

    def __str__(self):
        return f"{self.document_id}#{self.line_no}"
