# payments/models.py
"""
Payment ledger.

A payment is an immutable record: once saved it is only ever deleted
(through payments.commands.delete_payment, which reverses its effect on
the document's paid_amount). Edits are refused.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.write_barrier import guard_command_write


class Payment(models.Model):

    class PaymentType(models.TextChoices):
        INCOMING = "INCOMING", "Incoming (from customer)"
        OUTGOING = "OUTGOING", "Outgoing (to vendor)"

    class Method(models.TextChoices):
        CASH = "CASH", "Cash"
        BANK_TRANSFER = "BANK_TRANSFER", "Bank transfer"
        CHEQUE = "CHEQUE", "Cheque"
        UPI = "UPI", "UPI"
        CREDIT_CARD = "CREDIT_CARD", "Credit card"
        OTHER = "OTHER", "Other"

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    number = models.CharField(max_length=30, unique=True)
    type = models.CharField(max_length=10, choices=PaymentType.choices)
    contact = models.ForeignKey(
        "masterdata.Contact",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    # Invoice for INCOMING, vendor bill for OUTGOING; empty for on-account
    document = models.ForeignKey(
        "trading.FinancialDocument",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=16, decimal_places=2)
    payment_date = models.DateField()
    method = models.CharField(max_length=15, choices=Method.choices, default=Method.BANK_TRANSFER)
    reference = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-id"]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name="payment_amount_positive"),
        ]

    def __str__(self):
        return f"{self.number} {self.amount}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not kwargs.get("force_insert"):
            raise RuntimeError("Payments are immutable. Delete and record a new payment instead.")
        guard_command_write("Payment")
        super().save(*args, **kwargs)
