# analytics/models.py
"""
Cost-center analytics: auto-analytical rules and budgets.

AnalyticalAccount itself is master data (masterdata.models).
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q

from core.money import HUNDRED, round_money


class AutoAnalyticalRule(models.Model):
    """
    Maps (partner, partner tag, product category, product) to a cost center.

    Every non-null match field must equal the line's value for the rule to
    apply; rules with more non-null fields are more specific and win.
    """

    class Status(models.TextChoices):
        NEW = "NEW", "New"
        CONFIRMED = "CONFIRMED", "Confirmed"
        ARCHIVED = "ARCHIVED", "Archived"

    class RuleStatus(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        CONFIRM = "CONFIRM", "Confirmed"
        CANCELLED = "CANCELLED", "Cancelled"

    MATCH_FIELDS = ("partner_id", "partner_tag", "product_category", "product_id")

    name = models.CharField(max_length=255, blank=True, default="")

    partner = models.ForeignKey(
        "masterdata.Contact",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="analytical_rules",
    )
    partner_tag = models.CharField(max_length=100, null=True, blank=True)
    # Built-in category value or custom category UUID (Product.category_key)
    product_category = models.CharField(max_length=64, null=True, blank=True)
    product = models.ForeignKey(
        "masterdata.Product",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="analytical_rules",
    )

    analytical_account = models.ForeignKey(
        "masterdata.AnalyticalAccount",
        on_delete=models.PROTECT,
        related_name="rules",
    )
    auto_apply = models.BooleanField(default=True)

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.NEW)
    rule_status = models.CharField(max_length=10, choices=RuleStatus.choices, default=RuleStatus.DRAFT)
    confirmed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-confirmed_at", "-id"]
        indexes = [
            models.Index(fields=["status", "auto_apply"], name="rule_status_auto_apply_idx"),
        ]

    def __str__(self):
        return self.name or f"Rule #{self.pk} -> {self.analytical_account_id}"

    @property
    def specificity(self) -> int:
        return sum(1 for field in self.MATCH_FIELDS if getattr(self, field) not in (None, ""))

    @property
    def is_applicable(self) -> bool:
        return self.auto_apply and self.status == self.Status.CONFIRMED


class Budget(models.Model):
    """
    Planned amounts per cost center over a half-open period
    [period_start, period_end).
    """

    class Stage(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        CONFIRM = "CONFIRM", "Confirmed"
        REVISED = "REVISED", "Revised"
        CANCELLED = "CANCELLED", "Cancelled"

    name = models.CharField(max_length=255)
    period_start = models.DateField()
    period_end = models.DateField()
    stage = models.CharField(max_length=10, choices=Stage.choices, default=Stage.DRAFT)

    # Predecessor this budget revises; the predecessor is left in REVISED
    revised_budget = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="revisions",
    )

    notes = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-period_start", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(period_end__gt=models.F("period_start")),
                name="budget_period_end_after_start",
            ),
        ]

    def __str__(self):
        return self.name

    def covers(self, day) -> bool:
        return self.period_start <= day < self.period_end


class BudgetLine(models.Model):

    class LineType(models.TextChoices):
        INCOME = "INCOME", "Income"
        EXPENSE = "EXPENSE", "Expense"

    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="lines")
    analytical_account = models.ForeignKey(
        "masterdata.AnalyticalAccount",
        on_delete=models.PROTECT,
        related_name="budget_lines",
    )
    type = models.CharField(max_length=10, choices=LineType.choices, default=LineType.EXPENSE)
    budgeted_amount = models.DecimalField(max_digits=14, decimal_places=2)
    achieved_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(budgeted_amount__gte=0),
                name="budget_line_budgeted_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.budget_id}:{self.analytical_account_id} {self.budgeted_amount}"

    @property
    def achievement_percentage(self) -> Decimal:
        """achieved / budgeted * 100, unclamped; 0 when nothing is budgeted."""
        if not self.budgeted_amount:
            return Decimal("0.00")
        return round_money(Decimal(self.achieved_amount) / Decimal(self.budgeted_amount) * HUNDRED)

    @property
    def display_percentage(self) -> Decimal:
        """achievement_percentage clamped to 0..100 for progress bars."""
        return min(max(self.achievement_percentage, Decimal("0.00")), Decimal("100.00"))
