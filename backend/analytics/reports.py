# analytics/reports.py
"""
Cost-center performance report.

Expenses are vendor-bill line totals, revenue is invoice line totals,
both grouped by the analytical account resolved onto each line. Cancelled
documents are excluded. Budget amounts come from active CONFIRM budgets
whose period overlaps the report year.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal

from django.db.models import Count, Sum
from django.db.models.functions import ExtractMonth

from analytics.models import Budget, BudgetLine
from core.money import HUNDRED, ZERO, round_money
from masterdata.models import AnalyticalAccount
from trading.models import Direction, FinancialDocument, FinancialDocumentLine


def _document_lines(year: int):
    return FinancialDocumentLine.objects.filter(
        document__document_date__year=year,
    ).exclude(
        document__status=FinancialDocument.Status.CANCELLED,
    )


def cost_center_performance(year: int, analytical_account_id: int | None = None) -> list[dict]:
    """
    One row per analytical account.

    Row keys: analytical_account_id, code, name, total_expenses,
    total_revenue, net_position, transaction_count, budget_amount,
    utilization_percentage.
    """
    accounts = AnalyticalAccount.objects.filter(is_active=True)
    lines = _document_lines(year).filter(analytical_account__isnull=False)
    if analytical_account_id:
        accounts = accounts.filter(pk=analytical_account_id)
        lines = lines.filter(analytical_account_id=analytical_account_id)

    expenses = defaultdict(lambda: ZERO)
    revenue = defaultdict(lambda: ZERO)
    counts = defaultdict(int)
    for row in (
        lines.values("analytical_account_id", "document__direction")
        .annotate(total=Sum("line_total"), n=Count("id"))
    ):
        account_id = row["analytical_account_id"]
        if row["document__direction"] == Direction.PURCHASE:
            expenses[account_id] += row["total"] or ZERO
        else:
            revenue[account_id] += row["total"] or ZERO
        counts[account_id] += row["n"]

    budgets = defaultdict(lambda: ZERO)
    for row in (
        BudgetLine.objects.filter(
            budget__is_active=True,
            budget__stage=Budget.Stage.CONFIRM,
            budget__period_start__lt=date(year + 1, 1, 1),
            budget__period_end__gt=date(year, 1, 1),
            type=BudgetLine.LineType.EXPENSE,
        )
        .values("analytical_account_id")
        .annotate(total=Sum("budgeted_amount"))
    ):
        budgets[row["analytical_account_id"]] = row["total"] or ZERO

    report = []
    for account in accounts.order_by("code"):
        total_expenses = expenses[account.pk]
        total_revenue = revenue[account.pk]
        budget_amount = budgets[account.pk]
        utilization = (
            round_money(total_expenses / budget_amount * HUNDRED)
            if budget_amount
            else Decimal("0.00")
        )
        report.append({
            "analytical_account_id": account.pk,
            "code": account.code,
            "name": account.name,
            "total_expenses": total_expenses,
            "total_revenue": total_revenue,
            "net_position": total_revenue - total_expenses,
            "transaction_count": counts[account.pk],
            "budget_amount": budget_amount,
            "utilization_percentage": utilization,
        })
    return report


def monthly_trend(year: int, analytical_account_id: int | None = None) -> list[dict]:
    """Expenses and revenue per calendar month (1..12)."""
    lines = _document_lines(year)
    if analytical_account_id:
        lines = lines.filter(analytical_account_id=analytical_account_id)

    months = {m: {"month": m, "expenses": ZERO, "revenue": ZERO} for m in range(1, 13)}
    for row in (
        lines.annotate(month=ExtractMonth("document__document_date"))
        .values("month", "document__direction")
        .annotate(total=Sum("line_total"))
    ):
        key = "expenses" if row["document__direction"] == Direction.PURCHASE else "revenue"
        months[row["month"]][key] += row["total"] or ZERO
    return [months[m] for m in range(1, 13)]
