# tests/test_budgets.py
"""
Tests for budgets: stage machine, revision chain and achievement.
"""

from datetime import date
from decimal import Decimal

import pytest

from analytics.commands import (
    active_budget_for,
    archive_budget,
    cancel_budget,
    confirm_budget,
    create_budget,
    revise_budget,
    set_achieved_amounts,
    update_budget,
)
from analytics.models import Budget, BudgetLine
from core.commands import ErrorKind


@pytest.fixture
def budget(actor, production_cc, showroom_cc):
    """DRAFT FY budget with an expense and an income line."""
    result = create_budget(
        actor,
        name="FY 2026-27",
        period_start=date(2026, 4, 1),
        period_end=date(2027, 4, 1),
        lines=[
            {"analytical_account_id": production_cc.pk, "type": "EXPENSE", "budgeted_amount": "100000"},
            {"analytical_account_id": showroom_cc.pk, "type": "INCOME", "budgeted_amount": "250000"},
        ],
    )
    assert result.success, result.error
    return result.data


@pytest.mark.django_db
class TestBudgetLifecycle:

    def test_created_as_draft(self, budget):
        assert budget.stage == Budget.Stage.DRAFT
        assert budget.lines.count() == 2

    def test_period_must_be_positive(self, actor, production_cc):
        result = create_budget(
            actor,
            name="Empty",
            period_start="2026-04-01",
            period_end="2026-04-01",
            lines=[{"analytical_account_id": production_cc.pk, "budgeted_amount": "1"}],
        )
        assert not result.success

    def test_lines_required(self, actor):
        result = create_budget(actor, name="No lines", period_start="2026-01-01", period_end="2027-01-01", lines=[])

        assert not result.success
        assert not Budget.objects.exists()

    def test_negative_amount_rejected(self, actor, production_cc):
        result = create_budget(
            actor,
            name="Bad",
            period_start="2026-01-01",
            period_end="2027-01-01",
            lines=[{"analytical_account_id": production_cc.pk, "budgeted_amount": "-1"}],
        )
        assert not result.success

    def test_update_replaces_lines(self, actor, budget, production_cc):
        result = update_budget(
            actor,
            budget.pk,
            name="FY 2026-27 v2",
            lines=[{"analytical_account_id": production_cc.pk, "budgeted_amount": "90000"}],
        )

        assert result.success, result.error
        budget.refresh_from_db()
        assert budget.name == "FY 2026-27 v2"
        assert list(budget.lines.values_list("budgeted_amount", flat=True)) == [Decimal("90000.00")]

    def test_confirmed_budget_is_read_only(self, actor, budget):
        confirm_budget(actor, budget.pk)

        assert update_budget(actor, budget.pk, notes="late").kind == ErrorKind.STATE

    def test_revise(self, actor, budget):
        confirm_budget(actor, budget.pk)

        result = revise_budget(actor, budget.pk)

        assert result.success, result.error
        revision = result.data
        budget.refresh_from_db()
        assert budget.stage == Budget.Stage.REVISED
        assert revision.stage == Budget.Stage.CONFIRM
        assert revision.name == "FY 2026-27 (Revised)"
        assert revision.revised_budget_id == budget.pk
        assert revision.lines.count() == 2
        assert (revision.period_start, revision.period_end) == (budget.period_start, budget.period_end)

    def test_revise_with_new_lines(self, actor, budget, showroom_cc):
        confirm_budget(actor, budget.pk)

        revision = revise_budget(
            actor,
            budget.pk,
            name="FY 2026-27 Q2 reforecast",
            lines=[{"analytical_account_id": showroom_cc.pk, "type": "INCOME", "budgeted_amount": "300000"}],
        ).data

        assert revision.name == "FY 2026-27 Q2 reforecast"
        assert revision.lines.get().budgeted_amount == Decimal("300000.00")

    def test_draft_cannot_be_revised(self, actor, budget):
        assert revise_budget(actor, budget.pk).kind == ErrorKind.STATE

    def test_revised_budget_cannot_be_revised_again(self, actor, budget):
        confirm_budget(actor, budget.pk)
        revise_budget(actor, budget.pk)

        assert revise_budget(actor, budget.pk).kind == ErrorKind.STATE
        assert Budget.objects.filter(revised_budget=budget).count() == 1

    def test_cancel(self, actor, budget):
        assert cancel_budget(actor, budget.pk).data.stage == Budget.Stage.CANCELLED
        assert cancel_budget(actor, budget.pk).kind == ErrorKind.STATE

    def test_archive(self, actor, budget):
        assert not archive_budget(actor, budget.pk).data.is_active
        assert archive_budget(actor, budget.pk).kind == ErrorKind.STATE
        assert archive_budget(actor, 999).kind == ErrorKind.NOT_FOUND


@pytest.mark.django_db
class TestAchievement:

    def test_set_achieved_amounts(self, actor, budget):
        line = budget.lines.get(type=BudgetLine.LineType.EXPENSE)

        result = set_achieved_amounts(actor, budget.pk, {str(line.pk): "125000"})

        assert result.success
        line.refresh_from_db()
        assert line.achievement_percentage == Decimal("125.00")
        assert line.display_percentage == Decimal("100.00")

    def test_closed_budget_refuses_amounts(self, actor, budget):
        line = budget.lines.first()
        cancel_budget(actor, budget.pk)

        assert set_achieved_amounts(actor, budget.pk, {line.pk: "1"}).kind == ErrorKind.STATE

    def test_unknown_and_malformed_line_ids(self, actor, budget):
        assert set_achieved_amounts(actor, budget.pk, {"999999": "1"}).kind == ErrorKind.NOT_FOUND
        assert set_achieved_amounts(actor, budget.pk, {"abc": "1"}).kind == ErrorKind.VALIDATION

    def test_zero_budget_percentage(self):
        line = BudgetLine(budgeted_amount=Decimal("0"), achieved_amount=Decimal("10"))
        assert line.achievement_percentage == Decimal("0.00")


@pytest.mark.django_db
class TestActiveBudget:

    def test_half_open_period(self, actor, budget):
        confirm_budget(actor, budget.pk)

        assert active_budget_for(date(2026, 4, 1)) == budget
        assert active_budget_for(date(2027, 3, 31)) == budget
        assert active_budget_for(date(2027, 4, 1)) is None

    def test_draft_is_not_active(self, budget):
        assert active_budget_for(date(2026, 6, 1)) is None

    def test_revision_replaces_original(self, actor, budget):
        confirm_budget(actor, budget.pk)
        revision = revise_budget(actor, budget.pk).data

        assert active_budget_for(date(2026, 6, 1)) == revision
