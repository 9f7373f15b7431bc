# analytics/policies.py
"""
Business policy functions for rules and budgets.

Budget stage machine:
    DRAFT ──confirm──> CONFIRM ──revise──> REVISED
      │                   │
      └─────cancel────────┴──> CANCELLED

Policies return (bool, reason) and never write.
"""

from analytics.models import AutoAnalyticalRule, Budget


def can_edit_rule(rule: AutoAnalyticalRule) -> tuple[bool, str]:
    if rule.status == AutoAnalyticalRule.Status.ARCHIVED:
        return False, "Archived rules cannot be changed."
    return True, ""


def can_confirm_rule(rule: AutoAnalyticalRule) -> tuple[bool, str]:
    if rule.status == AutoAnalyticalRule.Status.ARCHIVED:
        return False, "Archived rules cannot be confirmed."
    if rule.rule_status == AutoAnalyticalRule.RuleStatus.CANCELLED:
        return False, "Cancelled rules cannot be confirmed."
    if not rule.analytical_account.is_active:
        return False, "Rule target analytical account is archived."
    return True, ""


def can_edit_budget(budget: Budget) -> tuple[bool, str]:
    if not budget.is_active:
        return False, "Budget is archived."
    if budget.stage != Budget.Stage.DRAFT:
        return False, f"Only draft budgets can be edited (budget is {budget.stage})."
    return True, ""


def can_confirm_budget(budget: Budget) -> tuple[bool, str]:
    if not budget.is_active:
        return False, "Budget is archived."
    if budget.stage != Budget.Stage.DRAFT:
        return False, f"Only draft budgets can be confirmed (budget is {budget.stage})."
    if not budget.lines.exists():
        return False, "Budget has no lines."
    return True, ""


def can_revise_budget(budget: Budget) -> tuple[bool, str]:
    if not budget.is_active:
        return False, "Budget is archived."
    if budget.stage != Budget.Stage.CONFIRM:
        return False, f"Only confirmed budgets can be revised (budget is {budget.stage})."
    return True, ""


def can_cancel_budget(budget: Budget) -> tuple[bool, str]:
    if budget.stage not in (Budget.Stage.DRAFT, Budget.Stage.CONFIRM):
        return False, f"Budget in stage {budget.stage} cannot be cancelled."
    return True, ""
