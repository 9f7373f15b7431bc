# analytics/commands.py
"""
Command layer for auto-analytical rules and budgets.

Budget line replacement and revision are single transactions: readers
see either the old budget or the new one, never a half-written state.
"""

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounts.authz import ActorContext, require
from analytics.models import AutoAnalyticalRule, Budget, BudgetLine
from analytics.policies import (
    can_cancel_budget,
    can_confirm_budget,
    can_confirm_rule,
    can_edit_budget,
    can_edit_rule,
    can_revise_budget,
)
from core.commands import CommandError, CommandResult, ErrorKind, invalid_state, not_found
from core.money import round_money
from masterdata.models import AnalyticalAccount, Contact, Product

logger = logging.getLogger(__name__)


# =============================================================================
# Auto-analytical rules
# =============================================================================

def _rule_targets(partner_id, product_id, analytical_account_id):
    """Load FK targets of a rule; raises CommandError(NOT_FOUND)."""
    partner = product = account = None
    if partner_id:
        try:
            partner = Contact.objects.get(pk=partner_id)
        except Contact.DoesNotExist:
            raise CommandError("Partner not found.", ErrorKind.NOT_FOUND)
    if product_id:
        try:
            product = Product.objects.get(pk=product_id)
        except Product.DoesNotExist:
            raise CommandError("Product not found.", ErrorKind.NOT_FOUND)
    if analytical_account_id:
        try:
            account = AnalyticalAccount.objects.get(pk=analytical_account_id, is_active=True)
        except AnalyticalAccount.DoesNotExist:
            raise CommandError("Analytical account not found.", ErrorKind.NOT_FOUND)
    return partner, product, account


def create_rule(
    actor: ActorContext,
    analytical_account_id: int,
    partner_id: int = None,
    partner_tag: str = None,
    product_category: str = None,
    product_id: int = None,
    name: str = "",
    auto_apply: bool = True,
    confirm: bool = False,
) -> CommandResult:
    """
    Create an auto-analytical rule.

    At least one match field is required. With confirm=True the rule is
    immediately confirmed and starts applying to new lines.
    """
    require(actor, "analytics.manage")

    partner_tag = (partner_tag or "").strip() or None
    product_category = (str(product_category).strip() if product_category else "") or None
    if not any([partner_id, partner_tag, product_category, product_id]):
        return CommandResult.fail(
            "A rule needs at least one of partner, partner tag, product category or product."
        )
    if not analytical_account_id:
        return CommandResult.fail("Analytical account is required.")

    try:
        with transaction.atomic():
            partner, product, account = _rule_targets(partner_id, product_id, analytical_account_id)
            rule = AutoAnalyticalRule.objects.create(
                name=name or "",
                partner=partner,
                partner_tag=partner_tag,
                product_category=product_category,
                product=product,
                analytical_account=account,
                auto_apply=auto_apply,
            )
            if confirm:
                _confirm(rule)
    except CommandError as e:
        return e.as_result()

    return CommandResult.ok(rule)


def _confirm(rule: AutoAnalyticalRule) -> None:
    allowed, reason = can_confirm_rule(rule)
    if not allowed:
        raise CommandError(reason, ErrorKind.STATE)
    rule.status = AutoAnalyticalRule.Status.CONFIRMED
    rule.rule_status = AutoAnalyticalRule.RuleStatus.CONFIRM
    rule.confirmed_at = timezone.now()
    rule.save(update_fields=["status", "rule_status", "confirmed_at", "updated_at"])
    logger.info(f"Analytical rule {rule.pk} confirmed")


def update_rule(actor: ActorContext, rule_id: int, **changes) -> CommandResult:
    """
    Change match fields, target or auto_apply of a rule.

    Changes apply to lines created afterwards only; existing lines keep the
    account they were resolved to.
    """
    require(actor, "analytics.manage")

    try:
        with transaction.atomic():
            try:
                rule = AutoAnalyticalRule.objects.select_for_update().get(pk=rule_id)
            except AutoAnalyticalRule.DoesNotExist:
                raise CommandError("Rule not found.", ErrorKind.NOT_FOUND)

            allowed, reason = can_edit_rule(rule)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)

            partner, product, account = _rule_targets(
                changes.get("partner_id"),
                changes.get("product_id"),
                changes.get("analytical_account_id"),
            )
            if "partner_id" in changes:
                rule.partner = partner
            if "product_id" in changes:
                rule.product = product
            if account is not None:
                rule.analytical_account = account
            if "partner_tag" in changes:
                rule.partner_tag = (changes["partner_tag"] or "").strip() or None
            if "product_category" in changes:
                rule.product_category = (str(changes["product_category"] or "").strip()) or None
            if "auto_apply" in changes:
                rule.auto_apply = bool(changes["auto_apply"])
            if "name" in changes:
                rule.name = changes["name"] or ""

            if rule.specificity == 0:
                raise CommandError(
                    "A rule needs at least one of partner, partner tag, product category or product."
                )
            rule.save()
    except CommandError as e:
        return e.as_result()

    return CommandResult.ok(rule)


def _transition_rule(actor: ActorContext, rule_id: int, action) -> CommandResult:
    require(actor, "analytics.manage")
    try:
        with transaction.atomic():
            try:
                rule = AutoAnalyticalRule.objects.select_for_update().get(pk=rule_id)
            except AutoAnalyticalRule.DoesNotExist:
                raise CommandError("Rule not found.", ErrorKind.NOT_FOUND)
            action(rule)
    except CommandError as e:
        return e.as_result()
    return CommandResult.ok(rule)


def confirm_rule(actor: ActorContext, rule_id: int) -> CommandResult:
    return _transition_rule(actor, rule_id, _confirm)


def archive_rule(actor: ActorContext, rule_id: int) -> CommandResult:
    """Archived rules never match again."""

    def _archive(rule):
        if rule.status == AutoAnalyticalRule.Status.ARCHIVED:
            raise CommandError("Rule is already archived.", ErrorKind.STATE)
        rule.status = AutoAnalyticalRule.Status.ARCHIVED
        rule.save(update_fields=["status", "updated_at"])

    return _transition_rule(actor, rule_id, _archive)


def cancel_rule(actor: ActorContext, rule_id: int) -> CommandResult:
    """
    Cancel the rule's workflow status. Matching is driven by status, so a
    cancelled rule is also moved out of CONFIRMED.
    """

    def _cancel(rule):
        if rule.rule_status == AutoAnalyticalRule.RuleStatus.CANCELLED:
            raise CommandError("Rule is already cancelled.", ErrorKind.STATE)
        rule.rule_status = AutoAnalyticalRule.RuleStatus.CANCELLED
        if rule.status == AutoAnalyticalRule.Status.CONFIRMED:
            rule.status = AutoAnalyticalRule.Status.NEW
        rule.save(update_fields=["rule_status", "status", "updated_at"])

    return _transition_rule(actor, rule_id, _cancel)


# =============================================================================
# Budgets
# =============================================================================

def _to_date(value, field: str) -> date:
    if isinstance(value, date):
        return value
    parsed = parse_date(value) if value else None
    if parsed is None:
        raise CommandError(f"{field} must be a date (YYYY-MM-DD).")
    return parsed


def _check_period(period_start: date, period_end: date) -> None:
    if period_end <= period_start:
        raise CommandError("Budget period end must be after its start.")


def _build_lines(budget: Budget, lines) -> list[BudgetLine]:
    """Validate line payloads and build unsaved BudgetLine rows."""
    if not lines:
        raise CommandError("Budget must have at least one line.")

    account_ids = {line.get("analytical_account_id") for line in lines}
    accounts = AnalyticalAccount.objects.in_bulk([a for a in account_ids if a])

    built = []
    for idx, line in enumerate(lines, start=1):
        account = accounts.get(line.get("analytical_account_id"))
        if account is None:
            raise CommandError(f"Line {idx}: analytical account not found.", ErrorKind.NOT_FOUND)

        line_type = line.get("type") or BudgetLine.LineType.EXPENSE
        if line_type not in BudgetLine.LineType.values:
            raise CommandError(f"Line {idx}: invalid type {line_type}.")

        try:
            budgeted = round_money(line.get("budgeted_amount"))
            achieved = round_money(line.get("achieved_amount") or 0)
        except ValueError as e:
            raise CommandError(f"Line {idx}: {e}")
        if budgeted < 0:
            raise CommandError(f"Line {idx}: budgeted amount cannot be negative.")

        built.append(BudgetLine(
            budget=budget,
            analytical_account=account,
            type=line_type,
            budgeted_amount=budgeted,
            achieved_amount=achieved,
        ))
    return built


def _load_budget(budget_id: int, lock: bool = True) -> Budget:
    qs = Budget.objects.select_for_update() if lock else Budget.objects
    try:
        return qs.get(pk=budget_id)
    except Budget.DoesNotExist:
        raise CommandError("Budget not found.", ErrorKind.NOT_FOUND)


def create_budget(
    actor: ActorContext,
    name: str,
    period_start,
    period_end,
    lines: list[dict],
    notes: str = "",
) -> CommandResult:
    """
    Create a DRAFT budget.

    Args:
        lines: [{"analytical_account_id", "type", "budgeted_amount",
                 "achieved_amount"?}, ...]
    """
    require(actor, "budgets.manage")

    if not name or not name.strip():
        return CommandResult.fail("Budget name is required.")

    try:
        with transaction.atomic():
            start = _to_date(period_start, "period_start")
            end = _to_date(period_end, "period_end")
            _check_period(start, end)

            budget = Budget.objects.create(
                name=name.strip(),
                period_start=start,
                period_end=end,
                notes=notes or "",
            )
            BudgetLine.objects.bulk_create(_build_lines(budget, lines))
    except CommandError as e:
        return e.as_result()

    logger.info(f"Budget {budget.pk} '{budget.name}' created")
    return CommandResult.ok(budget)


def update_budget(actor: ActorContext, budget_id: int, lines: list[dict] = None, **changes) -> CommandResult:
    """
    Edit a DRAFT budget. When lines is given it replaces all existing lines
    in the same transaction.
    """
    require(actor, "budgets.manage")

    try:
        with transaction.atomic():
            budget = _load_budget(budget_id)
            allowed, reason = can_edit_budget(budget)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)

            if "name" in changes:
                name = (changes.pop("name") or "").strip()
                if not name:
                    raise CommandError("Budget name is required.")
                budget.name = name
            if "period_start" in changes:
                budget.period_start = _to_date(changes.pop("period_start"), "period_start")
            if "period_end" in changes:
                budget.period_end = _to_date(changes.pop("period_end"), "period_end")
            if "notes" in changes:
                budget.notes = changes.pop("notes") or ""
            if changes:
                raise CommandError(f"Unknown budget fields: {', '.join(sorted(changes))}.")

            _check_period(budget.period_start, budget.period_end)
            budget.save()

            if lines is not None:
                new_lines = _build_lines(budget, lines)
                budget.lines.all().delete()
                BudgetLine.objects.bulk_create(new_lines)
    except CommandError as e:
        return e.as_result()

    return CommandResult.ok(budget)


def confirm_budget(actor: ActorContext, budget_id: int) -> CommandResult:
    require(actor, "budgets.manage")

    try:
        with transaction.atomic():
            budget = _load_budget(budget_id)
            allowed, reason = can_confirm_budget(budget)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)
            budget.stage = Budget.Stage.CONFIRM
            budget.save(update_fields=["stage", "updated_at"])
    except CommandError as e:
        return e.as_result()

    logger.info(f"Budget {budget.pk} confirmed")
    return CommandResult.ok(budget)


def revise_budget(
    actor: ActorContext,
    budget_id: int,
    lines: list[dict] = None,
    name: str = None,
    notes: str = None,
) -> CommandResult:
    """
    Replace a confirmed budget by a revision.

    Creates a new CONFIRM budget pointing back at the original through
    revised_budget (lines copied unless new ones are given) and moves the
    original to REVISED. Both happen in one transaction. The stage flip is
    a conditional update, so two concurrent revisions of the same budget
    cannot both succeed.
    """
    require(actor, "budgets.manage")

    try:
        with transaction.atomic():
            original = _load_budget(budget_id)
            allowed, reason = can_revise_budget(original)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)

            flipped = Budget.objects.filter(
                pk=original.pk,
                stage=Budget.Stage.CONFIRM,
            ).update(stage=Budget.Stage.REVISED, updated_at=timezone.now())
            if not flipped:
                raise CommandError("Budget was revised concurrently.", ErrorKind.CONFLICT)

            revision = Budget.objects.create(
                name=(name or "").strip() or f"{original.name} (Revised)",
                period_start=original.period_start,
                period_end=original.period_end,
                stage=Budget.Stage.CONFIRM,
                revised_budget=original,
                notes=original.notes if notes is None else notes,
            )

            if lines is None:
                lines = [
                    {
                        "analytical_account_id": line.analytical_account_id,
                        "type": line.type,
                        "budgeted_amount": line.budgeted_amount,
                        "achieved_amount": line.achieved_amount,
                    }
                    for line in original.lines.all()
                ]
            BudgetLine.objects.bulk_create(_build_lines(revision, lines))
    except CommandError as e:
        return e.as_result()

    logger.info(f"Budget {original.pk} revised as {revision.pk}")
    return CommandResult.ok(revision)


def cancel_budget(actor: ActorContext, budget_id: int) -> CommandResult:
    require(actor, "budgets.manage")

    try:
        with transaction.atomic():
            budget = _load_budget(budget_id)
            allowed, reason = can_cancel_budget(budget)
            if not allowed:
                raise CommandError(reason, ErrorKind.STATE)
            budget.stage = Budget.Stage.CANCELLED
            budget.save(update_fields=["stage", "updated_at"])
    except CommandError as e:
        return e.as_result()

    return CommandResult.ok(budget)


def set_achieved_amounts(actor: ActorContext, budget_id: int, amounts: dict) -> CommandResult:
    """
    Record achieved amounts.

    Args:
        amounts: {budget_line_id: amount}
    """
    require(actor, "budgets.manage")

    try:
        with transaction.atomic():
            budget = _load_budget(budget_id)
            if budget.stage in (Budget.Stage.CANCELLED, Budget.Stage.REVISED):
                raise CommandError(
                    f"Budget in stage {budget.stage} is closed.",
                    ErrorKind.STATE,
                )

            lines = {line.pk: line for line in budget.lines.all()}
            for line_id, amount in amounts.items():
                try:
                    line = lines.get(int(line_id))
                except (TypeError, ValueError):
                    raise CommandError(f"Invalid budget line id: {line_id}.")
                if line is None:
                    raise CommandError(f"Budget line {line_id} not found.", ErrorKind.NOT_FOUND)
                try:
                    line.achieved_amount = round_money(amount)
                except ValueError as e:
                    raise CommandError(str(e))
                line.save(update_fields=["achieved_amount"])
    except CommandError as e:
        return e.as_result()

    return CommandResult.ok(budget)


@transaction.atomic
def archive_budget(actor: ActorContext, budget_id: int) -> CommandResult:
    """Soft delete: the budget and its revision chain stay queryable."""
    require(actor, "budgets.manage")

    updated = Budget.objects.filter(pk=budget_id, is_active=True).update(
        is_active=False,
        updated_at=timezone.now(),
    )
    if not updated:
        if Budget.objects.filter(pk=budget_id).exists():
            return invalid_state("Budget is already archived.")
        return not_found("Budget not found.")
    return CommandResult.ok(Budget.objects.get(pk=budget_id))


def active_budget_for(day: date) -> Budget | None:
    """The active confirmed budget whose half-open period covers day."""
    return (
        Budget.objects
        .filter(
            is_active=True,
            stage=Budget.Stage.CONFIRM,
            period_start__lte=day,
            period_end__gt=day,
        )
        .order_by("-period_start", "-id")
        .first()
    )
