# analytics/rules.py
"""
Auto-analytical rule engine.

Resolution order for one line:
1. An analytical account given explicitly on the line wins.
2. Otherwise candidates are the rules with auto_apply=True and status
   CONFIRMED whose every non-null match field equals the line's value.
   The candidate with the most non-null match fields wins; ties go to the
   most recently confirmed rule, then to the highest id.
3. Otherwise the product's default analytical account.
4. Otherwise no analytical account.

Rules and defaults pointing at an archived analytical account are skipped.

Matching is pure: AnalyticalResolver loads the rule set and counterparty
once, then resolves any number of lines without further queries.
"""

from dataclasses import dataclass

from analytics.models import AutoAnalyticalRule


@dataclass(frozen=True)
class LineContext:
    """What rule matching needs to know about one document line."""
    product_id: int | None
    product_category: str | None = None
    explicit_account_id: int | None = None
    default_account_id: int | None = None

    @classmethod
    def for_product(cls, product, explicit_account_id: int | None = None) -> "LineContext":
        return cls(
            product_id=product.pk if product else None,
            product_category=product.category_key if product else None,
            explicit_account_id=explicit_account_id,
            default_account_id=_active_default(product),
        )


def _active_default(product) -> int | None:
    if product is None or product.analytical_account_id is None:
        return None
    return product.analytical_account_id if product.analytical_account.is_active else None


def applicable_rules():
    return (
        AutoAnalyticalRule.objects
        .filter(
            auto_apply=True,
            status=AutoAnalyticalRule.Status.CONFIRMED,
            analytical_account__is_active=True,
        )
        .only(
            "id", "partner_id", "partner_tag", "product_category", "product_id",
            "analytical_account_id", "auto_apply", "status", "confirmed_at",
        )
    )


def _rank(rule: AutoAnalyticalRule) -> tuple:
    confirmed = rule.confirmed_at.timestamp() if rule.confirmed_at else float("-inf")
    return (rule.specificity, confirmed, rule.pk or 0)


class AnalyticalResolver:
    """
    Resolves cost centers for the lines of one document.

    Usage:
        resolver = AnalyticalResolver(order.counterparty)
        for line in lines:
            line.analytical_account_id = resolver.resolve(
                LineContext.for_product(line.product, line.analytical_account_id)
            )
    """

    def __init__(self, counterparty=None, rules=None):
        self.partner_id = counterparty.pk if counterparty is not None else None
        self.partner_tags = frozenset(getattr(counterparty, "tags", None) or [])
        if rules is None:
            rules = applicable_rules()
        self.rules = [rule for rule in rules if rule.is_applicable]

    def matches(self, rule: AutoAnalyticalRule, line: LineContext) -> bool:
        if rule.partner_id is not None and rule.partner_id != self.partner_id:
            return False
        if rule.partner_tag and rule.partner_tag not in self.partner_tags:
            return False
        if rule.product_category and rule.product_category != line.product_category:
            return False
        if rule.product_id is not None and rule.product_id != line.product_id:
            return False
        return True

    def best_rule(self, line: LineContext) -> AutoAnalyticalRule | None:
        candidates = [rule for rule in self.rules if self.matches(rule, line)]
        if not candidates:
            return None
        return max(candidates, key=_rank)

    def resolve(self, line: LineContext) -> int | None:
        if line.explicit_account_id:
            return line.explicit_account_id
        rule = self.best_rule(line)
        if rule is not None:
            return rule.analytical_account_id
        return line.default_account_id


def resolve_analytical_account(line: LineContext, counterparty=None) -> int | None:
    """Resolve a single line. Loads the rule set; use AnalyticalResolver for batches."""
    return AnalyticalResolver(counterparty).resolve(line)
