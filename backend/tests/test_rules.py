# tests/test_rules.py
"""
Tests for auto-analytical rule resolution.

The resolver is pure once given a rule list, so most cases use unsaved
rules and no database.
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from django.utils import timezone

from analytics.commands import archive_rule, cancel_rule, create_rule, update_rule
from analytics.models import AutoAnalyticalRule
from analytics.rules import AnalyticalResolver, LineContext
from core.commands import ErrorKind
from masterdata.commands import archive_analytical_account, create_category, create_product
from masterdata.models import Product
from trading.commands import update_order
from trading.models import Direction


def make_rule(pk, account_id, confirmed_minutes_ago=0, **match):
    return AutoAnalyticalRule(
        pk=pk,
        analytical_account_id=account_id,
        status=AutoAnalyticalRule.Status.CONFIRMED,
        auto_apply=True,
        confirmed_at=timezone.now() - timedelta(minutes=confirmed_minutes_ago),
        **match,
    )


ACME = SimpleNamespace(pk=7, tags=["retail", "premium"])
CHAIR_LINE = LineContext(product_id=100, product_category="FINISHED_GOODS", default_account_id=55)


class TestResolver:

    def test_explicit_account_wins(self):
        resolver = AnalyticalResolver(ACME, rules=[make_rule(1, 10, product_id=100)])
        line = LineContext(product_id=100, explicit_account_id=99, default_account_id=55)

        assert resolver.resolve(line) == 99

    def test_falls_back_to_product_default(self):
        resolver = AnalyticalResolver(ACME, rules=[make_rule(1, 10, product_id=200)])
        assert resolver.resolve(CHAIR_LINE) == 55

    def test_nothing_matches_and_no_default(self):
        resolver = AnalyticalResolver(ACME, rules=[])
        assert resolver.resolve(LineContext(product_id=100)) is None

    def test_most_specific_rule_wins(self):
        rules = [
            make_rule(1, 10, product_category="FINISHED_GOODS"),
            make_rule(2, 20, product_category="FINISHED_GOODS", partner_id=7),
            make_rule(3, 30, partner_tag="retail"),
        ]
        assert AnalyticalResolver(ACME, rules=rules).resolve(CHAIR_LINE) == 20

    def test_tie_goes_to_latest_confirmation(self):
        rules = [
            make_rule(1, 10, confirmed_minutes_ago=5, partner_tag="retail"),
            make_rule(2, 20, confirmed_minutes_ago=60, partner_tag="premium"),
        ]
        assert AnalyticalResolver(ACME, rules=rules).resolve(CHAIR_LINE) == 10

    def test_tie_on_timestamp_goes_to_highest_id(self):
        confirmed = timezone.now()
        first = make_rule(1, 10, product_id=100)
        second = make_rule(2, 20, product_category="FINISHED_GOODS")
        first.confirmed_at = second.confirmed_at = confirmed

        assert AnalyticalResolver(ACME, rules=[first, second]).resolve(CHAIR_LINE) == 20

    def test_every_field_must_match(self):
        rule = make_rule(1, 10, partner_id=7, product_category="RAW_MATERIAL")
        assert AnalyticalResolver(ACME, rules=[rule]).best_rule(CHAIR_LINE) is None

    def test_tag_rule_needs_tagged_partner(self):
        rule = make_rule(1, 10, partner_tag="retail")
        assert AnalyticalResolver(None, rules=[rule]).resolve(CHAIR_LINE) == 55

    def test_unconfirmed_and_manual_rules_ignored(self):
        draft = make_rule(1, 10, product_id=100)
        draft.status = AutoAnalyticalRule.Status.NEW
        manual = make_rule(2, 20, product_id=100)
        manual.auto_apply = False

        assert AnalyticalResolver(ACME, rules=[draft, manual]).resolve(CHAIR_LINE) == 55

    def test_specificity_counts_match_fields(self):
        assert make_rule(1, 10, partner_id=7, partner_tag="retail").specificity == 2


@pytest.mark.django_db
class TestRuleCommands:

    def test_rule_needs_a_match_field(self, actor, showroom_cc):
        result = create_rule(actor, analytical_account_id=showroom_cc.pk)
        assert not result.success

    def test_new_rule_is_not_applied_until_confirmed(self, actor, showroom_cc, chair, customer):
        rule = create_rule(actor, analytical_account_id=showroom_cc.pk, product_id=chair.pk).data

        assert rule.status == AutoAnalyticalRule.Status.NEW
        assert AnalyticalResolver(customer).resolve(LineContext.for_product(chair)) is None

    def test_confirmed_rule_applies_to_order_lines(self, actor, showroom_cc, make_order, customer, chair):
        create_rule(actor, analytical_account_id=showroom_cc.pk, partner_tag="retail", confirm=True)

        order = make_order(Direction.SALE, customer, [{"product_id": chair.pk, "quantity": "1"}])

        assert order.lines.get().analytical_account_id == showroom_cc.pk

    def test_rule_beats_product_default(self, actor, showroom_cc, production_cc, make_order, vendor, timber):
        create_rule(actor, analytical_account_id=showroom_cc.pk, partner_id=vendor.pk, confirm=True)

        order = make_order(Direction.PURCHASE, vendor, [{"product_id": timber.pk, "quantity": "1"}])

        assert order.lines.get().analytical_account_id == showroom_cc.pk

    def test_product_default_when_no_rule(self, make_order, vendor, timber, production_cc):
        order = make_order(Direction.PURCHASE, vendor, [{"product_id": timber.pk, "quantity": "1"}])
        assert order.lines.get().analytical_account_id == production_cc.pk

    def test_explicit_line_account_kept(self, actor, showroom_cc, production_cc, make_order, vendor, timber):
        create_rule(actor, analytical_account_id=showroom_cc.pk, product_id=timber.pk, confirm=True)

        order = make_order(
            Direction.PURCHASE,
            vendor,
            [{"product_id": timber.pk, "quantity": "1", "analytical_account_id": production_cc.pk}],
        )

        assert order.lines.get().analytical_account_id == production_cc.pk

    def test_custom_category_rule(self, actor, showroom_cc, customer):
        category = create_category(actor, "Outdoor").data
        bench = create_product(actor, name="Garden Bench", category=str(category.public_id)).data
        create_rule(
            actor,
            analytical_account_id=showroom_cc.pk,
            product_category=str(category.public_id),
            confirm=True,
        )

        assert AnalyticalResolver(customer).resolve(LineContext.for_product(bench)) == showroom_cc.pk

    def test_cancel_and_archive_stop_matching(self, actor, showroom_cc, chair, customer):
        rule = create_rule(actor, analytical_account_id=showroom_cc.pk, product_id=chair.pk, confirm=True).data

        cancelled = cancel_rule(actor, rule.pk).data
        assert cancelled.rule_status == AutoAnalyticalRule.RuleStatus.CANCELLED
        assert cancelled.status == AutoAnalyticalRule.Status.NEW
        assert AnalyticalResolver(customer).resolve(LineContext.for_product(chair)) is None

        assert archive_rule(actor, rule.pk).success
        assert archive_rule(actor, rule.pk).kind == ErrorKind.STATE

    def test_archived_rule_cannot_be_edited(self, actor, showroom_cc, chair):
        rule = create_rule(actor, analytical_account_id=showroom_cc.pk, product_id=chair.pk).data
        archive_rule(actor, rule.pk)

        result = update_rule(actor, rule.pk, name="renamed")
        assert result.kind == ErrorKind.STATE

    def test_update_cannot_clear_all_match_fields(self, actor, showroom_cc, chair):
        rule = create_rule(actor, analytical_account_id=showroom_cc.pk, product_id=chair.pk).data

        result = update_rule(actor, rule.pk, product_id=None)

        assert not result.success
        rule.refresh_from_db()
        assert rule.product_id == chair.pk

    def test_counterparty_change_re_resolves_lines(
        self, actor, showroom_cc, production_cc, make_order, customer, other_customer, chair
    ):
        create_rule(actor, analytical_account_id=showroom_cc.pk, partner_id=customer.pk, confirm=True)
        order = make_order(
            Direction.SALE,
            customer,
            [
                {"product_id": chair.pk, "quantity": "1"},
                {"product_id": chair.pk, "quantity": "1", "analytical_account_id": production_cc.pk},
            ],
        )
        assert [line.analytical_account_id for line in order.lines.all()] == [showroom_cc.pk, production_cc.pk]

        result = update_order(actor, order.pk, counterparty_id=other_customer.pk)

        assert result.success, result.error
        assert [line.analytical_account_id for line in order.lines.all()] == [None, production_cc.pk]

    def test_archived_rule_target_is_skipped(self, actor, showroom_cc, chair, customer):
        create_rule(actor, analytical_account_id=showroom_cc.pk, product_id=chair.pk, confirm=True)

        assert archive_analytical_account(actor, showroom_cc.pk).success

        assert AnalyticalResolver(customer).resolve(LineContext.for_product(chair)) is None

    def test_archived_product_default_is_skipped(self, actor, vendor, timber, production_cc):
        assert archive_analytical_account(actor, production_cc.pk).success

        product = Product.objects.get(pk=timber.pk)

        assert AnalyticalResolver(vendor).resolve(LineContext.for_product(product)) is None
