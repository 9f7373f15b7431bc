# analytics/serializers.py

from rest_framework import serializers

from .models import AutoAnalyticalRule, Budget, BudgetLine


# =============================================================================
# Rules
# =============================================================================

class AutoAnalyticalRuleSerializer(serializers.ModelSerializer):
    specificity = serializers.IntegerField(read_only=True)
    analytical_account_code = serializers.CharField(source="analytical_account.code", read_only=True)

    class Meta:
        model = AutoAnalyticalRule
        fields = [
            "id", "name", "partner", "partner_tag", "product_category",
            "product", "analytical_account", "analytical_account_code",
            "auto_apply", "status", "rule_status", "confirmed_at",
            "specificity", "created_at",
        ]
        read_only_fields = fields


class RuleCreateSerializer(serializers.Serializer):
    analytical_account_id = serializers.IntegerField()
    partner_id = serializers.IntegerField(required=False, allow_null=True)
    partner_tag = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    product_category = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    product_id = serializers.IntegerField(required=False, allow_null=True)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    auto_apply = serializers.BooleanField(required=False, default=True)
    confirm = serializers.BooleanField(required=False, default=False)


class RuleUpdateSerializer(serializers.Serializer):
    analytical_account_id = serializers.IntegerField(required=False)
    partner_id = serializers.IntegerField(required=False, allow_null=True)
    partner_tag = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    product_category = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    product_id = serializers.IntegerField(required=False, allow_null=True)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    auto_apply = serializers.BooleanField(required=False)


class ResolvePreviewSerializer(serializers.Serializer):
    """Which cost center would a line get right now?"""
    product_id = serializers.IntegerField()
    counterparty_id = serializers.IntegerField(required=False, allow_null=True)
    analytical_account_id = serializers.IntegerField(required=False, allow_null=True)


# =============================================================================
# Budgets
# =============================================================================

class BudgetLineSerializer(serializers.ModelSerializer):
    analytical_account_code = serializers.CharField(source="analytical_account.code", read_only=True)
    achievement_percentage = serializers.DecimalField(max_digits=None, decimal_places=2, read_only=True)
    display_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)

    class Meta:
        model = BudgetLine
        fields = [
            "id", "analytical_account", "analytical_account_code", "type",
            "budgeted_amount", "achieved_amount", "achievement_percentage",
            "display_percentage",
        ]
        read_only_fields = fields


class BudgetSerializer(serializers.ModelSerializer):
    lines = BudgetLineSerializer(many=True, read_only=True)

    class Meta:
        model = Budget
        fields = [
            "id", "name", "period_start", "period_end", "stage",
            "revised_budget", "notes", "is_active", "lines", "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BudgetLineInputSerializer(serializers.Serializer):
    analytical_account_id = serializers.IntegerField()
    type = serializers.ChoiceField(choices=BudgetLine.LineType.choices, required=False)
    budgeted_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    achieved_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)


class BudgetCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True)
    lines = BudgetLineInputSerializer(many=True)

    def validate(self, attrs):
        if attrs["period_end"] <= attrs["period_start"]:
            raise serializers.ValidationError("period_end must be after period_start.")
        return attrs


class BudgetUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    period_start = serializers.DateField(required=False)
    period_end = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    lines = BudgetLineInputSerializer(many=True, required=False)


class BudgetReviseSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    lines = BudgetLineInputSerializer(many=True, required=False)


class AchievedAmountsSerializer(serializers.Serializer):
    amounts = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2),
        help_text="{budget_line_id: achieved_amount}",
    )
