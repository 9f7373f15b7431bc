# analytics/admin.py

from django.contrib import admin

from .models import AutoAnalyticalRule, Budget, BudgetLine


@admin.register(AutoAnalyticalRule)
class AutoAnalyticalRuleAdmin(admin.ModelAdmin):
    list_display = [
        "id", "name", "partner", "partner_tag", "product_category", "product",
        "analytical_account", "auto_apply", "status", "confirmed_at",
    ]
    list_filter = ["status", "rule_status", "auto_apply"]
    raw_id_fields = ["partner", "product", "analytical_account"]
    readonly_fields = ["confirmed_at", "created_at", "updated_at"]


class BudgetLineInline(admin.TabularInline):
    model = BudgetLine
    extra = 0
    raw_id_fields = ["analytical_account"]


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ["name", "period_start", "period_end", "stage", "revised_budget", "is_active"]
    list_filter = ["stage", "is_active"]
    search_fields = ["name"]
    inlines = [BudgetLineInline]
    readonly_fields = ["stage", "revised_budget", "created_at", "updated_at"]
