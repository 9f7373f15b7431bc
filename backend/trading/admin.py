# trading/admin.py
"""
Django admin for orders and financial documents.

Read-only: status transitions, derivation and paid_amount are owned by
trading.commands and payments.commands.
"""

from django.contrib import admin

from core.admin import ReadOnlyModelAdmin
from .models import FinancialDocument, FinancialDocumentLine, Order, OrderLine


class ReadOnlyInline(admin.TabularInline):
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class OrderLineInline(ReadOnlyInline):
    model = OrderLine
    fields = ["line_no", "product", "quantity", "unit_price", "tax_rate", "line_total", "analytical_account"]
    readonly_fields = fields


class FinancialDocumentLineInline(ReadOnlyInline):
    model = FinancialDocumentLine
    fields = ["line_no", "product", "quantity", "unit_price", "tax_rate", "line_total", "analytical_account"]
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(ReadOnlyModelAdmin):
    list_display = ["number", "direction", "counterparty", "order_date", "status", "total_amount"]
    list_filter = ["direction", "status"]
    search_fields = ["number", "counterparty__name"]
    inlines = [OrderLineInline]


@admin.register(FinancialDocument)
class FinancialDocumentAdmin(ReadOnlyModelAdmin):
    list_display = [
        "number", "direction", "counterparty", "source_order", "status",
        "total_amount", "paid_amount", "due_date",
    ]
    list_filter = ["direction", "status"]
    search_fields = ["number", "source_order__number", "counterparty__name"]
    inlines = [FinancialDocumentLineInline]
