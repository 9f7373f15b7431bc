# masterdata/admin.py
"""
Django admin for master data.

Codes come from the sequence generator, so they are read-only here.
Deactivate instead of deleting: delete permission is disabled.
"""

from django.contrib import admin

from .models import AnalyticalAccount, Contact, Product, ProductCategory


class NoDeleteAdmin(admin.ModelAdmin):
    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Contact)
class ContactAdmin(NoDeleteAdmin):
    list_display = ["code", "name", "type", "email", "city", "is_active"]
    list_filter = ["type", "is_active"]
    search_fields = ["code", "name", "email", "gstin"]
    readonly_fields = ["code", "public_id", "created_at", "updated_at"]

    def has_add_permission(self, request):
        return False


@admin.register(ProductCategory)
class ProductCategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "public_id", "is_active"]
    search_fields = ["name"]
    readonly_fields = ["public_id"]


@admin.register(Product)
class ProductAdmin(NoDeleteAdmin):
    list_display = ["code", "name", "category", "purchase_price", "sale_price", "tax_rate", "is_active"]
    list_filter = ["category", "is_active"]
    search_fields = ["code", "name", "hsn_code"]
    readonly_fields = ["code", "public_id", "created_at", "updated_at"]

    def has_add_permission(self, request):
        return False


@admin.register(AnalyticalAccount)
class AnalyticalAccountAdmin(NoDeleteAdmin):
    list_display = ["code", "name", "parent", "status", "is_active"]
    list_filter = ["status", "is_active"]
    search_fields = ["code", "name"]
    readonly_fields = ["public_id", "created_at", "updated_at"]
