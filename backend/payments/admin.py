# payments/admin.py

from django.contrib import admin

from core.admin import ReadOnlyModelAdmin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(ReadOnlyModelAdmin):
    list_display = ["number", "type", "contact", "document", "amount", "payment_date", "method"]
    list_filter = ["type", "method"]
    search_fields = ["number", "reference", "contact__name", "document__number"]
