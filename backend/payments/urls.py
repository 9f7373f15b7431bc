# payments/urls.py
"""
URL configuration for payments API.

Endpoints:
- / - Payment ledger (create, list)
- /<id>/ - Retrieve, delete
- /documents/<id>/ - Payment summary of an invoice/vendor bill
"""

from django.urls import path

from .views import DocumentPaymentsView, PaymentDetailView, PaymentListCreateView

app_name = "payments"

urlpatterns = [
    path("", PaymentListCreateView.as_view(), name="payment-list"),
    path("<int:pk>/", PaymentDetailView.as_view(), name="payment-detail"),
    path("documents/<int:pk>/", DocumentPaymentsView.as_view(), name="document-payments"),
]
