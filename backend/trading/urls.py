# trading/urls.py
"""
URL configuration for trading API.

Endpoints:
- /orders/ - Sales and purchase orders with workflow actions
- /documents/ - Customer invoices and vendor bills
"""

from django.urls import path

from .views import (
    DocumentCancelView,
    DocumentDetailView,
    DocumentListView,
    DocumentPostView,
    OrderCancelView,
    OrderConfirmView,
    OrderDetailView,
    OrderGenerateDocumentView,
    OrderListCreateView,
    OrderSendView,
)

app_name = "trading"

urlpatterns = [
    # ==========================================================================
    # Orders
    # ==========================================================================
    path("orders/", OrderListCreateView.as_view(), name="order-list"),
    path("orders/<int:pk>/", OrderDetailView.as_view(), name="order-detail"),
    path("orders/<int:pk>/send/", OrderSendView.as_view(), name="order-send"),
    path("orders/<int:pk>/confirm/", OrderConfirmView.as_view(), name="order-confirm"),
    path("orders/<int:pk>/cancel/", OrderCancelView.as_view(), name="order-cancel"),
    path(
        "orders/<int:pk>/generate-document/",
        OrderGenerateDocumentView.as_view(),
        name="order-generate-document",
    ),

    # ==========================================================================
    # Invoices & vendor bills
    # ==========================================================================
    path("documents/", DocumentListView.as_view(), name="document-list"),
    path("documents/<int:pk>/", DocumentDetailView.as_view(), name="document-detail"),
    path("documents/<int:pk>/post/", DocumentPostView.as_view(), name="document-post"),
    path("documents/<int:pk>/cancel/", DocumentCancelView.as_view(), name="document-cancel"),
]
