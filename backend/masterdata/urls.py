# masterdata/urls.py
"""
URL configuration for master data API.

Endpoints:
- /contacts/ - Customers and vendors
- /categories/ - User-defined product categories
- /products/ - Products
- /analytical-accounts/ - Cost centers
"""

from django.urls import path

from .views import (
    AnalyticalAccountDetailView,
    AnalyticalAccountListCreateView,
    ContactDetailView,
    ContactListCreateView,
    ProductCategoryListCreateView,
    ProductDetailView,
    ProductListCreateView,
)

app_name = "masterdata"

urlpatterns = [
    # ==========================================================================
    # Contacts
    # ==========================================================================
    path("contacts/", ContactListCreateView.as_view(), name="contact-list"),
    path("contacts/<int:pk>/", ContactDetailView.as_view(), name="contact-detail"),

    # ==========================================================================
    # Products
    # ==========================================================================
    path("categories/", ProductCategoryListCreateView.as_view(), name="category-list"),
    path("products/", ProductListCreateView.as_view(), name="product-list"),
    path("products/<int:pk>/", ProductDetailView.as_view(), name="product-detail"),

    # ==========================================================================
    # Analytical accounts
    # ==========================================================================
    path("analytical-accounts/", AnalyticalAccountListCreateView.as_view(), name="analytical-account-list"),
    path(
        "analytical-accounts/<int:pk>/",
        AnalyticalAccountDetailView.as_view(),
        name="analytical-account-detail",
    ),
]
