# analytics/urls.py
"""
URL configuration for analytics API.

Endpoints:
- /rules/ - Auto-analytical rules with confirm/archive/cancel actions
- /rules/resolve/ - Preview which cost center a line would get
- /budgets/ - Budgets with confirm/revise/cancel/achieved actions
- /reports/cost-centers/ - Cost-center performance
"""

from django.urls import path

from .views import (
    BudgetAchievedView,
    BudgetCancelView,
    BudgetConfirmView,
    BudgetDetailView,
    BudgetListCreateView,
    BudgetReviseView,
    CostCenterPerformanceView,
    RuleActionView,
    RuleDetailView,
    RuleListCreateView,
    RuleResolvePreviewView,
)

app_name = "analytics"

urlpatterns = [
    # ==========================================================================
    # Auto-analytical rules
    # ==========================================================================
    path("rules/", RuleListCreateView.as_view(), name="rule-list"),
    path("rules/resolve/", RuleResolvePreviewView.as_view(), name="rule-resolve"),
    path("rules/<int:pk>/", RuleDetailView.as_view(), name="rule-detail"),
    path("rules/<int:pk>/<str:action>/", RuleActionView.as_view(), name="rule-action"),

    # ==========================================================================
    # Budgets
    # ==========================================================================
    path("budgets/", BudgetListCreateView.as_view(), name="budget-list"),
    path("budgets/<int:pk>/", BudgetDetailView.as_view(), name="budget-detail"),
    path("budgets/<int:pk>/confirm/", BudgetConfirmView.as_view(), name="budget-confirm"),
    path("budgets/<int:pk>/revise/", BudgetReviseView.as_view(), name="budget-revise"),
    path("budgets/<int:pk>/cancel/", BudgetCancelView.as_view(), name="budget-cancel"),
    path("budgets/<int:pk>/achieved/", BudgetAchievedView.as_view(), name="budget-achieved"),

    # ==========================================================================
    # Reports
    # ==========================================================================
    path("reports/cost-centers/", CostCenterPerformanceView.as_view(), name="cost-center-performance"),
]
