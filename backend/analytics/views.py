# analytics/views.py
"""
Thin views for rules, budgets and cost-center reports.
"""

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from core.api import result_response
from masterdata.models import Contact, Product
from .commands import (
    archive_budget,
    archive_rule,
    cancel_budget,
    cancel_rule,
    confirm_budget,
    confirm_rule,
    create_budget,
    create_rule,
    revise_budget,
    set_achieved_amounts,
    update_budget,
    update_rule,
)
from .models import AutoAnalyticalRule, Budget
from .reports import cost_center_performance, monthly_trend
from .rules import AnalyticalResolver, LineContext
from .serializers import (
    AchievedAmountsSerializer,
    AutoAnalyticalRuleSerializer,
    BudgetCreateSerializer,
    BudgetReviseSerializer,
    BudgetSerializer,
    BudgetUpdateSerializer,
    ResolvePreviewSerializer,
    RuleCreateSerializer,
    RuleUpdateSerializer,
)


# =============================================================================
# Rule Views
# =============================================================================

class RuleListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "analytics.view")

        rules = AutoAnalyticalRule.objects.select_related("analytical_account")
        status_ = request.query_params.get("status")
        if status_:
            rules = rules.filter(status=status_.upper())
        return Response(AutoAnalyticalRuleSerializer(rules, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = RuleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_rule(actor, **serializer.validated_data)
        return result_response(result, AutoAnalyticalRuleSerializer, status.HTTP_201_CREATED)


class RuleDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "analytics.view")
        rule = get_object_or_404(AutoAnalyticalRule.objects.select_related("analytical_account"), pk=pk)
        return Response(AutoAnalyticalRuleSerializer(rule).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = RuleUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_rule(actor, pk, **serializer.validated_data)
        return result_response(result, AutoAnalyticalRuleSerializer)


class RuleActionView(APIView):
    """POST /api/analytics/rules/<id>/<confirm|archive|cancel>/"""
    permission_classes = [IsAuthenticated]
    actions = {
        "confirm": confirm_rule,
        "archive": archive_rule,
        "cancel": cancel_rule,
    }

    def post(self, request, pk, action):
        actor = resolve_actor(request)
        command = self.actions.get(action)
        if command is None:
            return Response({"detail": f"Unknown action: {action}"}, status=status.HTTP_404_NOT_FOUND)
        return result_response(command(actor, pk), AutoAnalyticalRuleSerializer)


class RuleResolvePreviewView(APIView):
    """POST /api/analytics/rules/resolve/ -> {"analytical_account_id": ...}"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "analytics.view")

        serializer = ResolvePreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        product = get_object_or_404(Product.objects.select_related("category_ref"), pk=data["product_id"])
        counterparty = None
        if data.get("counterparty_id"):
            counterparty = get_object_or_404(Contact, pk=data["counterparty_id"])

        resolver = AnalyticalResolver(counterparty)
        line = LineContext.for_product(product, data.get("analytical_account_id"))
        rule = resolver.best_rule(line)
        return Response({
            "analytical_account_id": resolver.resolve(line),
            "rule_id": rule.pk if rule and not line.explicit_account_id else None,
        })


# =============================================================================
# Budget Views
# =============================================================================

class BudgetListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "budgets.view")

        budgets = Budget.objects.prefetch_related("lines__analytical_account")
        if request.query_params.get("include_archived", "").lower() not in ("1", "true", "yes"):
            budgets = budgets.filter(is_active=True)
        stage = request.query_params.get("stage")
        if stage:
            budgets = budgets.filter(stage=stage.upper())
        return Response(BudgetSerializer(budgets, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = BudgetCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_budget(actor, **serializer.validated_data)
        return result_response(result, BudgetSerializer, status.HTTP_201_CREATED)


class BudgetDetailView(APIView):
    """
    GET / PATCH / DELETE /api/analytics/budgets/<id>/

    PATCH only works on drafts; DELETE archives.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "budgets.view")
        return Response(BudgetSerializer(get_object_or_404(Budget, pk=pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = BudgetUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_budget(actor, pk, **serializer.validated_data)
        return result_response(result, BudgetSerializer)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        return result_response(archive_budget(actor, pk), BudgetSerializer)


class BudgetConfirmView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        return result_response(confirm_budget(actor, pk), BudgetSerializer)


class BudgetReviseView(APIView):
    """POST /api/analytics/budgets/<id>/revise/ -> the new revision (201)"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = BudgetReviseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = revise_budget(actor, pk, **serializer.validated_data)
        return result_response(result, BudgetSerializer, status.HTTP_201_CREATED)


class BudgetCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        return result_response(cancel_budget(actor, pk), BudgetSerializer)


class BudgetAchievedView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = AchievedAmountsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = set_achieved_amounts(actor, pk, serializer.validated_data["amounts"])
        return result_response(result, BudgetSerializer)


# =============================================================================
# Report Views
# =============================================================================

class CostCenterPerformanceView(APIView):
    """GET /api/analytics/reports/cost-centers/?year=2026&analytical_account=<id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        try:
            year = int(request.query_params.get("year") or timezone.localdate().year)
        except ValueError:
            return Response({"detail": "year must be an integer."}, status=status.HTTP_400_BAD_REQUEST)
        account_id = request.query_params.get("analytical_account") or None

        return Response({
            "year": year,
            "cost_centers": cost_center_performance(year, account_id),
            "monthly_trend": monthly_trend(year, account_id),
        })
