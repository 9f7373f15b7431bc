# trading/views.py
"""
Thin views for orders and financial documents.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business logic, validation, state transitions.
Portal users reach the same endpoints; querysets and commands restrict
them to their own contact's records.
"""

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor
from core.api import result_response
from .commands import (
    cancel_document,
    cancel_order,
    confirm_order,
    create_order,
    generate_document,
    post_document,
    send_order,
    update_order,
)
from .queries import visible_documents, visible_orders
from .serializers import (
    FinancialDocumentSerializer,
    OrderConfirmSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderUpdateSerializer,
)


def _filter_common(qs, params):
    direction = params.get("direction")
    if direction:
        qs = qs.filter(direction=direction.upper())
    status_ = params.get("status")
    if status_:
        qs = qs.filter(status=status_.upper())
    counterparty = params.get("counterparty")
    if counterparty:
        qs = qs.filter(counterparty_id=counterparty)
    return qs


# =============================================================================
# Order Views
# =============================================================================

class OrderListCreateView(APIView):
    """
    GET /api/trading/orders/?direction=PURCHASE&status=SENT
    POST /api/trading/orders/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        orders = _filter_common(visible_orders(actor), request.query_params)
        return Response(OrderSerializer(orders, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_order(actor, **serializer.validated_data)
        return result_response(result, OrderSerializer, status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    """
    GET /api/trading/orders/<id>/
    PATCH /api/trading/orders/<id>/ -> edit draft (lines replace all lines)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        order = get_object_or_404(visible_orders(actor), pk=pk)
        return Response(OrderSerializer(order).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = OrderUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_order(actor, pk, **serializer.validated_data)
        return result_response(result, OrderSerializer)


class OrderSendView(APIView):
    """POST /api/trading/orders/<id>/send/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        return result_response(send_order(actor, pk), OrderSerializer)


class OrderConfirmView(APIView):
    """
    POST /api/trading/orders/<id>/confirm/

    Also used by the vendor/customer portal for their own orders.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = OrderConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = confirm_order(actor, pk, **serializer.validated_data)
        return result_response(result, OrderSerializer)


class OrderCancelView(APIView):
    """POST /api/trading/orders/<id>/cancel/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        return result_response(cancel_order(actor, pk), OrderSerializer)


class OrderGenerateDocumentView(APIView):
    """
    POST /api/trading/orders/<id>/generate-document/

    Idempotent: returns the existing invoice/bill when there is one.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        initial_status = request.data.get("initial_status") or "DRAFT"
        result = generate_document(actor, pk, initial_status)
        return result_response(result, FinancialDocumentSerializer)


# =============================================================================
# Financial Document Views
# =============================================================================

class DocumentListView(APIView):
    """GET /api/trading/documents/?direction=SALE&status=POSTED"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        documents = _filter_common(visible_documents(actor), request.query_params)
        return Response(FinancialDocumentSerializer(documents, many=True).data)


class DocumentDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        document = get_object_or_404(visible_documents(actor), pk=pk)
        return Response(FinancialDocumentSerializer(document).data)


class DocumentPostView(APIView):
    """POST /api/trading/documents/<id>/post/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        return result_response(post_document(actor, pk), FinancialDocumentSerializer)


class DocumentCancelView(APIView):
    """POST /api/trading/documents/<id>/cancel/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        return result_response(cancel_document(actor, pk), FinancialDocumentSerializer)
