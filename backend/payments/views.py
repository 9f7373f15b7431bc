# payments/views.py
"""
Thin views for the payment ledger.

Payments are created and deleted only; there is no update endpoint.
"""

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from core.api import result_response
from trading.queries import visible_documents
from .commands import delete_payment, document_payment_summary, record_payment
from .models import Payment
from .serializers import PaymentCreateSerializer, PaymentSerializer


class PaymentListCreateView(APIView):
    """
    GET /api/payments/?type=INCOMING&contact=<id>&document=<id>
    POST /api/payments/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "payments.view")

        payments = Payment.objects.select_related("contact", "document")
        params = request.query_params
        if params.get("type"):
            payments = payments.filter(type=params["type"].upper())
        if params.get("contact"):
            payments = payments.filter(contact_id=params["contact"])
        if params.get("document"):
            payments = payments.filter(document_id=params["document"])

        return Response(PaymentSerializer(payments, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = record_payment(actor, **serializer.validated_data)
        return result_response(result, PaymentSerializer, status.HTTP_201_CREATED)


class PaymentDetailView(APIView):
    """GET / DELETE /api/payments/<id>/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "payments.view")
        payment = get_object_or_404(Payment.objects.select_related("contact", "document"), pk=pk)
        return Response(PaymentSerializer(payment).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        return result_response(delete_payment(actor, pk))


class DocumentPaymentsView(APIView):
    """GET /api/payments/documents/<id>/ -> paid/due summary with ledger rows"""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        document = get_object_or_404(visible_documents(actor), pk=pk)
        return Response(document_payment_summary(document))
