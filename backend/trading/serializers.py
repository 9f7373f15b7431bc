# trading/serializers.py
"""
Serializers for orders, invoices and vendor bills.

Input line payloads are validated for shape here; business validation
(product active, quantity > 0, tax rate range, ...) happens in the
commands so that every caller gets the same rules.
"""

from rest_framework import serializers

from .models import Direction, FinancialDocument, FinancialDocumentLine, Order, OrderLine


class OrderLineSerializer(serializers.ModelSerializer):
    product_code = serializers.CharField(source="product.code", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = OrderLine
        fields = [
            "id", "line_no", "product", "product_code", "product_name",
            "description", "quantity", "unit_price", "tax_rate", "subtotal",
            "tax_amount", "line_total", "analytical_account",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    counterparty_name = serializers.CharField(source="counterparty.name", read_only=True)
    lines = OrderLineSerializer(many=True, read_only=True)
    document = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id", "public_id", "direction", "number", "counterparty",
            "counterparty_name", "order_date", "expected_date", "status",
            "subtotal", "tax_amount", "total_amount", "notes", "lines",
            "document", "sent_at", "confirmed_at", "cancelled_at",
            "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_document(self, obj):
        document = FinancialDocument.objects.filter(source_order_id=obj.pk).only(
            "id", "number", "status",
        ).first()
        if document is None:
            return None
        return {"id": document.pk, "number": document.number, "status": document.status}


class OrderLineInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    analytical_account_id = serializers.IntegerField(required=False, allow_null=True)


class OrderCreateSerializer(serializers.Serializer):
    direction = serializers.ChoiceField(choices=Direction.choices)
    counterparty_id = serializers.IntegerField()
    order_date = serializers.DateField(required=False, allow_null=True)
    expected_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    lines = OrderLineInputSerializer(many=True)


class OrderUpdateSerializer(serializers.Serializer):
    counterparty_id = serializers.IntegerField(required=False)
    order_date = serializers.DateField(required=False)
    expected_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    lines = OrderLineInputSerializer(many=True, required=False)


class OrderConfirmSerializer(serializers.Serializer):
    document_status = serializers.ChoiceField(
        choices=[FinancialDocument.Status.DRAFT, FinancialDocument.Status.POSTED],
        required=False,
        default=FinancialDocument.Status.DRAFT,
    )


class FinancialDocumentLineSerializer(serializers.ModelSerializer):
    product_code = serializers.CharField(source="product.code", read_only=True)

    class Meta:
        model = FinancialDocumentLine
        fields = [
            "id", "line_no", "product", "product_code", "description",
            "quantity", "unit_price", "tax_rate", "subtotal", "tax_amount",
            "line_total", "analytical_account",
        ]
        read_only_fields = fields


class FinancialDocumentSerializer(serializers.ModelSerializer):
    counterparty_name = serializers.CharField(source="counterparty.name", read_only=True)
    source_order_number = serializers.CharField(source="source_order.number", read_only=True)
    amount_due = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)
    payment_status = serializers.CharField(read_only=True)
    lines = FinancialDocumentLineSerializer(many=True, read_only=True)

    class Meta:
        model = FinancialDocument
        fields = [
            "id", "public_id", "direction", "number", "counterparty",
            "counterparty_name", "source_order", "source_order_number",
            "document_date", "due_date", "status", "subtotal", "tax_amount",
            "total_amount", "paid_amount", "amount_due", "payment_status",
            "notes", "lines", "posted_at", "cancelled_at", "created_at",
        ]
        read_only_fields = fields
