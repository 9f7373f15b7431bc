# payments/serializers.py

from rest_framework import serializers

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    contact_name = serializers.CharField(source="contact.name", read_only=True)
    document_number = serializers.CharField(source="document.number", read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            "id", "public_id", "number", "type", "contact", "contact_name",
            "document", "document_number", "amount", "payment_date", "method",
            "reference", "notes", "created_at",
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    payment_type = serializers.ChoiceField(choices=Payment.PaymentType.choices)
    contact_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=16, decimal_places=2)
    document_id = serializers.IntegerField(required=False, allow_null=True)
    payment_date = serializers.DateField(required=False, allow_null=True)
    method = serializers.ChoiceField(choices=Payment.Method.choices, required=False)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
