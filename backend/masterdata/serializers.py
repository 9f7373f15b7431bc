# masterdata/serializers.py
"""
Serializers for the master data API.

Output serializers are ModelSerializers; input serializers are plain
Serializers whose validated_data is passed straight to the commands.
"""

from rest_framework import serializers

from .models import AnalyticalAccount, Contact, Product, ProductCategory


# =============================================================================
# Contacts
# =============================================================================

class ContactSerializer(serializers.ModelSerializer):
    has_portal_user = serializers.SerializerMethodField()

    class Meta:
        model = Contact
        fields = [
            "id", "public_id", "code", "name", "type", "email", "phone",
            "address", "city", "state", "country", "pincode", "gstin", "pan",
            "credit_limit", "payment_terms", "tags", "is_active",
            "has_portal_user", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_has_portal_user(self, obj) -> bool:
        return hasattr(obj, "portal_user")


class ContactCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    contact_type = serializers.ChoiceField(choices=Contact.ContactType.choices)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    send_invite = serializers.BooleanField(required=False, default=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False)
    pincode = serializers.CharField(max_length=12, required=False, allow_blank=True)
    gstin = serializers.CharField(max_length=15, required=False, allow_blank=True)
    pan = serializers.CharField(max_length=10, required=False, allow_blank=True)
    credit_limit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    payment_terms = serializers.IntegerField(min_value=0, required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=100), required=False)


class ContactUpdateSerializer(ContactCreateSerializer):
    name = serializers.CharField(max_length=255, required=False)
    contact_type = serializers.ChoiceField(choices=Contact.ContactType.choices, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    send_invite = None


# =============================================================================
# Products
# =============================================================================

class ProductCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductCategory
        fields = ["id", "public_id", "name", "description", "is_active"]
        read_only_fields = ["id", "public_id", "is_active"]


class ProductSerializer(serializers.ModelSerializer):
    category_key = serializers.CharField(read_only=True)
    category_name = serializers.SerializerMethodField()
    analytical_account_code = serializers.CharField(
        source="analytical_account.code", read_only=True, default=None,
    )

    class Meta:
        model = Product
        fields = [
            "id", "public_id", "code", "name", "description", "category",
            "category_key", "category_name", "unit", "purchase_price",
            "sale_price", "tax_rate", "hsn_code", "analytical_account",
            "analytical_account_code", "is_active", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_category_name(self, obj) -> str:
        if obj.category_ref_id:
            return obj.category_ref.name
        return obj.get_category_display()


class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    # Built-in value (RAW_MATERIAL, ...) or custom category UUID
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    unit = serializers.CharField(max_length=20, required=False)
    purchase_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    sale_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    hsn_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    analytical_account_id = serializers.IntegerField(required=False, allow_null=True)


class ProductUpdateSerializer(ProductCreateSerializer):
    name = serializers.CharField(max_length=255, required=False)


# =============================================================================
# Analytical accounts
# =============================================================================

class AnalyticalAccountSerializer(serializers.ModelSerializer):
    parent_code = serializers.CharField(source="parent.code", read_only=True, default=None)
    children = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = AnalyticalAccount
        fields = [
            "id", "public_id", "code", "name", "description", "parent",
            "parent_code", "children", "status", "is_active", "created_at",
        ]
        read_only_fields = fields


class AnalyticalAccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=AnalyticalAccount.Status.choices, required=False)


class AnalyticalAccountUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=AnalyticalAccount.Status.choices, required=False)
