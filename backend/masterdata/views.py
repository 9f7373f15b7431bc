# masterdata/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business logic, validation, persistence.
"""

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from core.api import result_response
from .commands import (
    archive_analytical_account,
    create_analytical_account,
    create_category,
    create_contact,
    create_product,
    deactivate_contact,
    deactivate_product,
    update_analytical_account,
    update_contact,
    update_product,
)
from .models import AnalyticalAccount, Contact, Product, ProductCategory
from .serializers import (
    AnalyticalAccountCreateSerializer,
    AnalyticalAccountSerializer,
    AnalyticalAccountUpdateSerializer,
    ContactCreateSerializer,
    ContactSerializer,
    ContactUpdateSerializer,
    ProductCategorySerializer,
    ProductCreateSerializer,
    ProductSerializer,
    ProductUpdateSerializer,
)


def _truthy(value) -> bool:
    return str(value).lower() in ("1", "true", "yes")


# =============================================================================
# Contact Views
# =============================================================================

class ContactListCreateView(APIView):
    """
    GET /api/masterdata/contacts/?type=CUSTOMER&include_inactive=1
    POST /api/masterdata/contacts/

    type=CUSTOMER and type=VENDOR also return contacts of type BOTH.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "contacts.view")

        contacts = Contact.objects.all()
        contact_type = request.query_params.get("type")
        if contact_type:
            contacts = contacts.filter(Contact.type_filter(contact_type.upper()))
        if not _truthy(request.query_params.get("include_inactive", "")):
            contacts = contacts.filter(is_active=True)
        search = request.query_params.get("search")
        if search:
            contacts = contacts.filter(name__icontains=search)

        return Response(ContactSerializer(contacts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = ContactCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_contact(actor, **serializer.validated_data)
        return result_response(result, ContactSerializer, status.HTTP_201_CREATED)


class ContactDetailView(APIView):
    """
    GET / PATCH / DELETE /api/masterdata/contacts/<id>/

    DELETE deactivates; contacts are never hard-deleted.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "contacts.view")
        return Response(ContactSerializer(get_object_or_404(Contact, pk=pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = ContactUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_contact(actor, pk, **serializer.validated_data)
        return result_response(result, ContactSerializer)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        result = deactivate_contact(actor, pk)
        return result_response(result, ContactSerializer)


# =============================================================================
# Product Views
# =============================================================================

class ProductCategoryListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "products.view")
        categories = ProductCategory.objects.filter(is_active=True)
        return Response(ProductCategorySerializer(categories, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = ProductCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_category(actor, **serializer.validated_data)
        return result_response(result, ProductCategorySerializer, status.HTTP_201_CREATED)


class ProductListCreateView(APIView):
    """
    GET /api/masterdata/products/?category=RAW_MATERIAL
    POST /api/masterdata/products/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "products.view")

        products = Product.objects.select_related("category_ref", "analytical_account")
        if not _truthy(request.query_params.get("include_inactive", "")):
            products = products.filter(is_active=True)
        category = request.query_params.get("category")
        if category:
            products = products.filter(category=category.upper())

        return Response(ProductSerializer(products, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = ProductCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_product(actor, **serializer.validated_data)
        return result_response(result, ProductSerializer, status.HTTP_201_CREATED)


class ProductDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "products.view")
        product = get_object_or_404(
            Product.objects.select_related("category_ref", "analytical_account"), pk=pk,
        )
        return Response(ProductSerializer(product).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = ProductUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_product(actor, pk, **serializer.validated_data)
        return result_response(result, ProductSerializer)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        result = deactivate_product(actor, pk)
        return result_response(result, ProductSerializer)


# =============================================================================
# Analytical Account Views
# =============================================================================

class AnalyticalAccountListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "analytics.view")

        accounts = AnalyticalAccount.objects.select_related("parent").prefetch_related("children")
        if not _truthy(request.query_params.get("include_inactive", "")):
            accounts = accounts.filter(is_active=True)
        return Response(AnalyticalAccountSerializer(accounts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = AnalyticalAccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_analytical_account(actor, **serializer.validated_data)
        return result_response(result, AnalyticalAccountSerializer, status.HTTP_201_CREATED)


class AnalyticalAccountDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "analytics.view")
        account = get_object_or_404(AnalyticalAccount, pk=pk)
        data = AnalyticalAccountSerializer(account).data
        data["descendants"] = AnalyticalAccount.descendant_ids(account.pk)
        return Response(data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = AnalyticalAccountUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_analytical_account(actor, pk, **serializer.validated_data)
        return result_response(result, AnalyticalAccountSerializer)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        result = archive_analytical_account(actor, pk)
        return result_response(result, AnalyticalAccountSerializer)
