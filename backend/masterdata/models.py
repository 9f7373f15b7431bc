# masterdata/models.py
"""
Master data: contacts, products, product categories and analytical
accounts (cost centers).

Master records are never hard-deleted once referenced by a transaction;
deactivation clears is_active instead.
"""

import uuid

from django.db import models
from django.db.models import Q


class Contact(models.Model):
    """Customer and/or vendor."""

    class ContactType(models.TextChoices):
        CUSTOMER = "CUSTOMER", "Customer"
        VENDOR = "VENDOR", "Vendor"
        BOTH = "BOTH", "Customer & Vendor"

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=10, choices=ContactType.choices)

    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=30, blank=True, default="")
    address = models.TextField(blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    country = models.CharField(max_length=100, default="India")
    pincode = models.CharField(max_length=12, blank=True, default="")
    gstin = models.CharField(max_length=15, blank=True, default="")
    pan = models.CharField(max_length=10, blank=True, default="")

    credit_limit = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    payment_terms = models.PositiveIntegerField(default=30)

    # Free-form labels matched by partner-tag analytical rules
    tags = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["type", "is_active"], name="contact_type_active_idx"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def can_sell_to(self) -> bool:
        return self.type in (self.ContactType.CUSTOMER, self.ContactType.BOTH)

    def can_buy_from(self) -> bool:
        return self.type in (self.ContactType.VENDOR, self.ContactType.BOTH)

    def has_tag(self, tag: str) -> bool:
        return tag in (self.tags or [])

    @classmethod
    def type_filter(cls, contact_type: str) -> Q:
        """CUSTOMER and VENDOR filters also include BOTH."""
        if contact_type in (cls.ContactType.CUSTOMER, cls.ContactType.VENDOR):
            return Q(type=contact_type) | Q(type=cls.ContactType.BOTH)
        return Q(type=contact_type)


class ProductCategory(models.Model):
    """User-defined product category, addressed by its UUID."""

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Product categories"

    def __str__(self):
        return self.name


class Product(models.Model):

    class Category(models.TextChoices):
        RAW_MATERIAL = "RAW_MATERIAL", "Raw material"
        FINISHED_GOODS = "FINISHED_GOODS", "Finished goods"
        CONSUMABLES = "CONSUMABLES", "Consumables"
        SERVICES = "SERVICES", "Services"
        CUSTOM = "CUSTOM", "Custom category"

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.RAW_MATERIAL,
    )
    category_ref = models.ForeignKey(
        ProductCategory,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
    )

    unit = models.CharField(max_length=20, default="PCS")
    purchase_price = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    sale_price = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=18)
    hsn_code = models.CharField(max_length=20, blank=True, default="")

    # Default cost center, used when no auto-analytical rule matches
    analytical_account = models.ForeignKey(
        "masterdata.AnalyticalAccount",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="default_for_products",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(sale_price__gte=models.F("purchase_price")),
                name="product_sale_price_gte_purchase_price",
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def category_key(self) -> str:
        """
        Category identifier used by analytical rule matching: the custom
        category's UUID string, or the built-in enum value.
        """
        if self.category == self.Category.CUSTOM and self.category_ref_id:
            return str(self.category_ref.public_id)
        return self.category


class AnalyticalAccount(models.Model):
    """Cost center. Optional parent forms a tree."""

    class Status(models.TextChoices):
        NEW = "NEW", "New"
        CONFIRMED = "CONFIRMED", "Confirmed"
        ARCHIVED = "ARCHIVED", "Archived"

    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.CONFIRMED)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @classmethod
    def descendant_ids(cls, account_id: int) -> list[int]:
        """
        All ids below account_id, walked level by level through the
        parent index (one query per depth level).
        """
        found = []
        seen = {account_id}
        frontier = [account_id]
        while frontier:
            children = list(
                cls.objects.filter(parent_id__in=frontier).values_list("id", flat=True)
            )
            frontier = [c for c in children if c not in seen]
            seen.update(frontier)
            found.extend(frontier)
        return found
