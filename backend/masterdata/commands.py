# masterdata/commands.py
"""
Command layer for master data.

Contacts, products and analytical accounts get human-readable codes from
the sequence generator. Nothing here hard-deletes: deactivate/archive keep
records referenced by orders, documents and payments intact.
"""

import logging
import uuid
from decimal import Decimal

from django.db import transaction

from accounts.authz import ActorContext, require
from accounts.commands import invite_portal_user
from core.commands import CommandResult, not_found
from core.money import to_decimal
from core.sequences import next_sequence_value
from masterdata.models import AnalyticalAccount, Contact, Product, ProductCategory
from masterdata.policies import (
    can_archive_analytical_account,
    can_price_product,
    can_set_parent,
    can_use_tax_rate,
)
from ops.metrics import record_notification_failure

logger = logging.getLogger(__name__)


CONTACT_FIELDS = {
    "name", "email", "phone", "address", "city", "state", "country",
    "pincode", "gstin", "pan", "credit_limit", "payment_terms", "tags",
}

PRODUCT_FIELDS = {"name", "description", "unit", "hsn_code"}


def _clean_tags(tags) -> list[str]:
    if not tags:
        return []
    return sorted({str(t).strip() for t in tags if str(t).strip()})


# =============================================================================
# Contacts
# =============================================================================

@transaction.atomic
def create_contact(
    actor: ActorContext,
    name: str,
    contact_type: str,
    email: str = "",
    send_invite: bool = True,
    tags=None,
    **fields,
) -> CommandResult:
    """
    Create a customer/vendor contact.

    When the contact has an e-mail and send_invite is set, a portal user is
    created (or linked) and the invite is e-mailed after commit. Invite
    problems are logged and returned as warnings; they never fail contact
    creation.

    Returns:
        CommandResult with the created Contact or error
    """
    require(actor, "contacts.manage")

    if not name or not name.strip():
        return CommandResult.fail("Contact name is required.")
    if contact_type not in Contact.ContactType.values:
        return CommandResult.fail(f"Invalid contact type: {contact_type}.")

    unknown = set(fields) - CONTACT_FIELDS
    if unknown:
        return CommandResult.fail(f"Unknown contact fields: {', '.join(sorted(unknown))}.")

    contact = Contact.objects.create(
        code=next_sequence_value("contact"),
        name=name.strip(),
        type=contact_type,
        email=email or "",
        tags=_clean_tags(tags),
        **fields,
    )

    warnings = []
    if contact.email and send_invite:
        try:
            with transaction.atomic():
                invite_portal_user(contact)
        except Exception as e:
            record_notification_failure("portal_invite")
            logger.exception(
                f"Portal invite for contact {contact.code} failed",
                extra={"contact": contact.code},
            )
            warnings.append(f"Portal invite could not be issued: {e}")

    logger.info(f"Contact {contact.code} created", extra={"contact": contact.code})
    return CommandResult.ok(contact, warnings=warnings)


@transaction.atomic
def update_contact(actor: ActorContext, contact_id: int, **changes) -> CommandResult:
    require(actor, "contacts.manage")

    try:
        contact = Contact.objects.select_for_update().get(pk=contact_id)
    except Contact.DoesNotExist:
        return not_found("Contact not found.")

    contact_type = changes.pop("contact_type", None)
    unknown = set(changes) - CONTACT_FIELDS
    if unknown:
        return CommandResult.fail(f"Unknown contact fields: {', '.join(sorted(unknown))}.")

    if contact_type is not None:
        if contact_type not in Contact.ContactType.values:
            return CommandResult.fail(f"Invalid contact type: {contact_type}.")
        contact.type = contact_type

    if "name" in changes and not (changes["name"] or "").strip():
        return CommandResult.fail("Contact name is required.")
    if "tags" in changes:
        changes["tags"] = _clean_tags(changes["tags"])

    for field, value in changes.items():
        setattr(contact, field, value)
    contact.save()

    return CommandResult.ok(contact)


@transaction.atomic
def deactivate_contact(actor: ActorContext, contact_id: int) -> CommandResult:
    """Soft delete. Existing orders, documents and payments keep the reference."""
    require(actor, "contacts.manage")

    updated = Contact.objects.filter(pk=contact_id).update(is_active=False)
    if not updated:
        return not_found("Contact not found.")

    logger.info(f"Contact {contact_id} deactivated")
    return CommandResult.ok(Contact.objects.get(pk=contact_id))


# =============================================================================
# Product categories & products
# =============================================================================

@transaction.atomic
def create_category(actor: ActorContext, name: str, description: str = "") -> CommandResult:
    require(actor, "products.manage")

    name = (name or "").strip()
    if not name:
        return CommandResult.fail("Category name is required.")
    if ProductCategory.objects.filter(name__iexact=name).exists():
        return CommandResult.fail(f"Category '{name}' already exists.")

    category = ProductCategory.objects.create(name=name, description=description)
    return CommandResult.ok(category)


def resolve_category(identifier) -> tuple[str, ProductCategory | None]:
    """
    Map a category identifier to (category enum, custom category).

    A UUID selects a user-defined category; anything else must be one of
    the built-in enum values. Empty means RAW_MATERIAL.

    Raises:
        ProductCategory.DoesNotExist: UUID with no matching category
        ValueError: unknown enum value
    """
    if identifier in (None, ""):
        return Product.Category.RAW_MATERIAL, None

    try:
        public_id = uuid.UUID(str(identifier))
    except ValueError:
        public_id = None

    if public_id is not None:
        category = ProductCategory.objects.get(public_id=public_id)
        return Product.Category.CUSTOM, category

    value = str(identifier).upper()
    if value not in Product.Category.values or value == Product.Category.CUSTOM:
        raise ValueError(f"Invalid product category: {identifier}.")
    return value, None


def _resolve_analytical_account(account_id) -> AnalyticalAccount | None:
    if not account_id:
        return None
    return AnalyticalAccount.objects.get(pk=account_id, is_active=True)


@transaction.atomic
def create_product(
    actor: ActorContext,
    name: str,
    purchase_price=0,
    sale_price=0,
    tax_rate=18,
    category=None,
    analytical_account_id: int = None,
    **fields,
) -> CommandResult:
    """
    Create a product.

    Args:
        category: Built-in category value or a custom category UUID
        analytical_account_id: Default cost center for the product
    """
    require(actor, "products.manage")

    if not name or not name.strip():
        return CommandResult.fail("Product name is required.")
    unknown = set(fields) - PRODUCT_FIELDS
    if unknown:
        return CommandResult.fail(f"Unknown product fields: {', '.join(sorted(unknown))}.")

    try:
        purchase_price = to_decimal(purchase_price, Decimal("0"))
        sale_price = to_decimal(sale_price, Decimal("0"))
        tax_rate = to_decimal(tax_rate, Decimal("18"))
    except ValueError as e:
        return CommandResult.fail(str(e))

    allowed, reason = can_price_product(purchase_price, sale_price)
    if not allowed:
        return CommandResult.fail(reason)
    allowed, reason = can_use_tax_rate(tax_rate)
    if not allowed:
        return CommandResult.fail(reason)

    try:
        category_value, category_ref = resolve_category(category)
    except ProductCategory.DoesNotExist:
        return not_found("Product category not found.")
    except ValueError as e:
        return CommandResult.fail(str(e))

    try:
        account = _resolve_analytical_account(analytical_account_id)
    except AnalyticalAccount.DoesNotExist:
        return not_found("Analytical account not found.")

    product = Product.objects.create(
        code=next_sequence_value("product"),
        name=name.strip(),
        purchase_price=purchase_price,
        sale_price=sale_price,
        tax_rate=tax_rate,
        category=category_value,
        category_ref=category_ref,
        analytical_account=account,
        **fields,
    )

    logger.info(f"Product {product.code} created", extra={"product": product.code})
    return CommandResult.ok(product)


@transaction.atomic
def update_product(actor: ActorContext, product_id: int, **changes) -> CommandResult:
    require(actor, "products.manage")

    try:
        product = Product.objects.select_for_update().get(pk=product_id)
    except Product.DoesNotExist:
        return not_found("Product not found.")

    try:
        if "purchase_price" in changes:
            product.purchase_price = to_decimal(changes.pop("purchase_price"))
        if "sale_price" in changes:
            product.sale_price = to_decimal(changes.pop("sale_price"))
        if "tax_rate" in changes:
            product.tax_rate = to_decimal(changes.pop("tax_rate"))
    except ValueError as e:
        return CommandResult.fail(str(e))

    allowed, reason = can_price_product(product.purchase_price, product.sale_price)
    if not allowed:
        return CommandResult.fail(reason)
    allowed, reason = can_use_tax_rate(product.tax_rate)
    if not allowed:
        return CommandResult.fail(reason)

    if "category" in changes:
        try:
            product.category, product.category_ref = resolve_category(changes.pop("category"))
        except ProductCategory.DoesNotExist:
            return not_found("Product category not found.")
        except ValueError as e:
            return CommandResult.fail(str(e))

    if "analytical_account_id" in changes:
        try:
            product.analytical_account = _resolve_analytical_account(changes.pop("analytical_account_id"))
        except AnalyticalAccount.DoesNotExist:
            return not_found("Analytical account not found.")

    unknown = set(changes) - PRODUCT_FIELDS
    if unknown:
        return CommandResult.fail(f"Unknown product fields: {', '.join(sorted(unknown))}.")
    for field, value in changes.items():
        setattr(product, field, value)

    product.save()
    return CommandResult.ok(product)


@transaction.atomic
def deactivate_product(actor: ActorContext, product_id: int) -> CommandResult:
    require(actor, "products.manage")

    updated = Product.objects.filter(pk=product_id).update(is_active=False)
    if not updated:
        return not_found("Product not found.")
    return CommandResult.ok(Product.objects.get(pk=product_id))


# =============================================================================
# Analytical accounts (cost centers)
# =============================================================================

@transaction.atomic
def create_analytical_account(
    actor: ActorContext,
    name: str,
    code: str = "",
    parent_id: int = None,
    description: str = "",
    status: str = AnalyticalAccount.Status.CONFIRMED,
) -> CommandResult:
    """
    Create a cost center.

    Code comes from the analytical_account sequence when omitted. A
    requested status of NEW is stored as CONFIRMED: cost centers are usable
    as soon as they exist.
    """
    require(actor, "analytics.manage")

    if not name or not name.strip():
        return CommandResult.fail("Analytical account name is required.")

    if status in (None, "", AnalyticalAccount.Status.NEW):
        status = AnalyticalAccount.Status.CONFIRMED
    if status not in AnalyticalAccount.Status.values:
        return CommandResult.fail(f"Invalid status: {status}.")

    code = (code or "").strip()
    if code and AnalyticalAccount.objects.filter(code=code).exists():
        return CommandResult.fail(f"Analytical account code '{code}' already exists.")

    parent = None
    if parent_id:
        try:
            parent = AnalyticalAccount.objects.get(pk=parent_id)
        except AnalyticalAccount.DoesNotExist:
            return not_found("Parent analytical account not found.")
        allowed, reason = can_set_parent(None, parent)
        if not allowed:
            return CommandResult.fail(reason)

    account = AnalyticalAccount.objects.create(
        code=code or next_sequence_value("analytical_account"),
        name=name.strip(),
        description=description,
        parent=parent,
        status=status,
    )

    logger.info(f"Analytical account {account.code} created")
    return CommandResult.ok(account)


@transaction.atomic
def update_analytical_account(actor: ActorContext, account_id: int, **changes) -> CommandResult:
    require(actor, "analytics.manage")

    try:
        account = AnalyticalAccount.objects.select_for_update().get(pk=account_id)
    except AnalyticalAccount.DoesNotExist:
        return not_found("Analytical account not found.")

    if "parent_id" in changes:
        parent_id = changes.pop("parent_id")
        parent = None
        if parent_id:
            try:
                parent = AnalyticalAccount.objects.get(pk=parent_id)
            except AnalyticalAccount.DoesNotExist:
                return not_found("Parent analytical account not found.")
        allowed, reason = can_set_parent(account, parent)
        if not allowed:
            return CommandResult.fail(reason)
        account.parent = parent

    if "name" in changes:
        name = (changes.pop("name") or "").strip()
        if not name:
            return CommandResult.fail("Analytical account name is required.")
        account.name = name
    if "description" in changes:
        account.description = changes.pop("description") or ""
    if "status" in changes:
        status = changes.pop("status")
        if status == AnalyticalAccount.Status.NEW:
            status = AnalyticalAccount.Status.CONFIRMED
        if status not in AnalyticalAccount.Status.values:
            return CommandResult.fail(f"Invalid status: {status}.")
        account.status = status

    if changes:
        return CommandResult.fail(f"Unknown analytical account fields: {', '.join(sorted(changes))}.")

    account.save()
    return CommandResult.ok(account)


@transaction.atomic
def archive_analytical_account(actor: ActorContext, account_id: int) -> CommandResult:
    require(actor, "analytics.manage")

    try:
        account = AnalyticalAccount.objects.select_for_update().get(pk=account_id)
    except AnalyticalAccount.DoesNotExist:
        return not_found("Analytical account not found.")

    allowed, reason = can_archive_analytical_account(account)
    if not allowed:
        return CommandResult.fail(reason)

    account.is_active = False
    account.status = AnalyticalAccount.Status.ARCHIVED
    account.save(update_fields=["is_active", "status", "updated_at"])
    return CommandResult.ok(account)
