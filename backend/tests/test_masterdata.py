# tests/test_masterdata.py
"""
Tests for master data commands.

Tests cover:
- Contact codes, tags and portal invites
- Product pricing and tax policies, custom categories
- Analytical account tree: codes, cycles, archiving
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.db import IntegrityError

from core.commands import ErrorKind
from masterdata.commands import (
    archive_analytical_account,
    create_analytical_account,
    create_category,
    create_contact,
    create_product,
    deactivate_contact,
    update_analytical_account,
    update_product,
)
from masterdata.models import AnalyticalAccount, Contact, Product


User = get_user_model()


@pytest.mark.django_db
class TestContacts:

    def test_codes_come_from_sequence(self, customer, vendor):
        assert customer.code == "CONT-00001"
        assert vendor.code == "CONT-00002"

    def test_tags_are_cleaned(self, actor):
        result = create_contact(
            actor,
            name="Oak House",
            contact_type=Contact.ContactType.BOTH,
            tags=["wholesale", " retail ", "wholesale", ""],
        )

        assert result.success
        assert result.data.tags == ["retail", "wholesale"]

    def test_invalid_type_rejected(self, actor):
        result = create_contact(actor, name="Nobody", contact_type="PARTNER")

        assert not result.success
        assert result.kind == ErrorKind.VALIDATION

    def test_invite_creates_portal_user(self, customer):
        """A contact with an e-mail gets a CUSTOMER portal user without a usable password."""
        user = User.objects.get(email="buyer@acme.test")

        assert user.role == User.Role.CUSTOMER
        assert user.contact_id == customer.pk
        assert not user.has_usable_password()
        assert user.invite_is_valid()

    def test_invite_email_sent_after_commit(
        self, actor, django_capture_on_commit_callbacks, mailoutbox
    ):
        with django_capture_on_commit_callbacks(execute=True):
            result = create_contact(
                actor,
                name="Walnut Works",
                contact_type=Contact.ContactType.VENDOR,
                email="hello@walnut.test",
            )

        assert result.success
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["hello@walnut.test"]
        assert "Set Up Your Account" in mailoutbox[0].subject
        assert User.objects.get(email="hello@walnut.test").role == User.Role.VENDOR

    def test_invite_failure_keeps_contact(self, actor, monkeypatch):
        def broken_invite(contact):
            User.objects.create_user(email=contact.email, name=contact.name)
            raise IntegrityError("duplicate invite token")

        monkeypatch.setattr("masterdata.commands.invite_portal_user", broken_invite)

        result = create_contact(
            actor,
            name="Maple Crafts",
            contact_type=Contact.ContactType.CUSTOMER,
            email="hi@maple.test",
        )

        assert result.success
        assert result.warnings == ["Portal invite could not be issued: duplicate invite token"]
        assert Contact.objects.filter(pk=result.data.pk).exists()
        assert not User.objects.filter(email="hi@maple.test").exists()

    def test_no_invite_without_flag(self, actor):
        create_contact(
            actor,
            name="Quiet Vendor",
            contact_type=Contact.ContactType.VENDOR,
            email="quiet@vendor.test",
            send_invite=False,
        )

        assert not User.objects.filter(email="quiet@vendor.test").exists()

    def test_staff_email_is_not_hijacked(self, actor, admin_user):
        """Contact creation succeeds; the staff account is left alone."""
        result = create_contact(
            actor,
            name="Internal",
            contact_type=Contact.ContactType.CUSTOMER,
            email=admin_user.email,
        )

        assert result.success
        admin_user.refresh_from_db()
        assert admin_user.role == User.Role.ADMIN
        assert admin_user.contact_id is None

    def test_deactivate_is_soft(self, actor, customer):
        result = deactivate_contact(actor, customer.pk)

        assert result.success
        assert Contact.objects.filter(pk=customer.pk, is_active=False).exists()

    def test_invoicing_user_cannot_manage_contacts(self, invoicing_actor):
        with pytest.raises(PermissionDenied):
            create_contact(invoicing_actor, name="X", contact_type=Contact.ContactType.CUSTOMER)


@pytest.mark.django_db
class TestProducts:

    def test_code_and_defaults(self, chair):
        assert chair.code.startswith("PROD-")
        assert chair.category == Product.Category.FINISHED_GOODS
        assert chair.tax_rate == Decimal("18")

    def test_sale_below_purchase_rejected(self, actor):
        result = create_product(actor, name="Loss Leader", purchase_price="500", sale_price="400")

        assert not result.success
        assert result.error == "Sale price must be greater than or equal to purchase price."

    def test_equal_prices_allowed(self, actor):
        result = create_product(actor, name="At Cost", purchase_price="500", sale_price="500")
        assert result.success

    def test_tax_rate_out_of_range(self, actor):
        result = create_product(actor, name="Taxed", purchase_price="1", sale_price="2", tax_rate="120")

        assert not result.success
        assert "Tax rate" in result.error

    def test_update_keeps_price_rule(self, actor, chair):
        result = update_product(actor, chair.pk, purchase_price="1500")

        assert not result.success
        chair.refresh_from_db()
        assert chair.purchase_price == Decimal("600.00")

    def test_invalid_category_rejected(self, actor):
        result = create_product(actor, name="Odd", category="FURNITURE")
        assert not result.success

    def test_custom_category_by_uuid(self, actor):
        category = create_category(actor, "Outdoor").data

        result = create_product(actor, name="Garden Bench", category=str(category.public_id))

        assert result.success
        product = result.data
        assert product.category == Product.Category.CUSTOM
        assert product.category_ref == category
        assert product.category_key == str(category.public_id)

    def test_unknown_category_uuid(self, actor):
        result = create_product(actor, name="Ghost", category="6f1c1f8e-9f43-4b7e-8d1f-1c2a3b4c5d6e")
        assert result.kind == ErrorKind.NOT_FOUND

    def test_duplicate_category_name(self, actor):
        create_category(actor, "Outdoor")
        assert not create_category(actor, "outdoor").success


@pytest.mark.django_db
class TestAnalyticalAccounts:

    def test_generated_code(self, actor):
        result = create_analytical_account(actor, name="Logistics")
        assert result.data.code == "AA-0001"

    def test_new_status_becomes_confirmed(self, actor):
        result = create_analytical_account(actor, name="Marketing", status=AnalyticalAccount.Status.NEW)
        assert result.data.status == AnalyticalAccount.Status.CONFIRMED

    def test_duplicate_code_rejected(self, actor, production_cc):
        result = create_analytical_account(actor, name="Again", code="CC-PROD")
        assert not result.success

    def test_reparent_cycle_rejected(self, actor, production_cc):
        child = create_analytical_account(actor, name="Carpentry", parent_id=production_cc.pk).data
        grandchild = create_analytical_account(actor, name="Lathe", parent_id=child.pk).data

        result = update_analytical_account(actor, production_cc.pk, parent_id=grandchild.pk)

        assert not result.success
        assert "cycle" in result.error

    def test_own_parent_rejected(self, actor, production_cc):
        result = update_analytical_account(actor, production_cc.pk, parent_id=production_cc.pk)
        assert not result.success

    def test_archive_with_active_children_refused(self, actor, production_cc):
        child = create_analytical_account(actor, name="Polishing", parent_id=production_cc.pk).data

        assert not archive_analytical_account(actor, production_cc.pk).success

        assert archive_analytical_account(actor, child.pk).success
        result = archive_analytical_account(actor, production_cc.pk)
        assert result.success
        assert result.data.status == AnalyticalAccount.Status.ARCHIVED
        assert not result.data.is_active
