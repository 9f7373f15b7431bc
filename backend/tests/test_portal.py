# tests/test_portal.py
"""
Tests for the vendor/customer portal.

Tests cover:
- Accepting an invite (token, expiry, password rules)
- Portal visibility of orders and documents
- Confirming an own order; other contacts' orders are refused
"""

from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.utils import timezone

from accounts.authz import actor_for
from accounts.commands import accept_invite, create_admin_user, invite_portal_user, resend_invite
from core.commands import ErrorKind
from trading.commands import confirm_order, send_order
from trading.models import Direction, FinancialDocument, Order
from trading.queries import visible_documents, visible_orders


User = get_user_model()


@pytest.fixture
def invite_token(customer):
    """Fresh raw token for the customer's portal user."""
    user = customer.portal_user
    token = user.issue_invite_token()
    user.save()
    return token


@pytest.fixture
def customer_actor(customer):
    return actor_for(customer.portal_user)


@pytest.mark.django_db
class TestAcceptInvite:

    def test_accept_sets_password(self, customer, invite_token):
        result = accept_invite(invite_token, "Sturdy-Teak-42", name="Asha Mehta")

        assert result.success, result.error
        user = result.data
        assert user.check_password("Sturdy-Teak-42")
        assert user.name == "Asha Mehta"
        assert user.invite_token_hash == ""

    def test_token_is_single_use(self, invite_token):
        accept_invite(invite_token, "Sturdy-Teak-42")

        assert accept_invite(invite_token, "Sturdy-Teak-42").kind == ErrorKind.NOT_FOUND

    def test_unknown_token(self, db):
        assert accept_invite("not-a-token", "Sturdy-Teak-42").kind == ErrorKind.NOT_FOUND

    def test_expired_token(self, customer, invite_token):
        User.objects.filter(pk=customer.portal_user.pk).update(
            invite_expires_at=timezone.now() - timedelta(minutes=1)
        )

        result = accept_invite(invite_token, "Sturdy-Teak-42")

        assert result.kind == ErrorKind.VALIDATION
        assert "expired" in result.error

    def test_weak_password(self, invite_token):
        result = accept_invite(invite_token, "short")

        assert result.kind == ErrorKind.VALIDATION
        assert result.error

    def test_resend_issues_new_token(self, actor, customer, invite_token):
        old_hash = User.objects.get(contact=customer).invite_token_hash

        assert resend_invite(actor, customer.pk).success

        assert User.objects.get(contact=customer).invite_token_hash != old_hash
        assert accept_invite(invite_token, "Sturdy-Teak-42").kind == ErrorKind.NOT_FOUND

    def test_invite_links_existing_portal_user(self, actor, customer):
        """Re-inviting the same contact reuses its user."""
        user = invite_portal_user(customer)
        assert user.pk == customer.portal_user.pk
        assert User.objects.filter(email="buyer@acme.test").count() == 1


@pytest.mark.django_db
class TestCreateAdmin:

    def test_create_admin(self):
        result = create_admin_user("owner@shiv.test", "Sturdy-Teak-42", "Owner")

        assert result.success
        assert result.data.role == User.Role.ADMIN
        assert result.data.is_superuser

    def test_existing_user_conflicts(self, admin_user):
        result = create_admin_user(admin_user.email, "Sturdy-Teak-42")
        assert result.kind == ErrorKind.CONFLICT


@pytest.mark.django_db
class TestPortalVisibility:

    def test_customer_sees_own_non_draft_orders(
        self, customer_actor, customer, other_customer, make_order, chair
    ):
        draft = make_order(Direction.SALE, customer, [{"product_id": chair.pk, "quantity": "1"}])
        sent = make_order(Direction.SALE, customer, [{"product_id": chair.pk, "quantity": "1"}], status="SENT")
        make_order(Direction.SALE, other_customer, [{"product_id": chair.pk, "quantity": "1"}], status="SENT")

        visible = list(visible_orders(customer_actor))

        assert visible == [sent]
        assert draft not in visible

    def test_customer_sees_own_documents(self, customer_actor, invoice, vendor_bill):
        assert list(visible_documents(customer_actor)) == [invoice]

    def test_vendor_sees_own_bills(self, vendor, invoice, vendor_bill):
        vendor_actor = actor_for(vendor.portal_user)
        assert list(visible_documents(vendor_actor)) == [vendor_bill]

    def test_staff_sees_everything(self, invoicing_actor, invoice, vendor_bill):
        assert visible_documents(invoicing_actor).count() == 2

    def test_inactive_user_refused(self, invoicing_user):
        invoicing_user.is_active = False

        with pytest.raises(PermissionDenied):
            visible_orders(actor_for(invoicing_user))


@pytest.mark.django_db
class TestPortalConfirm:

    def test_customer_confirms_own_order(self, customer_actor, make_order, customer, chair):
        order = make_order(Direction.SALE, customer, [{"product_id": chair.pk, "quantity": "1"}], status="SENT")

        result = confirm_order(customer_actor, order.pk, document_status=FinancialDocument.Status.POSTED)

        assert result.success, result.error
        order.refresh_from_db()
        assert order.status == Order.Status.CONFIRMED
        assert order.financial_document.status == FinancialDocument.Status.DRAFT

    def test_vendor_confirms_purchase_order(self, actor, vendor, purchase_order):
        vendor_actor = actor_for(vendor.portal_user)
        send_order(actor, purchase_order.pk)

        assert confirm_order(vendor_actor, purchase_order.pk).success

    def test_other_contacts_order_refused(self, customer_actor, make_order, other_customer, chair):
        order = make_order(Direction.SALE, other_customer, [{"product_id": chair.pk, "quantity": "1"}], status="SENT")

        with pytest.raises(PermissionDenied):
            confirm_order(customer_actor, order.pk)

        order.refresh_from_db()
        assert order.status == Order.Status.SENT

    def test_portal_user_cannot_send(self, customer_actor, sales_order):
        with pytest.raises(PermissionDenied):
            send_order(customer_actor, sales_order.pk)
