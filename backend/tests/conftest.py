# tests/conftest.py
"""
Pytest fixtures for Shiv Furniture tests.

- ActorContext is built with accounts.authz.actor_for(user)
- Master data is created through the commands so codes come from sequences
- Order helpers drive orders through the real state machine
"""

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model

from accounts.authz import actor_for, system_actor
from masterdata.commands import create_analytical_account, create_contact, create_product
from masterdata.models import Contact
from trading.commands import confirm_order, create_order, send_order
from trading.models import Direction


User = get_user_model()


@pytest.fixture(autouse=True, scope="session")
def _testing_settings():
    """Test-only settings: write barrier relaxed, Celery tasks run inline."""
    from shiv_backend.celery import app

    settings.TESTING = True
    app.conf.task_always_eager = True
    app.conf.task_eager_propagates = False


# =============================================================================
# User & Actor Fixtures
# =============================================================================

@pytest.fixture
def admin_user(db):
    """Create an ADMIN user."""
    return User.objects.create_superuser(
        email="admin@shiv.test",
        password="testpass123",
        name="Test Admin",
    )


@pytest.fixture
def invoicing_user(db):
    """Create an INVOICING (staff) user."""
    return User.objects.create_user(
        email="billing@shiv.test",
        password="testpass123",
        name="Billing Clerk",
        role=User.Role.INVOICING,
    )


@pytest.fixture
def actor(admin_user):
    """ActorContext for the admin user."""
    return actor_for(admin_user)


@pytest.fixture
def invoicing_actor(invoicing_user):
    return actor_for(invoicing_user)


@pytest.fixture
def system():
    return system_actor()


# =============================================================================
# Master Data Fixtures
# =============================================================================

@pytest.fixture
def customer(actor):
    """Customer contact with a portal invite."""
    result = create_contact(
        actor,
        name="Acme Interiors",
        contact_type=Contact.ContactType.CUSTOMER,
        email="buyer@acme.test",
        tags=["retail"],
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def vendor(actor):
    """Vendor contact with a portal invite."""
    result = create_contact(
        actor,
        name="Teak Timber Co",
        contact_type=Contact.ContactType.VENDOR,
        email="sales@teak.test",
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def other_customer(actor):
    result = create_contact(
        actor,
        name="Blue Home Decor",
        contact_type=Contact.ContactType.CUSTOMER,
        email="orders@bluehome.test",
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def production_cc(actor):
    """Cost center for the production floor."""
    result = create_analytical_account(actor, name="Production", code="CC-PROD")
    assert result.success, result.error
    return result.data


@pytest.fixture
def showroom_cc(actor):
    result = create_analytical_account(actor, name="Showroom", code="CC-SHOW")
    assert result.success, result.error
    return result.data


@pytest.fixture
def chair(actor):
    """Finished good: sale 1000, purchase 600, GST 18%."""
    result = create_product(
        actor,
        name="Office Chair",
        purchase_price="600.00",
        sale_price="1000.00",
        tax_rate="18",
        category="FINISHED_GOODS",
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def timber(actor, production_cc):
    """Raw material with a default cost center."""
    result = create_product(
        actor,
        name="Teak Plank",
        purchase_price="250.00",
        sale_price="300.00",
        tax_rate="12",
        category="RAW_MATERIAL",
        analytical_account_id=production_cc.pk,
    )
    assert result.success, result.error
    return result.data


# =============================================================================
# Order Fixtures
# =============================================================================

@pytest.fixture
def make_order(actor):
    """
    Factory: make_order(direction, counterparty, lines, status="DRAFT").

    status may be DRAFT, SENT or CONFIRMED; the order is driven there
    through the commands.
    """

    def _make(direction, counterparty, lines, status="DRAFT", **kwargs):
        result = create_order(actor, direction, counterparty.pk, lines, **kwargs)
        assert result.success, result.error
        order = result.data
        if status in ("SENT", "CONFIRMED"):
            assert send_order(actor, order.pk).success
        if status == "CONFIRMED":
            confirmed = confirm_order(actor, order.pk)
            assert confirmed.success, confirmed.error
        order.refresh_from_db()
        return order

    return _make


@pytest.fixture
def sales_order(make_order, customer, chair):
    """DRAFT sales order: 2 chairs at list price."""
    return make_order(Direction.SALE, customer, [{"product_id": chair.pk, "quantity": "2"}])


@pytest.fixture
def purchase_order(make_order, vendor, timber):
    """DRAFT purchase order: 10 planks at purchase price."""
    return make_order(Direction.PURCHASE, vendor, [{"product_id": timber.pk, "quantity": "10"}])


@pytest.fixture
def invoice(make_order, customer, chair):
    """DRAFT invoice derived from a confirmed sales order (total 2360.00)."""
    order = make_order(
        Direction.SALE, customer, [{"product_id": chair.pk, "quantity": "2"}], status="CONFIRMED",
    )
    return order.financial_document


@pytest.fixture
def vendor_bill(make_order, vendor, timber):
    """DRAFT vendor bill derived from a confirmed purchase order (total 2800.00)."""
    order = make_order(
        Direction.PURCHASE, vendor, [{"product_id": timber.pk, "quantity": "10"}], status="CONFIRMED",
    )
    return order.financial_document


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Create a DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def authenticated_client(api_client, admin_user):
    """API client authenticated as the admin user."""
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def invoicing_client(api_client, invoicing_user):
    api_client.force_authenticate(user=invoicing_user)
    return api_client
