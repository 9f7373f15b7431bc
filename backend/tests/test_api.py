# tests/test_api.py
"""
API tests: authentication, status-code mapping of command errors, and
the main order -> invoice -> payment flow over HTTP.
"""

import pytest
from django.utils import timezone

from payments.commands import record_payment


@pytest.mark.django_db
class TestAuth:

    def test_login_returns_tokens(self, api_client, admin_user):
        response = api_client.post(
            "/api/auth/login/",
            {"email": "admin@shiv.test", "password": "testpass123"},
            format="json",
        )

        assert response.status_code == 200
        assert "access" in response.data
        assert "refresh" in response.data

    def test_login_bad_password(self, api_client, admin_user):
        response = api_client.post(
            "/api/auth/login/",
            {"email": "admin@shiv.test", "password": "wrong"},
            format="json",
        )
        assert response.status_code == 401

    def test_me_lists_permissions(self, invoicing_client):
        response = invoicing_client.get("/api/auth/me/")

        assert response.status_code == 200
        assert response.data["user"]["role"] == "INVOICING"
        assert "orders.confirm" in response.data["permissions"]
        assert "payments.delete" not in response.data["permissions"]

    def test_anonymous_rejected(self, api_client):
        assert api_client.get("/api/trading/orders/").status_code == 401

    def test_accept_invite(self, api_client, customer):
        user = customer.portal_user
        token = user.issue_invite_token()
        user.save()

        response = api_client.post(
            "/api/auth/accept-invite/",
            {"token": token, "password": "Sturdy-Teak-42"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["user"]["email"] == "buyer@acme.test"
        assert response.data["access"]

    def test_accept_invite_unknown_token(self, api_client, db):
        response = api_client.post(
            "/api/auth/accept-invite/",
            {"token": "nope", "password": "Sturdy-Teak-42"},
            format="json",
        )

        assert response.status_code == 404
        assert response.data["code"] == "not_found"


@pytest.mark.django_db
class TestOrderFlow:

    def test_sale_to_payment(self, authenticated_client, customer, chair):
        created = authenticated_client.post(
            "/api/trading/orders/",
            {
                "direction": "SALE",
                "counterparty_id": customer.pk,
                "lines": [{"product_id": chair.pk, "quantity": "2"}],
            },
            format="json",
        )
        assert created.status_code == 201, created.data
        order_id = created.data["id"]
        assert created.data["total_amount"] == "2360.00"

        assert authenticated_client.post(f"/api/trading/orders/{order_id}/send/").status_code == 200
        confirmed = authenticated_client.post(
            f"/api/trading/orders/{order_id}/confirm/",
            {"document_status": "POSTED"},
            format="json",
        )
        assert confirmed.status_code == 200
        assert "warnings" not in confirmed.data

        documents = authenticated_client.get("/api/trading/documents/?direction=SALE").data
        assert len(documents) == 1
        document = documents[0]
        assert document["status"] == "POSTED"

        paid = authenticated_client.post(
            "/api/payments/",
            {
                "payment_type": "INCOMING",
                "contact_id": customer.pk,
                "document_id": document["id"],
                "amount": "2360.00",
            },
            format="json",
        )
        assert paid.status_code == 201

        summary = authenticated_client.get(f"/api/payments/documents/{document['id']}/").data
        assert summary["payment_status"] == "PAID"

    def test_state_error_is_409(self, authenticated_client, sales_order):
        response = authenticated_client.post(f"/api/trading/orders/{sales_order.pk}/confirm/")

        assert response.status_code == 409
        assert response.data["code"] == "state"

    def test_cancel_with_document_is_409(self, authenticated_client, invoice):
        response = authenticated_client.post(f"/api/trading/orders/{invoice.source_order_id}/cancel/")

        assert response.status_code == 409
        assert response.data["code"] == "conflict"

    def test_validation_error_is_400(self, authenticated_client, vendor, chair):
        response = authenticated_client.post(
            "/api/trading/orders/",
            {
                "direction": "SALE",
                "counterparty_id": vendor.pk,
                "lines": [{"product_id": chair.pk, "quantity": "1"}],
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.data["code"] == "validation"

    def test_overpayment_is_400(self, authenticated_client, customer, invoice):
        response = authenticated_client.post(
            "/api/payments/",
            {
                "payment_type": "INCOMING",
                "contact_id": customer.pk,
                "document_id": invoice.pk,
                "amount": "9999.00",
            },
            format="json",
        )
        assert response.status_code == 400

    def test_missing_order_is_404(self, authenticated_client):
        assert authenticated_client.post("/api/trading/orders/9999/send/").status_code == 404


@pytest.mark.django_db
class TestPermissions:

    def test_invoicing_user_cannot_create_contact(self, invoicing_client):
        response = invoicing_client.post(
            "/api/masterdata/contacts/",
            {"name": "New Vendor", "contact_type": "VENDOR"},
            format="json",
        )
        assert response.status_code == 403

    def test_invoicing_user_cannot_delete_payment(self, invoicing_client, actor, customer, invoice):
        payment = record_payment(actor, "INCOMING", customer.pk, "10", document_id=invoice.pk).data

        assert invoicing_client.delete(f"/api/payments/{payment.pk}/").status_code == 403

    def test_portal_user_sees_only_own_orders(self, api_client, customer, other_customer, make_order, chair):
        make_order("SALE", customer, [{"product_id": chair.pk, "quantity": "1"}], status="SENT")
        make_order("SALE", other_customer, [{"product_id": chair.pk, "quantity": "1"}], status="SENT")
        api_client.force_authenticate(user=customer.portal_user)

        response = api_client.get("/api/trading/orders/")

        assert response.status_code == 200
        assert [o["counterparty"] for o in response.data] == [customer.pk]


@pytest.mark.django_db
class TestAnalyticsApi:

    def test_rule_lifecycle(self, authenticated_client, showroom_cc, chair):
        created = authenticated_client.post(
            "/api/analytics/rules/",
            {"analytical_account_id": showroom_cc.pk, "product_id": chair.pk},
            format="json",
        )
        assert created.status_code == 201
        rule_id = created.data["id"]

        confirmed = authenticated_client.post(f"/api/analytics/rules/{rule_id}/confirm/")
        assert confirmed.data["status"] == "CONFIRMED"

        preview = authenticated_client.post(
            "/api/analytics/rules/resolve/", {"product_id": chair.pk}, format="json"
        )
        assert preview.data == {"analytical_account_id": showroom_cc.pk, "rule_id": rule_id}

    def test_unknown_rule_action(self, authenticated_client, showroom_cc, chair):
        created = authenticated_client.post(
            "/api/analytics/rules/",
            {"analytical_account_id": showroom_cc.pk, "product_id": chair.pk},
            format="json",
        )
        response = authenticated_client.post(f"/api/analytics/rules/{created.data['id']}/explode/")
        assert response.status_code == 404

    def test_budget_and_report(self, authenticated_client, production_cc, vendor_bill):
        year = timezone.localdate().year
        created = authenticated_client.post(
            "/api/analytics/budgets/",
            {
                "name": f"Budget {year}",
                "period_start": f"{year}-01-01",
                "period_end": f"{year + 1}-01-01",
                "lines": [{"analytical_account_id": production_cc.pk, "budgeted_amount": "7000.00"}],
            },
            format="json",
        )
        assert created.status_code == 201
        budget_id = created.data["id"]
        assert authenticated_client.post(f"/api/analytics/budgets/{budget_id}/confirm/").status_code == 200

        report = authenticated_client.get(f"/api/analytics/reports/cost-centers/?year={year}").data

        row = next(r for r in report["cost_centers"] if r["analytical_account_id"] == production_cc.pk)
        assert row["total_expenses"] == 2800
        assert row["utilization_percentage"] == 40
        assert len(report["monthly_trend"]) == 12

    def test_budget_period_validated(self, authenticated_client, production_cc):
        response = authenticated_client.post(
            "/api/analytics/budgets/",
            {
                "name": "Backwards",
                "period_start": "2026-12-31",
                "period_end": "2026-01-01",
                "lines": [{"analytical_account_id": production_cc.pk, "budgeted_amount": "1"}],
            },
            format="json",
        )
        assert response.status_code == 400

    def test_achieved_amounts_with_bad_line_id(self, authenticated_client, production_cc):
        created = authenticated_client.post(
            "/api/analytics/budgets/",
            {
                "name": "FY 2026",
                "period_start": "2026-04-01",
                "period_end": "2027-04-01",
                "lines": [{"analytical_account_id": production_cc.pk, "budgeted_amount": "100"}],
            },
            format="json",
        )

        response = authenticated_client.post(
            f"/api/analytics/budgets/{created.data['id']}/achieved/",
            {"amounts": {"abc": "5"}},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["detail"] == "Invalid budget line id: abc."


@pytest.mark.django_db
class TestSequencesApi:

    def test_configure_prefix(self, authenticated_client, invoice):
        response = authenticated_client.patch("/api/sequences/invoice/", {"prefix": "gst"}, format="json")

        assert response.status_code == 200
        assert response.data["prefix"] == "GST"
        assert response.data["next_number"] == 2

    def test_requires_permission(self, invoicing_client):
        assert invoicing_client.get("/api/sequences/").status_code == 403


def test_liveness(client):
    response = client.get("/_health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "alive"}
