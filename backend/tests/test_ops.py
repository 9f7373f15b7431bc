# tests/test_ops.py
"""
Tests for health checks, metrics and structured logging.
"""

import json
import logging

import pytest

from ops.logging_config import JsonFormatter, get_logging_config


@pytest.mark.django_db
class TestHealth:

    def test_ready(self, client):
        response = client.get("/_health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_full_reports_derivation_backlog(self, settings, client, make_order, customer, chair, monkeypatch):
        settings.CELERY_BROKER_URL = "memory://"
        settings.MISSING_DOCUMENT_THRESHOLD = 1

        def broken(order, initial_status):
            raise RuntimeError("down")

        monkeypatch.setattr("trading.commands.generate_derived_document", broken)
        make_order("SALE", customer, [{"product_id": chair.pk, "quantity": "1"}], status="CONFIRMED")

        response = client.get("/_health/full")

        body = response.json()
        assert response.status_code == 503
        assert body["checks"]["redis"]["status"] == "skipped"
        assert body["checks"]["derived_documents"] == {"status": "degraded", "missing": 1, "threshold": 1}

    def test_full_healthy(self, settings, client):
        settings.CELERY_BROKER_URL = "memory://"

        response = client.get("/_health/full")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


@pytest.mark.django_db
def test_metrics_endpoint(client, sales_order):
    response = client.get("/_metrics/")

    assert response.status_code == 200
    body = response.content.decode()
    assert 'shiv_orders_total{direction="SALE",status="DRAFT"} 1.0' in body
    assert "shiv_request_duration_seconds" in body


class TestJsonFormatter:

    def make_record(self, **extra):
        record = logging.LogRecord(
            name="trading.commands",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="SO-00001 confirmed",
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_business_ids_are_top_level(self):
        line = JsonFormatter().format(self.make_record(order_number="SO-00001", status="CONFIRMED"))
        entry = json.loads(line)

        assert entry["message"] == "SO-00001 confirmed"
        assert entry["logger"] == "trading.commands"
        assert entry["order_number"] == "SO-00001"
        assert entry["extra"] == {"status": "CONFIRMED"}

    def test_unserializable_extra_is_stringified(self):
        entry = json.loads(JsonFormatter().format(self.make_record(payload=object())))
        assert entry["extra"]["payload"].startswith("<object object")

    def test_app_loggers_configured(self):
        config = get_logging_config(debug=True)

        assert config["formatters"]["verbose"]
        for name in ("trading", "payments", "analytics"):
            assert config["loggers"][name]["propagate"] is False
