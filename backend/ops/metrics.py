"""
Prometheus metrics endpoint.

Exposes application metrics in Prometheus format for scraping.

Metrics exposed:
- shiv_orders_total: Orders by direction and status
- shiv_financial_documents_total: Invoices/vendor bills by direction and status
- shiv_derived_document_failures_total: Failed invoice/bill generations
- shiv_notification_failures_total: Notifications that could not be delivered
- shiv_request_duration_seconds: HTTP request duration histogram
"""
import logging
import re
import time

from django.db import models
from django.http import HttpResponse
from django.views import View
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

logger = logging.getLogger(__name__)


orders_total = Gauge(
    "shiv_orders_total",
    "Number of orders",
    ["direction", "status"],
)

financial_documents_total = Gauge(
    "shiv_financial_documents_total",
    "Number of invoices and vendor bills",
    ["direction", "status"],
)

derived_document_failures = Counter(
    "shiv_derived_document_failures_total",
    "Invoice/vendor bill generations that failed after order confirmation",
    ["direction"],
)

notification_failures = Counter(
    "shiv_notification_failures_total",
    "Notifications that could not be enqueued or delivered",
    ["kind"],
)

request_duration = Histogram(
    "shiv_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

active_requests = Gauge(
    "shiv_active_requests",
    "Number of requests currently being processed",
)


def record_derivation_failure(direction: str) -> None:
    derived_document_failures.labels(direction=direction).inc()


def record_notification_failure(kind: str) -> None:
    notification_failures.labels(kind=kind).inc()


def collect_metrics():
    """Refresh gauges from the database."""
    from trading.models import FinancialDocument, Order

    order_counts = (
        Order.objects
        .values("direction", "status")
        .annotate(count=models.Count("id"))
    )
    for row in order_counts:
        orders_total.labels(direction=row["direction"], status=row["status"]).set(row["count"])

    document_counts = (
        FinancialDocument.objects
        .values("direction", "status")
        .annotate(count=models.Count("id"))
    )
    for row in document_counts:
        financial_documents_total.labels(
            direction=row["direction"],
            status=row["status"],
        ).set(row["count"])


def get_prometheus_response():
    """Generate Prometheus metrics response."""
    try:
        collect_metrics()
        output = generate_latest()
        return HttpResponse(output, content_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}")
        return HttpResponse(
            f"# Error generating metrics: {e}\n",
            content_type="text/plain",
            status=500,
        )


class MetricsView(View):
    """
    Prometheus metrics endpoint.

    Exposes metrics in Prometheus format at /_metrics.
    Should be protected in production (internal network only).
    """

    def get(self, request):
        return get_prometheus_response()


def _normalize_endpoint(path: str) -> str:
    path = re.sub(r"/\d+/", "/{id}/", path)
    path = re.sub(r"/[0-9a-f-]{36}/", "/{uuid}/", path)
    return path[:50]


def track_request_metrics(get_response):
    """
    Middleware to track request duration metrics.

    Add to MIDDLEWARE after SecurityMiddleware:
        "ops.metrics.track_request_metrics",
    """

    def middleware(request):
        start = time.time()
        active_requests.inc()
        status = 500

        try:
            response = get_response(request)
            status = response.status_code
            return response
        finally:
            active_requests.dec()
            request_duration.labels(
                method=request.method,
                endpoint=_normalize_endpoint(request.path),
                status=f"{status // 100}xx",
            ).observe(time.time() - start)

    return middleware
