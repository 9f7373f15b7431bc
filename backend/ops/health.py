"""
Health check endpoints for operations monitoring.

Provides health checks for:
- Database connectivity (all configured databases)
- Redis/Celery broker connectivity
- Confirmed orders still waiting for their invoice/vendor bill

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can we serve traffic?)
- /_health/full    - full health report (for debugging/dashboards)
"""
import logging
import time
from typing import Any, Callable, Dict

import redis
from django.conf import settings
from django.db import connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


def _timed(probe: Callable[[], None], **labels) -> Dict[str, Any]:
    """Run probe; report healthy/unhealthy with its duration."""
    start = time.time()
    try:
        probe()
    except Exception as e:
        logger.warning(f"Health probe failed: {e}", extra=labels)
        return {
            "status": "unhealthy",
            **labels,
            "error": str(e),
            "duration_ms": round((time.time() - start) * 1000, 2),
        }
    return {
        "status": "healthy",
        **labels,
        "duration_ms": round((time.time() - start) * 1000, 2),
    }


class HealthCheck:

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        def probe():
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()

        return _timed(probe, alias=alias)

    @staticmethod
    def check_all_databases() -> Dict[str, Any]:
        results = {alias: HealthCheck.check_database(alias) for alias in settings.DATABASES}
        healthy = all(r["status"] == "healthy" for r in results.values())
        return {
            "status": "healthy" if healthy else "degraded",
            "databases": results,
        }

    @staticmethod
    def check_redis() -> Dict[str, Any]:
        """Ping the Celery broker when it is Redis."""
        redis_url = getattr(settings, "CELERY_BROKER_URL", None)
        if not redis_url or not redis_url.startswith("redis"):
            return {"status": "skipped", "reason": "Redis not configured"}
        return _timed(lambda: redis.from_url(redis_url).ping())

    @staticmethod
    def check_missing_documents() -> Dict[str, Any]:
        """Confirmed orders without an invoice/vendor bill (derivation backlog)."""
        from trading.derivation import orders_missing_documents

        threshold = getattr(settings, "MISSING_DOCUMENT_THRESHOLD", 10)
        try:
            missing = orders_missing_documents().count()
        except Exception as e:
            return {"status": "error", "error": str(e)}
        return {
            "status": "healthy" if missing < threshold else "degraded",
            "missing": missing,
            "threshold": threshold,
        }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        checks = {
            "databases": HealthCheck.check_all_databases(),
            "redis": HealthCheck.check_redis(),
            "derived_documents": HealthCheck.check_missing_documents(),
        }

        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s in ("healthy", "skipped") for s in statuses):
            overall = "healthy"
        elif "unhealthy" in statuses:
            overall = "unhealthy"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "development" if settings.DEBUG else "production",
        }


class LivenessView(View):
    """Process is up. No dependency checks."""

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """Database reachable -> 200, otherwise 503."""

    def get(self, request):
        db_check = HealthCheck.check_database("default")
        ready = db_check["status"] == "healthy"
        return JsonResponse(
            {"status": "ready" if ready else "not_ready", "database": db_check},
            status=200 if ready else 503,
        )


class FullHealthView(View):
    """
    Full health report. Degraded or unhealthy -> 503.

    Internal network only in production.
    """

    def get(self, request):
        health = HealthCheck.get_full_health()
        return JsonResponse(health, status=200 if health["status"] == "healthy" else 503)
