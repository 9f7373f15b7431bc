from django.contrib import admin
from django.urls import include, path

from ops.urls import metrics_patterns

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),
    path("_metrics/", include(metrics_patterns)),

    # Admin and API
    path("admin/", admin.site.urls),
    path("api/auth/", include("accounts.urls")),
    path("api/masterdata/", include("masterdata.urls")),
    path("api/analytics/", include("analytics.urls")),
    path("api/trading/", include("trading.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/sequences/", include("core.urls")),
]
