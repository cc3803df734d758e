from django.contrib import admin
from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from ops.urls import metrics_patterns

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),
    path("_metrics/", include(metrics_patterns)),

    # Admin and API
    path("admin/", admin.site.urls),
    path("api/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("api/accounting/", include("accounting.urls")),
]
