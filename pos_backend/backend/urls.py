# backend/urls.py
"""
PROJECT URLS

All API routes live under /api/

- /api/auth/...  register, me, JWT create/refresh
- /api/pos/...   cashier session + orders (pos/urls.py)

Operational maturity:
- /api/health/ (AllowAny) checks DB connectivity and the cache gateway.

Security hardening:
- Django admin path configurable via env var (ADMIN_PATH)
  to reduce bot scanning/noise and narrow attack surface.
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import OperationalError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from caching.apps import get_cache_gateway


# ------------------ API ROOT (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "message": {"type": "string"},
                "auth": {"type": "object"},
                "docs": {"type": "object"},
                "modules": {"type": "object"},
            },
        }
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "POS Order Backend API is running",
            "auth": {
                "register": "/api/auth/register/",
                "me": "/api/auth/me/",
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {
                "swagger": "/api/docs/",
                "schema": "/api/schema/",
            },
            "modules": {
                "pos": "/api/pos/",
                "orders": "/api/pos/orders/",
            },
        }
    )


# ------------------ HEALTH CHECK (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "cache": {"type": "string"},
            },
        },
        503: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "cache": {"type": "string"},
                "error": {"type": "string"},
            },
        },
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    Minimal operational endpoint:
    - Confirms app is responding
    - Confirms DB connection + simple query works
    - Reports whether the cache gateway answers (cache down is degraded,
      not fatal: reads fall back to the database)
    """
    gateway = get_cache_gateway()
    cache_state = "ok" if gateway is not None and gateway.ping() else "down"

    try:
        conn = connections["default"]
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except OperationalError as e:
        return Response(
            {"status": "degraded", "db": "down", "cache": cache_state, "error": str(e)},
            status=503,
        )
    except Exception as e:
        return Response(
            {"status": "degraded", "db": "unknown", "cache": cache_state, "error": str(e)},
            status=503,
        )

    overall = "ok" if cache_state == "ok" else "degraded"
    return Response({"status": overall, "db": "ok", "cache": cache_state})


# ------------------ ADMIN PATH (HARDENED) ------------------
# Default is /admin/ to keep local setups simple.
# In production, set ADMIN_PATH to something non-obvious, e.g.:
#   ADMIN_PATH=control-panel-9f3k/
ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/) ------------------
api_urlpatterns = [
    # Health check / root
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    # OpenAPI / Swagger
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # JWT (SimpleJWT)
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    # Auth & Users
    path("auth/", include("users.urls")),
    # Cashier POS + orders
    path("pos/", include("pos.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    # visiting / takes you to Swagger docs
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
