"""
PATH: pos/urls.py

POS URLS

Purpose:
- Cashier session (login, logout, admin force logout)
- Cashier audit trail
- Order engine (orders/api/urls.py)
"""

from django.urls import include, path

from pos.views import (
    CashierOrderHistoryView,
    PosForceLogoutView,
    PosLoginView,
    PosLogoutView,
)

app_name = "pos"

urlpatterns = [
    path("login/", PosLoginView.as_view(), name="login"),
    path("logout/", PosLogoutView.as_view(), name="logout"),
    path("force-logout/", PosForceLogoutView.as_view(), name="force-logout"),

    path(
        "cashiers/<str:user_name>/order-history/",
        CashierOrderHistoryView.as_view(),
        name="cashier-order-history",
    ),

    path("orders/", include("orders.api.urls")),
]
