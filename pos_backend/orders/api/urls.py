"""
PATH: orders/api/urls.py

ORDER URLS (mounted by pos/urls.py under /api/pos/orders/)
"""

from django.urls import path

from orders.api.views import OrderDetailView, OrderListCreateView, OrderStatusView

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="list-create"),
    path("<str:order_id>/", OrderDetailView.as_view(), name="detail"),
    path("<str:order_id>/status/", OrderStatusView.as_view(), name="status"),
]
