# orders/apps.py

"""
ORDERS APP CONFIG

Order engine:
- creation (totals, business id, payment link)
- read path (by id, filtered list) behind the cache gateway
- status lifecycle (sequential, cashier-only, cache coherent)
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
