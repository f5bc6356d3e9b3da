# orders/services/conf.py

"""
Order engine knobs, read from settings.ORDERS at call time so tests can
override_settings() them.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings

DEFAULTS = {
    "CACHE_TTL": 3600,
    "LIST_CACHE_TTL": 300,
    "DEFAULT_DELIVERY_FEE": "50.00",
    "CURRENCY": "PHP",
    "PAGE_SIZE": 10,
    "MAX_PAGE_SIZE": 100,
}


def _orders_cfg() -> dict:
    cfg = getattr(settings, "ORDERS", None) or {}
    return {**DEFAULTS, **cfg}


def order_cache_ttl() -> int:
    return int(_orders_cfg()["CACHE_TTL"])


def list_cache_ttl() -> int:
    return int(_orders_cfg()["LIST_CACHE_TTL"])


def default_delivery_fee() -> Decimal:
    return Decimal(str(_orders_cfg()["DEFAULT_DELIVERY_FEE"]))


def currency() -> str:
    return str(_orders_cfg()["CURRENCY"])


def page_size() -> int:
    return int(_orders_cfg()["PAGE_SIZE"])


def max_page_size() -> int:
    return int(_orders_cfg()["MAX_PAGE_SIZE"])
