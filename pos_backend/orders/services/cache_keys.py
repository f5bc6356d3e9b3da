# orders/services/cache_keys.py

"""
Cache key layout for orders.

    order:<business id>        single order snapshot
    orders:<canonical json>    one list page (filters + paging + sort)

Any order write drops the single key and every "orders:*" key.
"""

from __future__ import annotations

import json

ORDER_KEY_PREFIX = "order:"
LIST_KEY_PREFIX = "orders:"
LIST_KEY_PATTERN = LIST_KEY_PREFIX + "*"


def order_key(order_id: str) -> str:
    return f"{ORDER_KEY_PREFIX}{order_id}"


def list_key(params: dict) -> str:
    """Pure function of the normalized params: same params, same key."""
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return f"{LIST_KEY_PREFIX}{canonical}"
