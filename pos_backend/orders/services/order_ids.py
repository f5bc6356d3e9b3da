# orders/services/order_ids.py

"""
Business order ids: "ORD-" + epoch milliseconds + "-" + 9 uppercase base36 chars.

No uniqueness pre-check. Two ids generated in the same millisecond collide
only if the 9 random characters also match; the unique index on
Order.order_no turns that into a failed insert.
"""

from __future__ import annotations

import secrets
import string
import time

BASE36 = string.digits + string.ascii_uppercase
SUFFIX_LEN = 9
PREFIX = "ORD"


def generate_order_no(*, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36) for _ in range(SUFFIX_LEN))
    return f"{PREFIX}-{now_ms}-{suffix}"
