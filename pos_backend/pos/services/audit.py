# pos/services/audit.py

"""
ORDER STATUS AUDIT TRAIL

Every status update attempt a cashier makes (past the role check) leaves
one OrderStatusAudit row: order key, requested change, outcome, error,
client ip / user agent.

Writes go through AuditDispatcher:
- AUDIT_LOG_ASYNC on  -> background worker thread, off the request path
- AUDIT_LOG_ASYNC off -> inline (tests, management commands)

An audit write that fails is logged and dropped. It never turns a
finished status update into an error.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.db import close_old_connections

from pos.models import OrderStatusAudit
from pos.services.sessions import get_or_create_cashier, trim_history

logger = logging.getLogger(__name__)


def _valid_ip(value: str) -> Optional[str]:
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


def client_ip(request) -> Optional[str]:
    forwarded = (request.META.get("HTTP_X_FORWARDED_FOR") or "").split(",")[0].strip()
    return _valid_ip(forwarded) or _valid_ip(request.META.get("REMOTE_ADDR") or "")


def client_user_agent(request) -> str:
    return (request.META.get("HTTP_USER_AGENT") or "")[:255]


# =========================================================
# WRITE
# =========================================================
def log_order_status_update(
    user,
    *,
    order_key: str,
    update_data: dict,
    success: bool,
    error: str = "",
    ip_address: Optional[str] = None,
    user_agent: str = "",
) -> OrderStatusAudit:
    cashier = get_or_create_cashier(user)

    entry = OrderStatusAudit.objects.create(
        cashier=cashier,
        order_key=str(order_key)[:64],
        update_data=update_data or {},
        success=bool(success),
        error=error or "",
        ip_address=ip_address or None,
        user_agent=user_agent or "",
    )
    trim_history(cashier.order_history.all())
    return entry


# =========================================================
# DISPATCH
# =========================================================
class AuditDispatcher:
    def __init__(self, *, asynchronous: Optional[bool] = None, max_workers: int = 2):
        if asynchronous is None:
            asynchronous = bool(getattr(settings, "AUDIT_LOG_ASYNC", False))
        self.asynchronous = asynchronous
        self._executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="order-audit")
            if asynchronous
            else None
        )

    def submit(self, fn: Callable[..., object], *args, **kwargs) -> None:
        if self._executor is None:
            self._run(fn, *args, **kwargs)
            return
        self._executor.submit(self._run, fn, *args, **kwargs)

    def _run(self, fn, *args, **kwargs) -> None:
        try:
            fn(*args, **kwargs)
        except Exception:
            logger.warning("audit write failed, entry dropped", exc_info=True)
        finally:
            # worker threads hold their own DB connections
            if self._executor is not None:
                close_old_connections()

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)


def order_status_auditor(request, *, dispatcher: AuditDispatcher) -> Callable[..., None]:
    """
    Bind the acting cashier and client details of `request` into the
    audit callback update_order_status expects.
    """
    user = request.user
    ip_address = client_ip(request)
    user_agent = client_user_agent(request)

    def audit(*, order_key: str, update_data: dict, success: bool, error: str = "") -> None:
        dispatcher.submit(
            log_order_status_update,
            user,
            order_key=order_key,
            update_data=update_data,
            success=success,
            error=error,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    return audit
