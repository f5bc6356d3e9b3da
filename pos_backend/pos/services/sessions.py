# pos/services/sessions.py

"""
CASHIER SESSIONS

Flow:
    login        -> block if a session is live -> mark live -> history -> cache mirror
    logout       -> clear live session -> history -> drop cache mirror
    force_logout -> (admin) drop cache mirror -> find cashier -> must be live
                    -> logout on their behalf -> report previous session

Hard rules:
- One live session per cashier. A second login gets 409 until the first
  device logs out or an admin forces it.
- Login history is capped at CASHIER_HISTORY_LIMIT rows per cashier.
- The cache entry cashier_session:<user_name> is a mirror; losing it is harmless.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from permissions.roles import ROLE_CASHIER, get_user_role
from pos.models import Cashier, CashierLoginEvent
from pos.services.exceptions import (
    CashierNotFoundError,
    CashierSessionError,
    CashierValidationError,
)

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "cashier_session:"
SESSION_CACHE_TTL = 60 * 60 * 12


def session_key(user_name: str) -> str:
    return f"{SESSION_KEY_PREFIX}{(user_name or '').strip().lower()}"


def history_limit() -> int:
    return int(getattr(settings, "CASHIER_HISTORY_LIMIT", 50))


def trim_history(queryset, *, limit: Optional[int] = None) -> int:
    """Delete everything but the newest `limit` rows of a per-cashier history."""
    limit = history_limit() if limit is None else limit
    keep = list(queryset.order_by("-created_at", "-id").values_list("id", flat=True)[:limit])
    deleted, _ = queryset.exclude(id__in=keep).delete()
    return deleted


# =========================================================
# PROFILE
# =========================================================
def get_or_create_cashier(user) -> Cashier:
    if get_user_role(user) != ROLE_CASHIER:
        raise CashierNotFoundError()

    cashier, created = Cashier.objects.get_or_create(
        user=user,
        defaults={
            "user_name": user.username,
            "name": user.full_name or user.username,
        },
    )
    if created:
        logger.info("cashier profile created", extra={"user_name": cashier.user_name})
    return cashier


def _record_event(cashier: Cashier, action: str, *, ip_address, user_agent) -> None:
    CashierLoginEvent.objects.create(
        cashier=cashier,
        action=action,
        ip_address=ip_address or None,
        user_agent=(user_agent or "")[:255],
    )
    trim_history(cashier.login_events.all())


# =========================================================
# LOGIN / LOGOUT
# =========================================================
@transaction.atomic
def record_login(cashier: Cashier, *, ip_address=None, user_agent="", cache) -> Cashier:
    cashier = Cashier.objects.select_for_update().get(pk=cashier.pk)

    if not cashier.is_active:
        raise CashierNotFoundError()

    if cashier.has_active_session():
        logger.warning(
            "cashier login blocked, session already active",
            extra={"user_name": cashier.user_name},
        )
        raise CashierSessionError(
            "Cashier already logged in from another device. Please logout first.",
            status_code=409,
            data={"active_session": cashier.session_info()},
        )

    now = timezone.now()
    cashier.active_session = True
    cashier.session_ip_address = ip_address or None
    cashier.session_user_agent = (user_agent or "")[:255]
    cashier.session_login_time = now
    cashier.last_login_at = now
    cashier.save(
        update_fields=[
            "active_session",
            "session_ip_address",
            "session_user_agent",
            "session_login_time",
            "last_login_at",
            "updated_at",
        ]
    )
    _record_event(cashier, CashierLoginEvent.ACTION_LOGIN, ip_address=ip_address, user_agent=user_agent)

    cache.set(session_key(cashier.user_name), cashier.session_info(), SESSION_CACHE_TTL)
    logger.info("cashier login", extra={"user_name": cashier.user_name})
    return cashier


@transaction.atomic
def record_logout(cashier: Cashier, *, ip_address=None, user_agent="", cache) -> Cashier:
    cashier = Cashier.objects.select_for_update().get(pk=cashier.pk)

    cashier.active_session = False
    cashier.session_ip_address = None
    cashier.session_user_agent = ""
    cashier.session_login_time = None
    cashier.save(
        update_fields=[
            "active_session",
            "session_ip_address",
            "session_user_agent",
            "session_login_time",
            "updated_at",
        ]
    )
    _record_event(cashier, CashierLoginEvent.ACTION_LOGOUT, ip_address=ip_address, user_agent=user_agent)

    cache.invalidate(session_key(cashier.user_name))
    logger.info("cashier logout", extra={"user_name": cashier.user_name})
    return cashier


def logout(user, *, ip_address=None, user_agent="", cache) -> Cashier:
    """Cashier self logout. Succeeds even when no session is live."""
    cashier = get_or_create_cashier(user)
    return record_logout(cashier, ip_address=ip_address, user_agent=user_agent, cache=cache)


def force_logout(user_name: str, *, ip_address=None, user_agent="", cache) -> dict:
    """
    Admin ends a cashier's live session.
    Returns {cashier_name, user_name, previous_session{ip_address, login_time}}.
    """
    user_name = (user_name or "").strip()
    if not user_name:
        raise CashierValidationError("Username is required")

    # the mirror goes first so a stale entry never outlives the call
    cache.invalidate(session_key(user_name))

    cashier = Cashier.objects.filter(user_name__iexact=user_name, is_active=True).first()
    if cashier is None:
        raise CashierNotFoundError()

    if not cashier.has_active_session():
        raise CashierSessionError("Cashier is not currently logged in", status_code=400)

    previous = cashier.session_info()
    record_logout(cashier, ip_address=ip_address, user_agent=user_agent, cache=cache)

    logger.info("cashier force logout", extra={"user_name": cashier.user_name})
    return {
        "cashier_name": cashier.name,
        "user_name": cashier.user_name,
        "previous_session": {
            "ip_address": previous["ip_address"],
            "login_time": previous["login_time"],
        },
    }
