"""
PATH: pos/models/cashier.py

CASHIER MODEL

Purpose:
- POS profile for a user with the cashier role.
- Tracks the single live till session (one device at a time).

Rules:
- One cashier per user; user_name mirrors the login username.
- active_session is the source of truth for "logged in". The
  cashier_session:<user_name> cache entry is only a fast mirror of it.
"""

import uuid

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Cashier(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="cashier_profile",
    )

    user_name = models.CharField(max_length=150, unique=True)
    name = models.CharField(max_length=150, blank=True, default="")

    is_active = models.BooleanField(default=True)

    # -----------------------------
    # Live session
    # -----------------------------
    active_session = models.BooleanField(default=False)
    session_ip_address = models.GenericIPAddressField(null=True, blank=True)
    session_user_agent = models.CharField(max_length=255, blank=True, default="")
    session_login_time = models.DateTimeField(null=True, blank=True)

    last_login_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user_name"]

    def has_active_session(self) -> bool:
        return self.active_session is True

    def session_info(self) -> dict:
        return {
            "ip_address": self.session_ip_address,
            "user_agent": self.session_user_agent,
            "login_time": self.session_login_time.isoformat() if self.session_login_time else None,
        }

    def __str__(self):
        state = "ONLINE" if self.active_session else "OFFLINE"
        return f"{self.user_name} | {state}"
