# permissions/roles.py

from __future__ import annotations

from typing import Optional

from django.db import models
from rest_framework.permissions import BasePermission


# =========================================================
# ROLES
# =========================================================
# Resolved once at authentication time (User.role, also carried in the JWT).
class Role(models.TextChoices):
    USER = "user", "User"
    CASHIER = "cashier", "Cashier"
    ADMIN = "admin", "Admin"


ROLE_USER = Role.USER.value
ROLE_CASHIER = Role.CASHIER.value
ROLE_ADMIN = Role.ADMIN.value


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views and services protect capabilities, not raw roles.
CAP_ORDERS_VIEW_ALL = "orders.view_all"
CAP_ORDERS_UPDATE_STATUS = "orders.update_status"

CAP_POS_LOGOUT = "pos.logout"
CAP_POS_FORCE_LOGOUT = "pos.force_logout"

CAP_AUDIT_VIEW = "audit.view"


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    # shoppers only create and read their orders, which needs no capability
    ROLE_USER: set(),
    ROLE_CASHIER: {
        CAP_ORDERS_VIEW_ALL,
        CAP_ORDERS_UPDATE_STATUS,
        CAP_POS_LOGOUT,
    },
    ROLE_ADMIN: {
        CAP_ORDERS_VIEW_ALL,
        CAP_POS_FORCE_LOGOUT,
        CAP_AUDIT_VIEW,
        # status changes stay with the till; admins force-logout instead
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def is_allowed(principal, capability: str) -> bool:
    """
    Single policy check used by both services and DRF permission classes.
    Anonymous principals have no capabilities.
    """
    return capability in capabilities_for(principal)


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_POS_FORCE_LOGOUT
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False
        return is_allowed(getattr(request, "user", None), required)

