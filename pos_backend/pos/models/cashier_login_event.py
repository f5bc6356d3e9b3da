# pos/models/cashier_login_event.py

from django.db import models

from .cashier import Cashier


class CashierLoginEvent(models.Model):
    """
    Append-only login / logout history.
    Only the newest CASHIER_HISTORY_LIMIT rows per cashier are kept.
    """

    ACTION_LOGIN = "login"
    ACTION_LOGOUT = "logout"

    ACTION_CHOICES = [
        (ACTION_LOGIN, "Login"),
        (ACTION_LOGOUT, "Logout"),
    ]

    cashier = models.ForeignKey(
        Cashier,
        on_delete=models.CASCADE,
        related_name="login_events",
    )
    action = models.CharField(max_length=10, choices=ACTION_CHOICES)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["cashier", "created_at"], name="pos_login_cashier_idx"),
        ]

    def __str__(self):
        return f"{self.cashier_id} {self.action} @ {self.created_at}"
