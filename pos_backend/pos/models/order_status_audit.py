# pos/models/order_status_audit.py

from django.db import models

from .cashier import Cashier


class OrderStatusAudit(models.Model):
    """
    One row per status update attempt by a cashier, successful or not.

    order_key is whatever the cashier sent (business id or surrogate id),
    so failed lookups are still traceable.
    """

    cashier = models.ForeignKey(
        Cashier,
        on_delete=models.CASCADE,
        related_name="order_history",
    )
    order_key = models.CharField(max_length=64)
    update_data = models.JSONField(default=dict)
    success = models.BooleanField()
    error = models.TextField(blank=True, default="")
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["cashier", "created_at"], name="pos_audit_cashier_idx"),
        ]

    def __str__(self):
        outcome = "OK" if self.success else "FAILED"
        return f"{self.order_key} {self.update_data} {outcome}"
