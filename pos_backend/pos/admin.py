from django.contrib import admin

from .models import Cashier, CashierLoginEvent, OrderStatusAudit

# =====================================================
# CASHIER ADMIN
# =====================================================


@admin.register(Cashier)
class CashierAdmin(admin.ModelAdmin):
    list_display = (
        "user_name",
        "name",
        "is_active",
        "active_session",
        "session_login_time",
        "last_login_at",
    )
    readonly_fields = (
        "id",
        "active_session",
        "session_ip_address",
        "session_user_agent",
        "session_login_time",
        "last_login_at",
        "created_at",
        "updated_at",
    )
    search_fields = ("user_name", "name", "user__email")
    list_filter = ("is_active", "active_session")


# =====================================================
# HISTORY (FULLY IMMUTABLE)
# =====================================================


class ImmutableAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CashierLoginEvent)
class CashierLoginEventAdmin(ImmutableAdmin):
    list_display = ("cashier", "action", "ip_address", "created_at")
    list_filter = ("action", "created_at")
    search_fields = ("cashier__user_name",)


@admin.register(OrderStatusAudit)
class OrderStatusAuditAdmin(ImmutableAdmin):
    list_display = ("cashier", "order_key", "update_data", "success", "created_at")
    list_filter = ("success", "created_at")
    search_fields = ("cashier__user_name", "order_key")
