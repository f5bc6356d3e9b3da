# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem


# ======================================================
# ORDER ITEM INLINE (READ-ONLY)
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "position",
        "product_ref",
        "product",
        "product_name",
        "quantity",
        "unit_price",
        "line_total",
    )

    def has_add_permission(self, request, obj=None):
        return False


# ======================================================
# ORDER ADMIN
# ======================================================
# Status is read-only here: changes must go through the status endpoint
# so the cache and the audit trail stay in step.


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_no",
        "customer_name",
        "status",
        "payment_method",
        "payment_status",
        "total_amount",
        "created_at",
    )
    readonly_fields = (
        "id",
        "order_no",
        "customer_user",
        "status",
        "payment_status",
        "subtotal_amount",
        "delivery_fee",
        "total_amount",
        "payment_link_id",
        "checkout_url",
        "payment_reference",
        "payment_link_status",
        "created_at",
        "updated_at",
    )
    search_fields = ("order_no", "customer_name", "customer_email", "customer_phone")
    list_filter = ("status", "payment_method", "delivery_type", "created_at")

    inlines = [OrderItemInline]

    def has_add_permission(self, request):
        return False
