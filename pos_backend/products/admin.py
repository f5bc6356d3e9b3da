# products/admin.py

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "unit_price", "is_active", "created_at")
    list_filter = ("is_active", "created_at")
    search_fields = ("sku", "name")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")
