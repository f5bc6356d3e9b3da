# orders/serializers.py

"""
ORDER SERIALIZERS

Read side:
- OrderSnapshotSerializer produces the JSON document that is both the API
  body and the cache value. It must stay JSON-native (strings for
  decimals, uuids and datetimes) so a cache hit and a database read
  return the same shape.

Write side (request validation shape only; business validation lives in
orders/services/order_creation.py):
- CreateOrderRequestSerializer
- StatusUpdateRequestSerializer
"""

from __future__ import annotations

from rest_framework import serializers

from orders.models import Order, OrderItem


# =========================================================
# SNAPSHOT (READ)
# =========================================================
class OrderItemSnapshotSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)
    name = serializers.CharField(source="product_name", read_only=True)
    image = serializers.CharField(source="product_image", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "product_ref",
            "product_id",
            "name",
            "image",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class OrderSnapshotSerializer(serializers.ModelSerializer):
    customer = serializers.SerializerMethodField()
    items = OrderItemSnapshotSerializer(many=True, read_only=True)
    payment_link = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "customer",
            "items",
            "delivery_type",
            "payment_method",
            "subtotal_amount",
            "delivery_fee",
            "total_amount",
            "currency",
            "status",
            "payment_status",
            "payment_link",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_customer(self, obj: Order) -> dict:
        return {
            "user_id": str(obj.customer_user_id) if obj.customer_user_id else None,
            "name": obj.customer_name,
            "email": obj.customer_email,
            "phone": obj.customer_phone,
            "address": {
                "line1": obj.address_line1,
                "city": obj.address_city,
                "state": obj.address_state,
                "postal_code": obj.address_postal_code,
                "country": obj.address_country,
            },
        }

    def get_payment_link(self, obj: Order):
        if not obj.payment_link_id:
            return None
        return {
            "id": obj.payment_link_id,
            "checkout_url": obj.checkout_url,
            "reference": obj.payment_reference,
            "status": obj.payment_link_status,
        }


# =========================================================
# REQUESTS (SCHEMA + SHAPE)
# =========================================================
class AddressRequestSerializer(serializers.Serializer):
    line1 = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    state = serializers.CharField(required=False, allow_blank=True)
    postal_code = serializers.CharField(required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True)


class CustomerRequestSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField()
    address = AddressRequestSerializer()


class OrderItemRequestSerializer(serializers.Serializer):
    product = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class CreateOrderRequestSerializer(serializers.Serializer):
    customer = CustomerRequestSerializer()
    items = OrderItemRequestSerializer(many=True)
    deliveryType = serializers.ChoiceField(choices=[c for c, _ in Order.DELIVERY_TYPE_CHOICES])
    paymentMethod = serializers.ChoiceField(choices=[c for c, _ in Order.PAYMENT_METHOD_CHOICES])
    deliveryFee = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )


class StatusUpdateRequestSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[
            Order.STATUS_PENDING,
            Order.STATUS_RECEIVED,
            Order.STATUS_PREPARING,
            Order.STATUS_SHIPPED,
            Order.STATUS_DELIVERED,
            Order.STATUS_CANCELLED,
        ]
    )


class PaymentLinkSummarySerializer(serializers.Serializer):
    id = serializers.CharField()
    checkout_url = serializers.URLField()
    reference = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    status = serializers.CharField()
    fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    net_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
