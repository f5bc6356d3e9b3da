"""
PATH: pos/serializers/cashier.py

CASHIER SERIALIZERS

- CashierSerializer: safe cashier view (no session internals beyond login time)
- OrderStatusAuditSerializer: one audit trail entry
- Request shapes for POS login and force logout
"""

from rest_framework import serializers

from pos.models import Cashier, OrderStatusAudit


class CashierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cashier
        fields = [
            "id",
            "user_name",
            "name",
            "is_active",
            "active_session",
            "session_login_time",
            "last_login_at",
        ]
        read_only_fields = fields


class OrderStatusAuditSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusAudit
        fields = [
            "id",
            "order_key",
            "update_data",
            "success",
            "error",
            "ip_address",
            "user_agent",
            "created_at",
        ]
        read_only_fields = fields


class PosLoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(style={"input_type": "password"}, trim_whitespace=False)


class ForceLogoutRequestSerializer(serializers.Serializer):
    userName = serializers.CharField()
