# pos/views/history.py

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_AUDIT_VIEW, HasCapability
from pos.models import Cashier
from pos.serializers import CashierSerializer, OrderStatusAuditSerializer
from pos.services.exceptions import CashierNotFoundError


class CashierOrderHistoryView(APIView):
    """
    Admin read of one cashier's order status audit trail, newest first.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_AUDIT_VIEW

    @extend_schema(
        tags=["POS"],
        responses={
            200: OrderStatusAuditSerializer(many=True),
            404: OpenApiResponse(description="Cashier not found"),
        },
        description="Status update attempts made by a cashier (capped history).",
    )
    def get(self, request, user_name: str):
        cashier = Cashier.objects.filter(user_name__iexact=user_name).first()
        if cashier is None:
            raise CashierNotFoundError()

        entries = cashier.order_history.all()
        return Response(
            {
                "success": True,
                "data": {
                    "cashier": CashierSerializer(cashier).data,
                    "history": OrderStatusAuditSerializer(entries, many=True).data,
                },
            },
            status=status.HTTP_200_OK,
        )
