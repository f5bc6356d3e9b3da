# orders/api/views.py

"""
ORDER API VIEWS

Endpoints (mounted under /api/pos/orders/):
- GET    /                      list orders (cashier/admin)
- POST   /                      create order (anyone; a logged-in user owns it)
- GET    /<order_id>/           order by business id (public)
- PATCH  /<order_id>/status/    status update (cashier only)
- PUT    /<order_id>/status/    same as PATCH

Views stay thin: they pull the cache gateway, payment provider and audit
callback, call the order engine, and wrap the result. Errors propagate to
orders/api/errors.py.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from caching.apps import get_cache_gateway
from orders.models import Order
from orders.serializers import (
    CreateOrderRequestSerializer,
    OrderSnapshotSerializer,
    StatusUpdateRequestSerializer,
)
from orders.services.order_creation import create_order
from orders.services.order_lifecycle import update_order_status
from orders.services.order_queries import get_order, list_orders
from payments.services.paymongo import PayMongoClient
from pos.apps import get_audit_dispatcher
from pos.services.audit import order_status_auditor


LIST_PARAMETERS = [
    OpenApiParameter("page", int, description="1-based page number (default 1)"),
    OpenApiParameter("limit", int, description="Page size (default 10)"),
    OpenApiParameter("status", str, description="Exact status match"),
    OpenApiParameter("customer", str, description="Substring of customer id, name, email or phone"),
    OpenApiParameter("startDate", str, description="Inclusive lower bound on created_at (ISO)"),
    OpenApiParameter("endDate", str, description="Inclusive upper bound on created_at (ISO)"),
    OpenApiParameter(
        "sortBy",
        str,
        enum=["date", "createdAt", "total", "totalAmount", "status", "orderId"],
    ),
    OpenApiParameter("sortOrder", str, enum=["asc", "desc"]),
]


class OrderEngineMixin:
    """Where views get their collaborators. Tests override these."""

    def get_cache(self):
        return get_cache_gateway()

    def get_payment_provider(self):
        return PayMongoClient.from_settings()


# =========================================================
# LIST + CREATE
# =========================================================
class OrderListCreateView(OrderEngineMixin, APIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAuthenticated()]

    @extend_schema(
        tags=["Orders"],
        parameters=LIST_PARAMETERS,
        responses={
            200: OpenApiResponse(description="{success, data: {orders, pagination}}"),
            400: OpenApiResponse(description="Malformed query parameter"),
            401: OpenApiResponse(description="Not authenticated"),
            403: OpenApiResponse(description="Shoppers cannot list orders"),
        },
        description="List orders with filters, sorting and pagination. Cashier or admin.",
    )
    def get(self, request):
        result = list_orders(
            request.query_params,
            principal=request.user,
            cache=self.get_cache(),
        )
        return Response({"success": True, "data": result}, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Orders"],
        request=CreateOrderRequestSerializer,
        responses={
            201: OpenApiResponse(description="{success, message, data: {order, payment_link}}"),
            400: OpenApiResponse(description="Validation error or payment link failure"),
        },
        description=(
            "Create an order. Online orders are only saved once a PayMongo "
            "payment link exists; cash orders are confirmed immediately."
        ),
    )
    def post(self, request):
        result = create_order(
            request.data,
            principal=request.user,
            cache=self.get_cache(),
            payment_provider=self.get_payment_provider(),
        )

        if result["order"]["payment_method"] == Order.METHOD_ONLINE:
            message = "Order created successfully - payment link generated"
        else:
            message = "Order created successfully - awaiting cash payment"

        return Response(
            {
                "success": True,
                "message": message,
                "data": result,
                "statusCode": status.HTTP_201_CREATED,
            },
            status=status.HTTP_201_CREATED,
        )


# =========================================================
# DETAIL
# =========================================================
class OrderDetailView(OrderEngineMixin, APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["Orders"],
        responses={
            200: OrderSnapshotSerializer,
            404: OpenApiResponse(description="Order not found"),
        },
        description="Fetch one order by business id. source tells whether it came from cache.",
    )
    def get(self, request, order_id: str):
        snapshot, source = get_order(order_id, cache=self.get_cache())
        return Response(
            {"success": True, "source": source, "data": snapshot},
            status=status.HTTP_200_OK,
        )


# =========================================================
# STATUS
# =========================================================
class OrderStatusView(OrderEngineMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get_auditor(self, request):
        return order_status_auditor(request, dispatcher=get_audit_dispatcher())

    @extend_schema(
        tags=["Orders"],
        request=StatusUpdateRequestSerializer,
        responses={
            200: OrderSnapshotSerializer,
            400: OpenApiResponse(description="Invalid status or transition"),
            403: OpenApiResponse(description="Only cashiers update status"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order changed concurrently"),
        },
        description=(
            "Move an order one step along pending → received → preparing → "
            "shipped → delivered, or cancel it. Accepts business or surrogate id."
        ),
    )
    def patch(self, request, order_id: str):
        requested = request.data.get("status") if hasattr(request.data, "get") else None

        snapshot = update_order_status(
            order_id,
            requested,
            actor=request.user,
            cache=self.get_cache(),
            audit=self.get_auditor(request),
        )
        return Response(
            {
                "success": True,
                "message": "Order updated successfully",
                "data": snapshot,
                "statusCode": status.HTTP_200_OK,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Orders"],
        request=StatusUpdateRequestSerializer,
        responses={200: OrderSnapshotSerializer},
        description="Alias of PATCH.",
    )
    def put(self, request, order_id: str):
        return self.patch(request, order_id)
