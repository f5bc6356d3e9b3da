# pos/views/session.py

"""
POS SESSION VIEWS

- POST /api/pos/login/         cashier login (JWT pair + cashier profile)
- POST /api/pos/logout/        cashier self logout
- POST /api/pos/force-logout/  admin ends a cashier's live session

Hard rules:
- Only cashier accounts can open a POS session.
- One live session per cashier (409 on a second login).
"""

from __future__ import annotations

from django.contrib.auth import authenticate
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from caching.apps import get_cache_gateway
from permissions.roles import (
    CAP_POS_FORCE_LOGOUT,
    CAP_POS_LOGOUT,
    ROLE_CASHIER,
    HasCapability,
    get_user_role,
)
from pos.serializers import (
    CashierSerializer,
    ForceLogoutRequestSerializer,
    PosLoginRequestSerializer,
)
from pos.services.audit import client_ip, client_user_agent
from pos.services.sessions import force_logout, get_or_create_cashier, logout, record_login
from users.serializers import RoleTokenObtainPairSerializer


class PosLoginView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["POS"],
        request=PosLoginRequestSerializer,
        responses={
            200: OpenApiResponse(description="{success, data: {access, refresh, cashier}}"),
            401: OpenApiResponse(description="Invalid credentials"),
            409: OpenApiResponse(description="Cashier already logged in from another device"),
        },
        description="Cashier login. Opens the single POS session for this cashier.",
    )
    def post(self, request):
        serializer = PosLoginRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request,
            username=serializer.validated_data["username"],
            password=serializer.validated_data["password"],
        )
        if user is None or get_user_role(user) != ROLE_CASHIER:
            raise AuthenticationFailed("Invalid credentials")

        cashier = record_login(
            get_or_create_cashier(user),
            ip_address=client_ip(request),
            user_agent=client_user_agent(request),
            cache=get_cache_gateway(),
        )

        refresh = RoleTokenObtainPairSerializer.get_token(user)
        return Response(
            {
                "success": True,
                "message": "Login successful",
                "data": {
                    "access": str(refresh.access_token),
                    "refresh": str(refresh),
                    "cashier": CashierSerializer(cashier).data,
                },
                "statusCode": status.HTTP_200_OK,
            },
            status=status.HTTP_200_OK,
        )


class PosLogoutView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_POS_LOGOUT

    @extend_schema(
        tags=["POS"],
        request=None,
        responses={
            200: OpenApiResponse(description="Logged out"),
            403: OpenApiResponse(description="Not a cashier"),
        },
        description="Cashier self logout. Clears the live session.",
    )
    def post(self, request):
        logout(
            request.user,
            ip_address=client_ip(request),
            user_agent=client_user_agent(request),
            cache=get_cache_gateway(),
        )
        return Response(
            {
                "success": True,
                "message": "Logged out successfully",
                "statusCode": status.HTTP_200_OK,
            },
            status=status.HTTP_200_OK,
        )


class PosForceLogoutView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_POS_FORCE_LOGOUT

    @extend_schema(
        tags=["POS"],
        request=ForceLogoutRequestSerializer,
        responses={
            200: OpenApiResponse(
                description="{cashier_name, user_name, previous_session{ip_address, login_time}}"
            ),
            400: OpenApiResponse(description="userName missing or cashier not logged in"),
            404: OpenApiResponse(description="Cashier not found"),
        },
        description="Admin only. Ends a cashier's live POS session.",
    )
    def post(self, request):
        user_name = request.data.get("userName") if hasattr(request.data, "get") else None

        result = force_logout(
            str(user_name or ""),
            ip_address=client_ip(request),
            user_agent=client_user_agent(request),
            cache=get_cache_gateway(),
        )
        return Response(
            {
                "success": True,
                "message": f"Cashier {result['user_name']} has been forcefully logged out",
                "data": result,
                "statusCode": status.HTTP_200_OK,
            },
            status=status.HTTP_200_OK,
        )
