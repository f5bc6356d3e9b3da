# orders/api/errors.py

"""
UNIFORM ERROR ENVELOPE (DRF EXCEPTION_HANDLER)

Every API error leaves as:

    {"success": false, "message": "...", "statusCode": <int>}

plus "errors" (per-field / per-item messages) and "data" (e.g. the unsaved
order draft on a payment link failure) when the error carries them.

Handled:
- Order engine + cashier session domain errors (each has status_code)
- DRF APIException family (validation, auth, permission, not found, throttle)
- Django Http404 / PermissionDenied (via DRF's default handler)
- Anything else -> 500 "Internal server error" (logged with traceback)
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from orders.services.exceptions import OrderServiceError
from pos.services.exceptions import CashierServiceError

logger = logging.getLogger(__name__)


def error_envelope(message, status_code, *, errors=None, data=None) -> dict:
    body = {"success": False, "message": message, "statusCode": status_code}
    if errors:
        body["errors"] = errors
    if data is not None:
        body["data"] = data
    return body


def _flatten_detail(detail) -> list[str]:
    if isinstance(detail, dict):
        out = []
        for field, value in detail.items():
            for msg in _flatten_detail(value):
                out.append(msg if field == "non_field_errors" else f"{field}: {msg}")
        return out
    if isinstance(detail, list):
        out = []
        for value in detail:
            out.extend(_flatten_detail(value))
        return out
    return [str(detail)]


def envelope_exception_handler(exc, context):
    if isinstance(exc, (OrderServiceError, CashierServiceError)):
        return Response(
            error_envelope(exc.message, exc.status_code, errors=exc.errors, data=exc.data),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "unhandled API error",
            extra={"view": view.__class__.__name__ if view else None},
        )
        return Response(
            error_envelope("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        message = "Validation error"
        errors = _flatten_detail(exc.detail)
    else:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        message = str(detail) if detail is not None else response.status_text
        errors = None

    response.data = error_envelope(message, response.status_code, errors=errors)
    return response
