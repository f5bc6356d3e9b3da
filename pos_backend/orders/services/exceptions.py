# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for the order engine.
Each carries the HTTP status the API layer answers with
(see orders/api/errors.py).
"""


class OrderServiceError(Exception):
    """Base exception for all order engine failures."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, *, errors=None, data=None):
        self.message = message or self.default_message
        self.errors = errors
        self.data = data
        super().__init__(self.message)


class OrderValidationError(OrderServiceError):
    """Raised when request input is missing or malformed."""

    status_code = 400
    default_message = "Validation error"


class OrderAuthenticationError(OrderServiceError):
    """Raised when an operation needs a principal and none is present."""

    status_code = 401
    default_message = "Authentication required"


class OrderAuthorizationError(OrderServiceError):
    """Raised when the principal's role may not perform the operation."""

    status_code = 403
    default_message = "Access denied"


class OrderNotFoundError(OrderServiceError):
    """Raised when no order matches the lookup key."""

    status_code = 404
    default_message = "Order not found"


class InvalidOrderTransitionError(OrderServiceError):
    """Raised when a status change breaks the lifecycle rules."""

    status_code = 400
    default_message = "Invalid status transition"


class ConcurrentOrderUpdateError(OrderServiceError):
    """Raised when the order's status changed between read and write."""

    status_code = 409
    default_message = "Order was modified by another request, reload and retry"


class PaymentLinkError(OrderServiceError):
    """Raised when the payment link for an online order cannot be created."""

    status_code = 400
    default_message = "Failed to create payment link"
