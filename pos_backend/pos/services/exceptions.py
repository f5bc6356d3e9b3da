# pos/services/exceptions.py

"""
CASHIER SERVICE ERRORS

Same contract as the order engine errors: message, HTTP status,
optional errors/data. Rendered by orders/api/errors.py.
"""


class CashierServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, *, status_code=None, errors=None, data=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors
        self.data = data
        super().__init__(self.message)


class CashierValidationError(CashierServiceError):
    status_code = 400
    default_message = "Validation error"


class CashierNotFoundError(CashierServiceError):
    status_code = 404
    default_message = "Cashier not found"


class CashierSessionError(CashierServiceError):
    """
    Session state does not allow the action.
    409 when a login collides with a live session,
    400 when force-logout targets a cashier who is not logged in.
    """

    status_code = 409
    default_message = "Cashier session conflict"
