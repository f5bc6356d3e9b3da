from .cashier import (
    CashierSerializer,
    ForceLogoutRequestSerializer,
    OrderStatusAuditSerializer,
    PosLoginRequestSerializer,
)

__all__ = [
    "CashierSerializer",
    "ForceLogoutRequestSerializer",
    "OrderStatusAuditSerializer",
    "PosLoginRequestSerializer",
]
