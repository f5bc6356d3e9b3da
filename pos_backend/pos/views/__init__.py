from .history import CashierOrderHistoryView
from .session import PosForceLogoutView, PosLoginView, PosLogoutView

__all__ = [
    "CashierOrderHistoryView",
    "PosForceLogoutView",
    "PosLoginView",
    "PosLogoutView",
]
