from .cashier import Cashier
from .cashier_login_event import CashierLoginEvent
from .order_status_audit import OrderStatusAudit

__all__ = ["Cashier", "CashierLoginEvent", "OrderStatusAudit"]
