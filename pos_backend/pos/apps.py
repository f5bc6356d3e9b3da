# pos/apps.py

from django.apps import AppConfig


class PosConfig(AppConfig):
    """
    Cashier side of the order system: sessions, login history and the
    order status audit trail.

    The audit dispatcher is built once in ready(); async or inline is
    decided by settings.AUDIT_LOG_ASYNC.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "pos"
    verbose_name = "Point of Sale"

    audit_dispatcher = None

    def ready(self):
        from .services.audit import AuditDispatcher

        self.audit_dispatcher = AuditDispatcher()


def get_audit_dispatcher():
    from django.apps import apps

    return apps.get_app_config("pos").audit_dispatcher
