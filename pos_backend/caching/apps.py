# caching/apps.py

from django.apps import AppConfig


class CachingConfig(AppConfig):
    """
    Holds the process-wide cache gateway.

    The gateway is built once in ready() from settings.CACHE_URL and handed
    to the order services by the views. Core functions never look it up
    themselves; they receive it as a parameter.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "caching"
    verbose_name = "Cache Gateway"

    gateway = None

    def ready(self):
        from .gateway import build_cache_gateway

        self.gateway = build_cache_gateway()


def get_cache_gateway():
    from django.apps import apps

    return apps.get_app_config("caching").gateway
