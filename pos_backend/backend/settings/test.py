"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite
- Memory cache gateway (no Redis needed)
- Synchronous audit writes so assertions see rows immediately
- Throttling off
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK  # explicit for Ruff (F405)

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHE_URL = "locmem://"

AUDIT_LOG_ASYNC = False

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

PAYMENTS = {
    "PAYMONGO": {
        "PUBLIC_KEY": "pk_test_dummy",
        "SECRET_KEY": "sk_test_dummy",
        "BASE_URL": "https://api.paymongo.com/v1",
    }
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}
