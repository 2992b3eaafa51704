# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory sqlite (fast, isolated)
- Throttling off so API tests never trip rate limits
- Fast password hashing
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

STOCK_SYNC_PUBLISHER = "products.services.stock_sync.log_publisher"
