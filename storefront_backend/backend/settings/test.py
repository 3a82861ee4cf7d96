# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- File-backed SQLite test DB (threaded checkout tests need a real shared file)
- Fast password hashing
- External order ledger disabled unless a test overrides it
- Throttling rates high enough to never trip inside a test run
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import BASE_DIR, REST_FRAMEWORK, SQLITE_DB_OPTIONS

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": str(BASE_DIR / "db.sqlite3"),
        "OPTIONS": dict(SQLITE_DB_OPTIONS),
        "TEST": {"NAME": str(BASE_DIR / "test_db.sqlite3")},
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

ORDER_LEDGER = {
    "WEBHOOK_URL": "",
    "SECRET": "",
    "TIMEOUT": 1,
    "MAX_ATTEMPTS": 3,
    "BACKOFF_SECONDS": 0,
    "DISPATCH_BUDGET_SECONDS": 5,
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        "anon": "10000/min",
        "user": "10000/min",
        "public_poll": "10000/min",
        "public_write": "10000/min",
    },
}
