import os
from decimal import Decimal

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from .settings import *  # noqa: E402,F401,F403  inherit base settings

# --- Database: SQLite for tests ---
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "testdb.sqlite3",
    }
}

# --- Speed up auth hashing in tests ---
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# --- Safety: never keep persistent DB connections in tests ---
CONN_MAX_AGE = 0

# --- Deterministic & quiet ---
DEBUG = False
SECURE_SSL_REDIRECT = False
CSRF_COOKIE_SECURE = False
SESSION_COOKIE_SECURE = False
TIME_ZONE = "UTC"

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = "memory://"

# Allow Django test client host
ALLOWED_HOSTS.append("testserver")

# --- Finance defaults pinned regardless of the environment ---
FINANCE_DEFAULT_TAX_RATE = Decimal("0.16")
FINANCE_SUMMARY_MONTHS = 6
