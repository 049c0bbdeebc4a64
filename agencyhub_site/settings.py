"""
Django settings for DEV/PROD for the agency finance back-office.
Postgres via DATABASE_URL (SQLite fallback), Sentry, Celery beat.
"""

from __future__ import annotations
import os
import warnings
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv
import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration
import dj_database_url
from celery.schedules import crontab

# ────────────────────────────────────────────────────
# Paths & .env
# ────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")
ENV = os.getenv

def env_bool(key: str, default: str = "false") -> bool:
    return ENV(key, default).lower() in {"1", "true", "yes", "on"}

# ────────────────────────────────────────────────────
# Core flags & secret
# ────────────────────────────────────────────────────
DEBUG: bool = env_bool("DEBUG")

SECRET_KEY = ENV("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable is required")

if not DEBUG:
    warnings.filterwarnings("ignore")

# ────────────────────────────────────────────────────
# Sentry (error monitoring)
# ────────────────────────────────────────────────────
SENTRY_DSN = ENV("SENTRY_DSN", "")
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[DjangoIntegration()],
        traces_sample_rate=float(ENV("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        sample_rate=float(ENV("SENTRY_SAMPLE_RATE", "1.0")),
        send_default_pii=False,
    )

# ────────────────────────────────────────────────────
# Hosts & CSRF trusted origins
# ────────────────────────────────────────────────────
ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

CSRF_TRUSTED_ORIGINS = [
    "http://localhost:5000", "http://127.0.0.1:5000",
    "http://localhost:3000", "http://127.0.0.1:3000",
]

def _extend_from_env_list(env_key: str, target_list: list[str], require_scheme: bool = False) -> None:
    raw = ENV(env_key, "") or ""
    if not raw:
        return
    for item in [x.strip() for x in raw.split(",") if x.strip()]:
        if require_scheme and not (item.startswith("http://") or item.startswith("https://")):
            continue
        target_list.append(item)

_extend_from_env_list("EXTRA_ALLOWED_HOSTS", ALLOWED_HOSTS, require_scheme=False)
_extend_from_env_list("EXTRA_CSRF_TRUSTED_ORIGINS", CSRF_TRUSTED_ORIGINS, require_scheme=True)

# ────────────────────────────────────────────────────
# Apps & Middleware
# ────────────────────────────────────────────────────
INSTALLED_APPS = [
    # Django
    "django.contrib.admin", "django.contrib.auth", "django.contrib.contenttypes",
    "django.contrib.sessions", "django.contrib.messages", "django.contrib.staticfiles",
    # Third-party
    "django_celery_beat",
    # Project
    "finance",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "agencyhub_site.urls"
WSGI_APPLICATION = "agencyhub_site.wsgi.application"

# ────────────────────────────────────────────────────
# Templates (admin + auth views only)
# ────────────────────────────────────────────────────
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

# ────────────────────────────────────────────────────
# Database (DATABASE_URL preferred; fallback SQLite)
# ────────────────────────────────────────────────────
DATABASE_URL = ENV("DATABASE_URL")
if not DATABASE_URL and ENV("DB_HOST"):
    DATABASE_URL = (
        f"postgresql://{ENV('DB_USER')}:{ENV('DB_PASSWORD')}"
        f"@{ENV('DB_HOST')}:{ENV('DB_PORT','5432')}/{ENV('DB_NAME')}"
    )

if DATABASE_URL:
    DATABASES = {
        "default": dj_database_url.parse(
            DATABASE_URL,
            conn_max_age=int(ENV("DB_CONN_MAX_AGE", "600")),
            ssl_require=not DEBUG,
        )
    }
else:
    DATABASES = {
        "default": {"ENGINE": "django.db.backends.sqlite3", "NAME": BASE_DIR / "db.sqlite3"}
    }

# ────────────────────────────────────────────────────
# I18N
# ────────────────────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = ENV("TIME_ZONE", "America/Mexico_City")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# ────────────────────────────────────────────────────
# Auth / misc
# ────────────────────────────────────────────────────
LOGIN_URL = "/accounts/login/"
LOGIN_REDIRECT_URL = "/"
LOGOUT_REDIRECT_URL = "/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator", "OPTIONS": {"min_length": 12}},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# ────────────────────────────────────────────────────
# Security (PROD only)
# ────────────────────────────────────────────────────
SESSION_COOKIE_SAMESITE = ENV("SESSION_COOKIE_SAMESITE", "Lax")
CSRF_COOKIE_SAMESITE = ENV("CSRF_COOKIE_SAMESITE", "Lax")

if not DEBUG:
    SECURE_SSL_REDIRECT = env_bool("SECURE_SSL_REDIRECT", "true")
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
    SECURE_HSTS_SECONDS = 31536000
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = "DENY"
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

# ────────────────────────────────────────────────────
# Logging (simple and sufficient)
# ────────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        # Always on: WARNING and above reach stderr even when DEBUG is off
        "console": {"class": "logging.StreamHandler", "level": "DEBUG" if DEBUG else "WARNING", "formatter": "simple"},
        "null": {"class": "logging.NullHandler"},
    },
    "root": {"handlers": ["console"], "level": "DEBUG" if DEBUG else "INFO"},
    "loggers": {
        "django.server": {
            "handlers": ["console"] if DEBUG else ["null"],
            "level": "WARNING",
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
        "finance": {
            "level": ENV("FINANCE_LOG_LEVEL", "DEBUG" if DEBUG else "INFO"),
        },
    },
}

# ────────────────────────────────────────────────────
# Finance
# ────────────────────────────────────────────────────
FINANCE_DEFAULT_TAX_RATE = Decimal(ENV("FINANCE_DEFAULT_TAX_RATE", "0.16"))
FINANCE_SUMMARY_MONTHS = int(ENV("FINANCE_SUMMARY_MONTHS", "6"))
RECURRING_RUN_HOUR = int(ENV("RECURRING_RUN_HOUR", "6"))

# Celery
CELERY_BROKER_URL = ENV("CELERY_BROKER_URL", default="memory://")
CELERY_RESULT_BACKEND = ENV("CELERY_RESULT_BACKEND", default="cache+memory://")
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULER = "django_celery_beat.schedulers:DatabaseScheduler"
CELERY_BEAT_SCHEDULE = {
    "execute-pending-recurring-transactions": {
        "task": "finance.tasks.process_recurring_transactions",
        "schedule": crontab(hour=RECURRING_RUN_HOUR, minute=0),
        "options": {"expires": 60 * 60},
    },
}
