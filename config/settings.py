"""
ERP Module Bus – Django Settings (Infrastructure Only)
======================================================
Django serves as the framework container for the module event bus.
Bus logic lives in core/ and engines/; Django provides the ORM and
the HTTP adapter.

Deployment values are read from the environment. Defaults are for
local development and tests only.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
# BASE_DIR = project root where manage.py lives
BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "erp-dev-key-replace-before-deployment")

DEBUG = _env_bool("DJANGO_DEBUG", True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # ── ERP Modules ───────────────────────────────────────
    "core.module_events",
    "core.auth",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Database ──────────────────────────────────────────────────
# SQLite for development and tests. Production DB configured via env.
DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DATABASE_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("DATABASE_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("DATABASE_USER", ""),
        "PASSWORD": os.environ.get("DATABASE_PASSWORD", ""),
        "HOST": os.environ.get("DATABASE_HOST", ""),
        "PORT": os.environ.get("DATABASE_PORT", ""),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# Bus tables use UUIDs explicitly. This is a Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Module Event Bus ──────────────────────────────────────────
# Snapshotted by core.events.config.BusSettings.from_django_settings().
INTERNAL_SERVICE_SECRET = os.environ.get("INTERNAL_SERVICE_SECRET", "")
NOTIFICATION_SERVICE_URL = os.environ.get("NOTIFICATION_SERVICE_URL", "")
NOTIFICATION_SERVICE_KEY = os.environ.get("NOTIFICATION_SERVICE_KEY", "")
NOTIFICATION_TIMEOUT_SECONDS = float(os.environ.get("NOTIFICATION_TIMEOUT_SECONDS", "10"))
MODULE_EVENTS_DEFAULT_MAX_RETRIES = int(os.environ.get("MODULE_EVENTS_DEFAULT_MAX_RETRIES", "3"))
MODULE_EVENTS_SWEEP_BATCH_SIZE = int(os.environ.get("MODULE_EVENTS_SWEEP_BATCH_SIZE", "50"))
MODULE_EVENTS_STALE_CLAIM_SECONDS = int(os.environ.get("MODULE_EVENTS_STALE_CLAIM_SECONDS", "900"))

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "erp": {
            "handlers": ["console"],
            "level": os.environ.get("ERP_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
