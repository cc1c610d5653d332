# backend/settings/prod.py
"""
PATH: backend/settings/prod.py

PRODUCTION SETTINGS (fail closed)

- DEBUG forced off, SECRET_KEY / hosts / origins must be explicit
- Postgres only: stock reservations rely on row locks
  (select_for_update) that SQLite silently ignores
- WhiteNoise serves the admin's static files
- Work order tax rate must parse as a fraction in [0, 1)
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, MIDDLEWARE, WORK_ORDER_TAX_RATE, env  # explicit for Ruff (F405)


def _required_list(name: str) -> list[str]:
    values = env.list(name, default=[])
    if not values:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    return values


def _https_origins(name: str) -> list[str]:
    origins = _required_list(name)
    for origin in origins:
        if "localhost" in origin or "127.0.0.1" in origin:
            raise ImproperlyConfigured(f"Remove localhost from {name} in production.")
        if not origin.startswith("https://"):
            raise ImproperlyConfigured(f"{name} must be https:// in production.")
    return origins


DEBUG = False

# ----------------------------
# Secrets / hosts
# ----------------------------
SECRET_KEY = (env("SECRET_KEY", default="") or "").strip()
if not SECRET_KEY or SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY must be set to a strong value in production.")

ALLOWED_HOSTS = _required_list("ALLOWED_HOSTS")

# ----------------------------
# Database (Postgres only)
# ----------------------------
_database_url = (env("DATABASE_URL", default="") or "").strip()
if not _database_url.startswith(("postgres://", "postgresql://", "pgsql://")):
    raise ImproperlyConfigured("DATABASE_URL must point to Postgres in production.")

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)

# ----------------------------
# Work order knobs
# ----------------------------
try:
    _rate = Decimal(WORK_ORDER_TAX_RATE)
except InvalidOperation as exc:
    raise ImproperlyConfigured("WORK_ORDER_TAX_RATE must be a decimal fraction, e.g. 0.18") from exc
if not (Decimal("0") <= _rate < Decimal("1")):
    raise ImproperlyConfigured("WORK_ORDER_TAX_RATE must be within [0, 1).")

# ----------------------------
# Static files
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))
MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ----------------------------
# TLS behind the reverse proxy
# ----------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env.bool("SECURE_HSTS_INCLUDE_SUBDOMAINS", default=True)
SECURE_HSTS_PRELOAD = env.bool("SECURE_HSTS_PRELOAD", default=False)

# ----------------------------
# Cookies / headers
# ----------------------------
SESSION_COOKIE_SECURE = CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = CSRF_COOKIE_SAMESITE = "Lax"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

# ----------------------------
# CORS / CSRF (the workshop front desk app)
# ----------------------------
CORS_ALLOWED_ORIGINS = _https_origins("CORS_ALLOWED_ORIGINS")
CSRF_TRUSTED_ORIGINS = _https_origins("CSRF_TRUSTED_ORIGINS")
CORS_ALLOW_CREDENTIALS = False
