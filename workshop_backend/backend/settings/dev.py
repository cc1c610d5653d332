# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT + TEST SETTINGS
SQLite by default (see base.DATABASE_URL), browsable API, localhost origins.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK, env  # explicit for Ruff (F405)

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1", "testserver"])

CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=["http://localhost:3000"])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=["http://localhost:3000"])
CORS_ALLOW_CREDENTIALS = True

REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = (
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
)

# separate knob for the (chatty) stock ledger logger
LOGGING["loggers"]["inventory"]["level"] = env("INVENTORY_LOG_LEVEL", default=LOGGING["loggers"]["inventory"]["level"])
