# backend/asgi.py
"""
ASGI entrypoint for the workshop API (same settings rules as wsgi.py).
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
