# backend/asgi.py
"""
PATH: backend/asgi.py

ASGI entrypoint. Same settings fallback as wsgi.py.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
