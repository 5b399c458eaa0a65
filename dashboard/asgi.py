"""
ASGI config for the dashboard project.

The relay serves plain HTTP only; the ASGI entrypoint exists so the app
can run under uvicorn/daphne as well as a WSGI server.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "dashboard.settings")

application = get_asgi_application()
