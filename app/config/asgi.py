"""
ASGI entry point for the marketplace payments service.

Only plain HTTP is served; the webhook endpoint and the REST API are
synchronous Django views running under the ASGI handler.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()
