"""
ASGI config for the medicore project.

Exposes the ASGI callable as a module-level variable named ``application``
for servers such as uvicorn or daphne.  Only plain HTTP is served.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "medicore.settings")

application = get_asgi_application()
