"""
ASGI config for hub_server project.

It exposes the ASGI callable as a module-level variable named ``application``.
"""
import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hub_server.settings")

from channels.routing import ProtocolTypeRouter, URLRouter
from django.core.asgi import get_asgi_application

# Initialize Django before importing anything that touches models or settings.
django_asgi_app = get_asgi_application()

from realtime.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        "websocket": URLRouter(websocket_urlpatterns),
    }
)
