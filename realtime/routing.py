from django.urls import re_path

from .consumers import HubConsumer


websocket_urlpatterns = [
    # Admin and user clients share one endpoint; the first frame decides the role.
    re_path(r"^live-chat/?$", HubConsumer.as_asgi()),
]
