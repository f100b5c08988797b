"""
URL configuration for hub_server project.

The websocket endpoint is routed separately (see `realtime.routing`).
"""
from django.urls import path

from realtime.views import page
from .health import health

urlpatterns = [
    # Keep-alive probes hit both the root and /healthz
    path("", health),
    path("healthz", health),
    path("<path:name>", page),
]
