"""
Middleware for hub_server.

- HealthCheckAllowHttpMiddleware: keep-alive probes usually arrive over plain HTTP
  from the hosting platform. Prevent SECURE_SSL_REDIRECT from answering them with a
  301 and let any origin read the response.
"""

from __future__ import annotations

HEALTH_PATHS = {"/", "/healthz"}


def _is_health_path(request) -> bool:
    path = (request.path or "").rstrip("/") or "/"
    return path in HEALTH_PATHS


class HealthCheckAllowHttpMiddleware:
    """Run before SecurityMiddleware."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if _is_health_path(request):
            # Avoid SSL redirect (SecurityMiddleware)
            request.META["HTTP_X_FORWARDED_PROTO"] = "https"
        response = self.get_response(request)
        if _is_health_path(request):
            response["Access-Control-Allow-Origin"] = "*"
        return response
