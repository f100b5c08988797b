"""
Static pages served next to the websocket endpoint.

- GET /admin -> admin.html
- GET /user  -> user.html
- GET /<name> -> <name> from the pages directory

Files come from `HUB_PAGES_DIR`. Missing files and paths escaping the directory are 404.
"""

from __future__ import annotations

from django.core.exceptions import SuspiciousFileOperation
from django.http import Http404
from django.views.decorators.http import require_GET
from django.views.static import serve

from .config import config

PAGE_ALIASES = {
    "admin": "admin.html",
    "user": "user.html",
}


@require_GET
def page(request, name: str):
    filename = PAGE_ALIASES.get(name, name)
    try:
        return serve(request, filename, document_root=str(config.PAGES_DIR))
    except SuspiciousFileOperation:
        raise Http404(name)
