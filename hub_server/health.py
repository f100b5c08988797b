from __future__ import annotations

import logging
import time

from django.http import JsonResponse

from realtime.hub import get_hub

logger = logging.getLogger(__name__)


def health(request):
    """
    Keep-alive / health probe for the hosting platform.

    Keep it cheap: no I/O, just a snapshot of the in-memory presence counts.
    """

    logger.info("Received keep-alive ping")
    return JsonResponse(
        {
            "status": "ok",
            "ts": int(time.time()),
            **get_hub().snapshot(),
        }
    )
