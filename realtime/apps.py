import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class RealtimeConfig(AppConfig):
    name = "realtime"
    verbose_name = "Realtime relay"

    def ready(self):
        from .config import config

        logger.info(
            "Relay hub ready (heartbeat every %ss, pages from %s)",
            config.HEARTBEAT_INTERVAL_SECONDS,
            config.PAGES_DIR,
        )
