"""
WebSocket consumer for the admin/user relay.

Key behavior:
- URL: /live-chat
- One consumer instance per socket; it is the connection handle the hub routes to.
- All routing and presence state lives in `realtime.hub`; this class only adapts
  Channels events (connect / receive / disconnect) to the hub's callbacks.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from channels.generic.websocket import AsyncWebsocketConsumer

from .config import config
from .hub import get_hub

logger = logging.getLogger(__name__)

# Close code used when the liveness monitor drops a peer.
CLOSE_CODE_HEARTBEAT_TIMEOUT = 4408


def _get_header(scope: dict, name: str) -> str | None:
    want = name.lower().encode("ascii")
    for key, value in scope.get("headers") or []:
        if key == want:
            return value.decode("utf-8", errors="replace").strip()
    return None


def peer_address(scope: dict, *, trust_forwarded_for: bool = True) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    if trust_forwarded_for:
        forwarded = _get_header(scope, "x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    client = scope.get("client")
    if client:
        return str(client[0])
    return ""


class HubConsumer(AsyncWebsocketConsumer):
    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.peer_address: str = ""
        self.is_alive: bool = True
        self._open: bool = False

    @property
    def is_open(self) -> bool:
        return self._open

    async def connect(self) -> None:
        self.peer_address = peer_address(self.scope, trust_forwarded_for=config.TRUST_FORWARDED_FOR)
        await self.accept()
        self._open = True
        await get_hub().on_connect(self)

    async def disconnect(self, close_code: int) -> None:
        self._open = False
        await get_hub().on_close(self)

    async def receive(self, text_data: Optional[str] = None, bytes_data: Optional[bytes] = None) -> None:
        hub = get_hub()
        try:
            await hub.on_message(self, text_data if text_data is not None else bytes_data)
        except Exception as e:
            logger.exception("Routing failed for frame from %s", self.peer_address)
            await hub.on_error(self, e)

    async def send_event(self, payload: Dict[str, Any]) -> None:
        await self.send(text_data=json.dumps(payload, separators=(",", ":"), ensure_ascii=False))

    async def terminate(self) -> None:
        if not self._open:
            return
        self._open = False
        await self.close(code=CLOSE_CODE_HEARTBEAT_TIMEOUT)
