"""
Shared fixtures.

`FakeConnection` stands in for a websocket consumer: it records every frame the hub
sends it and exposes the same handle surface (peer_address, is_open, is_alive,
send_event, terminate).
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
import pytest_asyncio

from realtime.hub import Hub, reset_hub
from realtime.presence import PresenceRegistry


class FakeConnection:
    def __init__(self, peer_address: str = "198.51.100.7"):
        self.peer_address = peer_address
        self.is_alive = True
        self.is_open = True
        self.terminated = 0
        self.sent: List[Dict[str, Any]] = []

    async def send_event(self, payload: Dict[str, Any]) -> None:
        self.sent.append(payload)

    async def terminate(self) -> None:
        self.terminated += 1
        self.is_open = False

    def of_type(self, type_: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m.get("type") == type_]

    def last(self) -> Dict[str, Any]:
        return self.sent[-1]


@pytest.fixture
def registry() -> PresenceRegistry:
    return PresenceRegistry()


@pytest_asyncio.fixture
async def hub(registry):
    hub = Hub(registry, heartbeat_interval=3600)
    yield hub
    await hub.monitor.stop()


@pytest.fixture
def make_conn():
    def _make(peer_address: str = "198.51.100.7") -> FakeConnection:
        return FakeConnection(peer_address)

    return _make


@pytest_asyncio.fixture
async def fresh_hub():
    """Reset the process-wide hub used by the consumer around a test."""
    await reset_hub()
    yield
    await reset_hub()
