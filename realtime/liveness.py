"""
Heartbeat-based reaping of half-open connections.

A socket whose peer vanished without a close handshake never produces a disconnect
event. Every tick the monitor walks the open connections:
- flag still False from the previous tick -> the probe went unanswered, reap it;
- otherwise clear the flag and send a fresh probe.

A `heartbeat-ack` from the client sets the flag again (see `Hub.on_message`).
Detection latency is therefore between one and two intervals.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Set

from .serializers import HeartbeatEvent, dump

logger = logging.getLogger(__name__)

Reaper = Callable[[Any], Awaitable[None]]


class LivenessMonitor:
    def __init__(self, *, interval_seconds: float, reap: Reaper) -> None:
        self.interval_seconds = interval_seconds
        self._reap = reap
        self._connections: Set[Any] = set()
        self._task: Optional[asyncio.Task] = None

    def track(self, conn: Any) -> None:
        conn.is_alive = True
        self._connections.add(conn)
        self._ensure_task()

    def untrack(self, conn: Any) -> None:
        self._connections.discard(conn)

    @property
    def connections(self) -> List[Any]:
        return list(self._connections)

    def _ensure_task(self) -> None:
        """Start the tick loop on the running event loop if it is not already running there."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._task is not None and not self._task.done() and self._task.get_loop() is loop:
            return
        self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                await self.tick()
        except asyncio.CancelledError:
            return

    async def tick(self) -> None:
        for conn in list(self._connections):
            try:
                if not conn.is_alive:
                    logger.info("Liveness probe unanswered; terminating %s", conn.peer_address or "connection")
                    self.untrack(conn)
                    await self._reap(conn)
                    continue
                conn.is_alive = False
                if conn.is_open:
                    await conn.send_event(dump(HeartbeatEvent()))
                    logger.debug("Sent heartbeat to %s", conn.peer_address)
            except Exception:
                logger.exception("Liveness tick failed for %s", getattr(conn, "peer_address", conn))

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
