"""
Session protocol and message routing for the admin/user relay.

Star topology: one admin, many users, every frame passes through here.

Per-connection state machine:
    UNIDENTIFIED --admin-init--> ADMIN
    UNIDENTIFIED --user-init---> USER
Roles never flip. Anything a connection is not allowed to send in its current state is
dropped without a reply. Delivery is best-effort: a target that is gone or closed
simply does not get the frame.

The admin check uses both the per-connection role and the registry slot. A connection
that was displaced by a newer admin keeps its ADMIN role but its messages are no longer
routed; it can send `admin-init` again to take the slot back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from .config import config
from .liveness import LivenessMonitor
from .presence import PresenceRegistry
from .serializers import (
    INBOUND_MODELS,
    AllUsersEvent,
    FileEvent,
    FilePayload,
    Kind,
    MessageEvent,
    PongEvent,
    Rename,
    TextMessage,
    UserConnectedEvent,
    UserDisconnectedEvent,
    UserIdEvent,
    UserInit,
    UserRenamedEvent,
    UserSummary,
    dump,
    parse_frame,
)

logger = logging.getLogger(__name__)


class Role(str, Enum):
    UNIDENTIFIED = "unidentified"
    ADMIN = "admin"
    USER = "user"


@dataclass
class Session:
    role: Role = Role.UNIDENTIFIED
    user_id: Optional[str] = None
    name: Optional[str] = None


class Hub:
    def __init__(
        self,
        registry: PresenceRegistry,
        *,
        heartbeat_interval: float = 30.0,
        default_name_prefix: str = "User-",
    ) -> None:
        self.registry = registry
        self.default_name_prefix = default_name_prefix
        self.monitor = LivenessMonitor(interval_seconds=heartbeat_interval, reap=self.reap)
        self._sessions: Dict[Any, Session] = {}

    def session(self, conn: Any) -> Optional[Session]:
        return self._sessions.get(conn)

    def is_current_admin(self, conn: Any) -> bool:
        session = self._sessions.get(conn)
        return session is not None and session.role is Role.ADMIN and self.registry.admin is conn

    # Transport callbacks

    async def on_connect(self, conn: Any) -> None:
        self._sessions[conn] = Session()
        self.monitor.track(conn)
        logger.info("Client connected. %s", conn.peer_address)

    async def on_message(self, conn: Any, raw: Union[str, bytes, None]) -> None:
        session = self._sessions.get(conn)
        if session is None:
            # Closed or reaped; late frames are ignored.
            return

        parsed = parse_frame(raw)
        if parsed is None:
            logger.debug("Ignoring malformed frame from %s", conn.peer_address)
            return
        kind_value, body = parsed

        try:
            kind = Kind(kind_value)
        except ValueError:
            logger.debug("Unknown message type: %s", kind_value)
            return

        try:
            msg = INBOUND_MODELS[kind].model_validate(body)
        except ValidationError as e:
            logger.debug("Ignoring invalid %s frame: %s", kind.value, e)
            return

        if kind is Kind.ADMIN_INIT:
            await self._admin_init(conn, session)
        elif kind is Kind.USER_INIT:
            await self._user_init(conn, session, msg)
        elif kind is Kind.RENAME:
            await self._rename(conn, session, msg)
        elif kind is Kind.MESSAGE:
            await self._route_message(conn, session, msg)
        elif kind is Kind.FILE:
            await self._route_file(conn, session, msg)
        elif kind is Kind.PING:
            logger.debug("Received ping")
            await self._deliver(conn, dump(PongEvent()))
        elif kind is Kind.HEARTBEAT_ACK:
            conn.is_alive = True

    async def on_close(self, conn: Any) -> None:
        """Drop every trace of `conn`. Safe to call more than once."""
        self.monitor.untrack(conn)
        session = self._sessions.pop(conn, None)
        if session is None:
            return

        if session.role is Role.ADMIN:
            if self.registry.clear_admin(conn):
                logger.info("Admin disconnected.")
            else:
                logger.info("Displaced admin disconnected.")
            return

        if session.role is Role.USER and session.user_id:
            record = self.registry.remove_user(session.user_id)
            if record is None:
                return
            logger.info("User %s disconnected.", record.id)
            await self._notify_admin(dump(UserDisconnectedEvent(id=record.id)))
            return

        logger.info("An unidentified client disconnected.")

    async def on_error(self, conn: Any, error: BaseException) -> None:
        logger.warning("WebSocket error from %s: %r", getattr(conn, "peer_address", "?"), error)

    async def reap(self, conn: Any) -> None:
        """Cleanup for a connection that stopped answering probes, then drop the socket."""
        await self.on_close(conn)
        await conn.terminate()

    # Registration

    async def _admin_init(self, conn: Any, session: Session) -> None:
        if session.role is Role.USER:
            logger.debug("Ignoring admin-init from user %s", session.user_id)
            return

        previous = self.registry.admin
        session.role = Role.ADMIN
        self.registry.set_admin(conn)
        if previous is not None and previous is not conn:
            logger.info("Admin has connected; previous admin connection displaced.")
        else:
            logger.info("Admin has connected.")

        users = [UserSummary(**record.summary()) for record in self.registry.list_users()]
        await self._deliver(conn, dump(AllUsersEvent(users=users)))

    async def _user_init(self, conn: Any, session: Session, msg: UserInit) -> None:
        if session.role is not Role.UNIDENTIFIED:
            logger.debug("Ignoring user-init from already identified %s connection", session.role.value)
            return

        # Name is filled in once the id is known, the default depends on it.
        user_id = self.registry.register_user(conn, "", conn.peer_address)
        name = msg.name or f"{self.default_name_prefix}{user_id[:8]}"
        self.registry.rename_user(user_id, name)
        session.role = Role.USER
        session.user_id = user_id
        session.name = name
        logger.info("User connected with ID: %s (%s) from %s", user_id, name, conn.peer_address)

        await self._notify_admin(dump(UserConnectedEvent(id=user_id, name=name, ip=conn.peer_address)))
        await self._deliver(conn, dump(UserIdEvent(id=user_id)))

    async def _rename(self, conn: Any, session: Session, msg: Rename) -> None:
        if session.role is not Role.USER or not session.user_id:
            return
        name = msg.name or session.name or ""
        if not self.registry.rename_user(session.user_id, name):
            return
        session.name = name
        logger.info("User %s renamed to %s", session.user_id, name)
        await self._notify_admin(dump(UserRenamedEvent(id=session.user_id, name=name)))

    # Routing

    async def _route_message(self, conn: Any, session: Session, msg: TextMessage) -> None:
        if self.is_current_admin(conn):
            await self._deliver_to_user(msg.to, dump(MessageEvent(text=msg.text)))
        elif session.role is Role.USER and self._is_registered(session):
            await self._notify_admin(dump(MessageEvent(sender=session.user_id, text=msg.text)))
        else:
            logger.debug("Dropping message from %s connection", session.role.value)

    async def _route_file(self, conn: Any, session: Session, msg: FilePayload) -> None:
        if self.is_current_admin(conn):
            event = FileEvent(name=msg.name, mime=msg.mime, data=msg.data)
            await self._deliver_to_user(msg.to, dump(event))
        elif session.role is Role.USER and self._is_registered(session):
            event = FileEvent(sender=session.user_id, name=msg.name, mime=msg.mime, data=msg.data)
            await self._notify_admin(dump(event))
        else:
            logger.debug("Dropping file from %s connection", session.role.value)

    def _is_registered(self, session: Session) -> bool:
        return session.user_id is not None and self.registry.lookup_user(session.user_id) is not None

    async def _deliver_to_user(self, user_id: Any, payload: Dict[str, Any]) -> None:
        record = self.registry.lookup_user(user_id) if isinstance(user_id, str) and user_id else None
        target = record.connection if record is not None else None
        if target is None:
            logger.debug("No connected user %s; dropping %s", user_id, payload.get("type"))
            return
        await self._deliver(target, payload)

    async def _notify_admin(self, payload: Dict[str, Any]) -> None:
        admin = self.registry.admin
        if admin is None:
            return
        await self._deliver(admin, payload)

    async def _deliver(self, conn: Any, payload: Dict[str, Any]) -> None:
        if not conn.is_open:
            return
        try:
            await conn.send_event(payload)
        except Exception as e:
            # The transport's close callback cleans up the registry.
            logger.warning("Send to %s failed: %s", conn.peer_address, e)

    def snapshot(self) -> Dict[str, Any]:
        return {"admin_connected": self.registry.admin is not None, "users": len(self.registry)}


_hub: Optional[Hub] = None


def get_hub() -> Hub:
    """Process-wide hub, built from `realtime.config` on first use."""
    global _hub
    if _hub is None:
        _hub = Hub(
            PresenceRegistry(),
            heartbeat_interval=config.HEARTBEAT_INTERVAL_SECONDS,
            default_name_prefix=config.DEFAULT_NAME_PREFIX,
        )
    return _hub


async def reset_hub() -> None:
    """Stop the liveness loop and forget all state (shutdown and tests)."""
    global _hub
    if _hub is not None:
        await _hub.monitor.stop()
    _hub = None
