"""
Pydantic models for the hub's websocket frames.

Inbound frames are keyed JSON objects discriminated by `type` (`kind` is accepted as
an alias). Unknown fields are ignored. Outbound frames are dumped with `None` fields
omitted, so a missing `text` on the way in stays missing on the way out.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


class Kind(str, Enum):
    ADMIN_INIT = "admin-init"
    USER_INIT = "user-init"
    RENAME = "rename"
    MESSAGE = "message"
    FILE = "file"
    PING = "ping"
    HEARTBEAT_ACK = "heartbeat-ack"


# Inbound


def _display_name(value: Any) -> Optional[str]:
    """Scalars become their JSON text; objects and arrays count as no name."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return None


DisplayName = Annotated[Optional[str], BeforeValidator(_display_name)]


class _Inbound(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AdminInit(_Inbound):
    pass


class UserInit(_Inbound):
    name: DisplayName = None


class Rename(_Inbound):
    name: DisplayName = None


class TextMessage(_Inbound):
    to: Optional[Any] = None
    text: Optional[Any] = None


class FilePayload(_Inbound):
    to: Optional[Any] = None
    name: Optional[Any] = None
    mime: Optional[Any] = None
    data: Optional[Any] = None


class Ping(_Inbound):
    pass


class HeartbeatAck(_Inbound):
    pass


INBOUND_MODELS = {
    Kind.ADMIN_INIT: AdminInit,
    Kind.USER_INIT: UserInit,
    Kind.RENAME: Rename,
    Kind.MESSAGE: TextMessage,
    Kind.FILE: FilePayload,
    Kind.PING: Ping,
    Kind.HEARTBEAT_ACK: HeartbeatAck,
}


def parse_frame(raw: Union[str, bytes, None]) -> Optional[Tuple[str, Dict[str, Any]]]:
    """Decode a raw frame into (kind, body). Returns None for anything unusable."""
    if not raw:
        return None
    try:
        msg = json.loads(raw)
    except (ValueError, RecursionError):
        # JSONDecodeError and UnicodeDecodeError are ValueErrors; deep nesting raises RecursionError.
        return None
    if not isinstance(msg, dict):
        return None
    kind = msg.get("type") or msg.get("kind")
    if not isinstance(kind, str) or not kind:
        return None
    return kind, msg


# Outbound


class _Outbound(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UserSummary(BaseModel):
    id: str
    name: str
    ip: str


class AllUsersEvent(_Outbound):
    type: Literal["all-users"] = "all-users"
    users: List[UserSummary]


class UserConnectedEvent(_Outbound):
    type: Literal["user-connected"] = "user-connected"
    id: str
    name: str
    ip: str


class UserIdEvent(_Outbound):
    type: Literal["user-id"] = "user-id"
    id: str


class UserRenamedEvent(_Outbound):
    type: Literal["user-renamed"] = "user-renamed"
    id: str
    name: str


class UserDisconnectedEvent(_Outbound):
    type: Literal["user-disconnected"] = "user-disconnected"
    id: str


class MessageEvent(_Outbound):
    type: Literal["message"] = "message"
    sender: Optional[str] = Field(default=None, alias="from")
    text: Optional[Any] = None


class FileEvent(_Outbound):
    type: Literal["file"] = "file"
    sender: Optional[str] = Field(default=None, alias="from")
    name: Optional[Any] = None
    mime: Optional[Any] = None
    data: Optional[Any] = None


class PongEvent(_Outbound):
    type: Literal["pong"] = "pong"


class HeartbeatEvent(_Outbound):
    type: Literal["heartbeat"] = "heartbeat"


def dump(event: BaseModel) -> Dict[str, Any]:
    return event.model_dump(by_alias=True, exclude_none=True)
