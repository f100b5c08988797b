"""
Presence tracking (who is connected) for the relay hub.

WHY:
- The admin needs the full user list on connect and a notification on every change.
- All connections land on one process, so in-memory storage is the source of truth.
- Nothing survives a restart; clients re-register when they reconnect.

Design:
- One optional admin slot. A new admin overwrites it; clearing is compare-and-clear
  so a late close from a displaced admin cannot wipe out its successor.
- One dict user_id -> UserRecord. Ids are generated here, never taken from clients.
- Records hold a weak reference to their connection: the transport owns connection
  lifetime, the registry only points at it.

The registry never sends anything. Routing and notifications live in `realtime.hub`.
"""

from __future__ import annotations

import uuid
import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class UserRecord:
    id: str
    name: str
    address: str
    _connection_ref: "weakref.ReferenceType[Any]" = field(repr=False, compare=False)

    @property
    def connection(self) -> Optional[Any]:
        """The live connection, or None once the transport has dropped it."""
        return self._connection_ref()

    def summary(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "ip": self.address}


class PresenceRegistry:
    """Single admin slot plus the user_id -> UserRecord table."""

    def __init__(self) -> None:
        self._admin_ref: Optional[weakref.ReferenceType] = None
        self._users: Dict[str, UserRecord] = {}

    @property
    def admin(self) -> Optional[Any]:
        if self._admin_ref is None:
            return None
        return self._admin_ref()

    def set_admin(self, conn: Any) -> None:
        self._admin_ref = weakref.ref(conn)

    def clear_admin(self, conn: Any) -> bool:
        """Clear the admin slot only if `conn` still holds it."""
        if self.admin is conn:
            self._admin_ref = None
            return True
        return False

    def register_user(self, conn: Any, name: str, address: str) -> str:
        user_id = str(uuid.uuid4())
        self._users[user_id] = UserRecord(
            id=user_id,
            name=name,
            address=address,
            _connection_ref=weakref.ref(conn),
        )
        return user_id

    def rename_user(self, user_id: str, new_name: str) -> bool:
        record = self._users.get(user_id)
        if record is None:
            return False
        record.name = new_name
        return True

    def remove_user(self, user_id: str) -> Optional[UserRecord]:
        return self._users.pop(user_id, None)

    def lookup_user(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    def list_users(self) -> List[UserRecord]:
        return list(self._users.values())

    def __len__(self) -> int:
        return len(self._users)
