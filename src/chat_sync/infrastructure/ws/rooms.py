"""Chat-scoped room membership for live connections."""
from __future__ import annotations

import logging
from uuid import UUID

logger = logging.getLogger(__name__)


class RoomManager:
    """Tracks which connections are joined to which chat rooms.

    Membership lives only as long as the process; a reconnecting client
    starts with no rooms. Join and leave are idempotent.
    """

    def __init__(self) -> None:
        self._members: dict[UUID, set[str]] = {}
        self._rooms: dict[str, set[UUID]] = {}

    def join(self, conn_id: str, room: UUID) -> bool:
        members = self._members.setdefault(room, set())
        if conn_id in members:
            return False
        members.add(conn_id)
        self._rooms.setdefault(conn_id, set()).add(room)
        logger.debug("Connection %s joined room %s", conn_id, room)
        return True

    def leave(self, conn_id: str, room: UUID) -> bool:
        members = self._members.get(room)
        if not members or conn_id not in members:
            return False
        members.discard(conn_id)
        if not members:
            del self._members[room]
        rooms = self._rooms.get(conn_id)
        if rooms is not None:
            rooms.discard(room)
            if not rooms:
                del self._rooms[conn_id]
        logger.debug("Connection %s left room %s", conn_id, room)
        return True

    def drop(self, conn_id: str) -> set[UUID]:
        """Leave every room. Returns the rooms that were left."""
        rooms = self._rooms.pop(conn_id, set())
        for room in rooms:
            members = self._members.get(room)
            if members is None:
                continue
            members.discard(conn_id)
            if not members:
                del self._members[room]
        return rooms

    def members(self, room: UUID) -> frozenset[str]:
        return frozenset(self._members.get(room, ()))

    def rooms_of(self, conn_id: str) -> frozenset[UUID]:
        return frozenset(self._rooms.get(conn_id, ()))

    def is_member(self, conn_id: str, room: UUID) -> bool:
        return conn_id in self._members.get(room, ())
