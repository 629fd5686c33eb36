"""In-memory DurableStore adapter (Infrastructure).

Used by unit tests and single-process development. A threading.Lock
guards all state because callers reach the store via asyncio.to_thread.
"""

from __future__ import annotations

import threading
from copy import deepcopy
from dataclasses import replace

from scrawl.domain.entities.element import Element, utcnow
from scrawl.domain.entities.room import Membership, Room
from scrawl.domain.exceptions import (
    AlreadyMemberError,
    ElementLockedError,
    RoomCodeTakenError,
    RoomFullError,
)
from scrawl.domain.ports.durable_store import DurableStore


class InMemoryDurableStore(DurableStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rooms: dict[str, Room] = {}
        self._codes: dict[str, str] = {}
        self._memberships: dict[str, list[Membership]] = {}
        # room_id -> element_id -> element, insertion ordered
        self._elements: dict[str, dict[str, Element]] = {}

    def _snapshot(self, room: Room) -> Room:
        return replace(room, member_count=len(self._memberships.get(room.id, [])))

    # ---------- rooms ----------

    def insert_room(self, room: Room) -> Room:
        with self._lock:
            if room.code in self._codes:
                raise RoomCodeTakenError(f"邀请码已被占用: {room.code}")
            self._rooms[room.id] = replace(room)
            self._codes[room.code] = room.id
            self._memberships[room.id] = [
                Membership(room_id=room.id, user_id=room.owner_id, slot=1, joined_at=room.created_at)
            ]
            return self._snapshot(room)

    def find_room_by_id(self, room_id: str) -> Room | None:
        with self._lock:
            room = self._rooms.get(room_id)
            return self._snapshot(room) if room else None

    def find_room_by_code(self, code: str) -> Room | None:
        with self._lock:
            room_id = self._codes.get(code)
            return self._snapshot(self._rooms[room_id]) if room_id else None

    def room_code_exists(self, code: str) -> bool:
        with self._lock:
            return code in self._codes

    def list_rooms_for_user(self, user_id: str) -> list[Room]:
        with self._lock:
            rooms = [
                self._snapshot(self._rooms[room_id])
                for room_id, members in self._memberships.items()
                if any(m.user_id == user_id for m in members)
            ]
        return sorted(rooms, key=lambda r: r.created_at, reverse=True)

    # ---------- memberships ----------

    def insert_membership(self, room_id: str, user_id: str, capacity: int) -> Membership:
        with self._lock:
            members = self._memberships.setdefault(room_id, [])
            if len(members) >= capacity:
                raise RoomFullError(room_id, capacity)
            if any(m.user_id == user_id for m in members):
                raise AlreadyMemberError(room_id, user_id)
            taken = {m.slot for m in members}
            slot = min(s for s in range(1, capacity + 1) if s not in taken)
            membership = Membership(room_id=room_id, user_id=user_id, slot=slot)
            members.append(membership)
            return replace(membership)

    def count_memberships(self, room_id: str) -> int:
        with self._lock:
            return len(self._memberships.get(room_id, []))

    def is_member(self, room_id: str, user_id: str) -> bool:
        with self._lock:
            return any(m.user_id == user_id for m in self._memberships.get(room_id, []))

    # ---------- elements ----------

    def save_draft(self, element: Element) -> Element:
        with self._lock:
            elements = self._elements.setdefault(element.room_id, {})
            existing = elements.get(element.id)
            if existing is None:
                elements[element.id] = deepcopy(element)
                return deepcopy(element)
            if not existing.is_draft_of(element.author_id):
                raise ElementLockedError(element.id)
            existing.replace_payload(element.kind, deepcopy(element.payload))
            return deepcopy(existing)

    def mark_elements_sent(
        self, room_id: str, author_id: str, element_ids: list[str]
    ) -> list[Element]:
        changed: list[Element] = []
        with self._lock:
            elements = self._elements.get(room_id, {})
            sent_at = utcnow()
            for element_id in dict.fromkeys(element_ids):
                element = elements.get(element_id)
                if element is None or not element.is_draft_of(author_id):
                    continue
                element.mark_sent(sent_at)
                changed.append(deepcopy(element))
        return changed

    def list_sent_elements(self, room_id: str) -> list[Element]:
        with self._lock:
            sent = [deepcopy(e) for e in self._elements.get(room_id, {}).values() if e.sent]
        return sorted(sent, key=lambda e: e.created_at)

    def list_drafts(self, room_id: str, author_id: str) -> list[Element]:
        with self._lock:
            drafts = [
                deepcopy(e)
                for e in self._elements.get(room_id, {}).values()
                if e.is_draft_of(author_id)
            ]
        return sorted(drafts, key=lambda e: e.created_at)

    def delete_draft(self, room_id: str, author_id: str, element_id: str) -> bool:
        with self._lock:
            elements = self._elements.get(room_id, {})
            element = elements.get(element_id)
            if element is None or not element.is_draft_of(author_id):
                return False
            del elements[element_id]
            return True
