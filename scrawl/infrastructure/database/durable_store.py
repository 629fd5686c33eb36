"""SQLAlchemy DurableStore 实现

职责：
- 实现 Domain 层 DurableStore Port
- 每个公开方法打开一个 Session，成功时提交，失败时回滚
- 数据库驱动异常统一转换为 StoreUnavailableError，领域异常原样抛出

依赖：
- session_factory: 返回新 Session 的可调用对象（通常是 sessionmaker）
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scrawl.domain.entities.element import Element, utcnow
from scrawl.domain.entities.room import Membership, Room
from scrawl.domain.exceptions import (
    AlreadyMemberError,
    ElementLockedError,
    RoomFullError,
    StoreUnavailableError,
)
from scrawl.infrastructure.database.repositories import (
    SQLAlchemyElementRepository,
    SQLAlchemyMembershipRepository,
    SQLAlchemyRoomRepository,
)

logger = logging.getLogger(__name__)


class SQLAlchemyDurableStore:
    """基于 SQLAlchemy 的持久化存储"""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Durable store operation failed: %s", exc)
            raise StoreUnavailableError(str(exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ---------- 房间 ----------

    def insert_room(self, room: Room) -> Room:
        with self._transaction() as session:
            SQLAlchemyRoomRepository(session).add(room)
            owner = Membership(
                room_id=room.id, user_id=room.owner_id, slot=1, joined_at=room.created_at
            )
            SQLAlchemyMembershipRepository(session).add(owner)
        room.member_count = 1
        return room

    def find_room_by_id(self, room_id: str) -> Room | None:
        with self._transaction() as session:
            return SQLAlchemyRoomRepository(session).find_by_id(room_id)

    def find_room_by_code(self, code: str) -> Room | None:
        with self._transaction() as session:
            return SQLAlchemyRoomRepository(session).find_by_code(code)

    def room_code_exists(self, code: str) -> bool:
        with self._transaction() as session:
            return SQLAlchemyRoomRepository(session).code_exists(code)

    def list_rooms_for_user(self, user_id: str) -> list[Room]:
        with self._transaction() as session:
            return SQLAlchemyRoomRepository(session).list_for_user(user_id)

    # ---------- 成员 ----------

    def insert_membership(self, room_id: str, user_id: str, capacity: int) -> Membership:
        """按最小空闲席位插入成员记录

        席位冲突（并发插入同一席位）时重新读取并重试；
        重试次数以 capacity 为界，席位用尽即视为已满。
        """
        with self._transaction() as session:
            repo = SQLAlchemyMembershipRepository(session)
            for _ in range(capacity + 1):
                taken = repo.taken_slots(room_id)
                if len(taken) >= capacity:
                    raise RoomFullError(room_id, capacity)
                if repo.exists(room_id, user_id):
                    raise AlreadyMemberError(room_id, user_id)

                slot = min(s for s in range(1, capacity + 1) if s not in taken)
                membership = Membership(room_id=room_id, user_id=user_id, slot=slot)
                if repo.add(membership):
                    return membership
                logger.debug("Slot %s in room %s was taken concurrently, retrying", slot, room_id)

            raise RoomFullError(room_id, capacity)

    def count_memberships(self, room_id: str) -> int:
        with self._transaction() as session:
            return SQLAlchemyMembershipRepository(session).count(room_id)

    def is_member(self, room_id: str, user_id: str) -> bool:
        with self._transaction() as session:
            return SQLAlchemyMembershipRepository(session).exists(room_id, user_id)

    # ---------- 元素 ----------

    def save_draft(self, element: Element) -> Element:
        with self._transaction() as session:
            repo = SQLAlchemyElementRepository(session)
            existing = repo.find(element.room_id, element.id)
            if existing is None:
                if repo.add(element):
                    return element
                existing = repo.find(element.room_id, element.id)

            if existing is None or not existing.is_draft_of(element.author_id):
                raise ElementLockedError(element.id)
            if not repo.replace_draft_payload(element):
                raise ElementLockedError(element.id)

            existing.replace_payload(element.kind, element.payload)
            return existing

    def mark_elements_sent(
        self, room_id: str, author_id: str, element_ids: list[str]
    ) -> list[Element]:
        changed: list[Element] = []
        with self._transaction() as session:
            repo = SQLAlchemyElementRepository(session)
            sent_at = utcnow()
            for element_id in dict.fromkeys(element_ids):
                if repo.mark_sent_if_draft(room_id, author_id, element_id, sent_at):
                    element = repo.find(room_id, element_id)
                    if element is not None:
                        changed.append(element)
        return changed

    def list_sent_elements(self, room_id: str) -> list[Element]:
        with self._transaction() as session:
            return SQLAlchemyElementRepository(session).list_sent(room_id)

    def list_drafts(self, room_id: str, author_id: str) -> list[Element]:
        with self._transaction() as session:
            return SQLAlchemyElementRepository(session).list_drafts(room_id, author_id)

    def delete_draft(self, room_id: str, author_id: str, element_id: str) -> bool:
        with self._transaction() as session:
            return SQLAlchemyElementRepository(session).delete_draft(
                room_id, author_id, element_id
            )
