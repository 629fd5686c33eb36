"""SQLAlchemyDurableStore 单元测试

使用 SQLite 内存数据库测试：
1. 房间与创建者成员记录在同一事务写入
2. 成员数上限（slot 唯一约束 compare-and-set）
3. 草稿保存 / 发送 / 删除的条件更新
4. 数据库异常转换为 StoreUnavailableError
"""

from datetime import UTC, datetime, timedelta

import pytest

from scrawl.domain.entities.element import Element
from scrawl.domain.entities.room import Room
from scrawl.domain.exceptions import (
    AlreadyMemberError,
    ElementLockedError,
    RoomCodeTakenError,
    RoomFullError,
    StoreUnavailableError,
)
from scrawl.infrastructure.database.base import Base
from scrawl.infrastructure.database.durable_store import SQLAlchemyDurableStore
from scrawl.infrastructure.database.engine import create_session_factory, get_sync_engine
from scrawl.infrastructure.database.repositories import SQLAlchemyMembershipRepository


@pytest.fixture
def engine():
    """创建内存数据库引擎"""
    from scrawl.infrastructure.database import models  # noqa: F401

    engine = get_sync_engine("sqlite://", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> SQLAlchemyDurableStore:
    return SQLAlchemyDurableStore(create_session_factory(engine))


@pytest.fixture
def room(store) -> Room:
    return store.insert_room(Room.create(code="abc123", owner_id="u1"))


def _stroke(element_id: str, **extra) -> dict:
    data = {"id": element_id, "type": "stroke", "points": [[0, 0], [1, 1]]}
    data.update(extra)
    return data


def _draft(room: Room, element_id: str, author_id: str = "u1", **extra) -> Element:
    return Element.create_draft(room.id, author_id, _stroke(element_id, **extra))


class TestRooms:
    def test_insert_room_writes_owner_membership(self, store, room):
        """测试：创建房间同时写入创建者成员记录（slot=1）"""
        assert room.member_count == 1
        assert store.is_member(room.id, "u1")
        assert store.count_memberships(room.id) == 1

    def test_find_room_by_code_and_id(self, store, room):
        by_code = store.find_room_by_code("abc123")
        by_id = store.find_room_by_id(room.id)

        assert by_code is not None and by_code.id == room.id
        assert by_id is not None and by_id.code == "abc123"
        assert by_id.member_count == 1
        assert by_id.created_at.tzinfo is not None

    def test_find_missing_room_returns_none(self, store):
        assert store.find_room_by_code("zzzzzz") is None
        assert store.find_room_by_id("missing") is None

    def test_room_code_exists(self, store, room):
        assert store.room_code_exists("abc123")
        assert not store.room_code_exists("zzz999")

    def test_duplicate_code_raises_and_keeps_first_room(self, store, room):
        """测试：邀请码冲突抛出 RoomCodeTakenError，且不留下部分数据"""
        with pytest.raises(RoomCodeTakenError):
            store.insert_room(Room.create(code="abc123", owner_id="u9"))

        assert store.find_room_by_code("abc123").owner_id == "u1"
        assert store.list_rooms_for_user("u9") == []

    def test_list_rooms_for_user_newest_first(self, store):
        older = Room.create(code="old111", owner_id="u1")
        older.created_at = datetime.now(UTC) - timedelta(hours=1)
        store.insert_room(older)
        newer = store.insert_room(Room.create(code="new222", owner_id="u1"))
        store.insert_membership(newer.id, "u2", capacity=2)

        rooms = store.list_rooms_for_user("u1")

        assert [r.code for r in rooms] == ["new222", "old111"]
        assert [r.member_count for r in rooms] == [2, 1]
        assert [r.code for r in store.list_rooms_for_user("u2")] == ["new222"]


class TestMemberships:
    def test_second_member_takes_slot_two(self, store, room):
        membership = store.insert_membership(room.id, "u2", capacity=2)

        assert membership.slot == 2
        assert store.count_memberships(room.id) == 2

    def test_third_member_is_rejected(self, store, room):
        store.insert_membership(room.id, "u2", capacity=2)

        with pytest.raises(RoomFullError):
            store.insert_membership(room.id, "u3", capacity=2)

        assert store.count_memberships(room.id) == 2
        assert not store.is_member(room.id, "u3")

    def test_existing_member_is_rejected(self, store, room):
        with pytest.raises(AlreadyMemberError):
            store.insert_membership(room.id, "u1", capacity=2)

    def test_full_room_reports_full_before_already_member(self, store, room):
        store.insert_membership(room.id, "u2", capacity=2)

        with pytest.raises(RoomFullError):
            store.insert_membership(room.id, "u1", capacity=2)

    def test_slot_race_is_retried_and_reported_as_full(self, store, room, monkeypatch):
        """测试：读取到过期的空闲席位时，唯一约束阻止超额插入

        Given: 房间已有 2 个成员，但第一次读取只看到 slot=1（模拟并发插入）
        When: 第三个身份尝试加入
        Then: 插入 slot=2 因唯一约束失败，重试后报告 RoomFullError
        """
        # Arrange
        store.insert_membership(room.id, "u2", capacity=2)
        original = SQLAlchemyMembershipRepository.taken_slots
        calls = []

        def stale_once(self, room_id):
            calls.append(room_id)
            if len(calls) == 1:
                return {1}
            return original(self, room_id)

        monkeypatch.setattr(SQLAlchemyMembershipRepository, "taken_slots", stale_once)

        # Act & Assert
        with pytest.raises(RoomFullError):
            store.insert_membership(room.id, "u3", capacity=2)

        assert len(calls) == 2
        assert store.count_memberships(room.id) == 2
        assert not store.is_member(room.id, "u3")


class TestElements:
    def test_save_draft_then_replace_payload(self, store, room):
        store.save_draft(_draft(room, "s1"))
        updated = store.save_draft(_draft(room, "s1", color="#ff0000"))

        drafts = store.list_drafts(room.id, "u1")
        assert len(drafts) == 1
        assert drafts[0].payload["color"] == "#ff0000"
        assert updated.payload["color"] == "#ff0000"

    def test_save_over_sent_element_is_rejected(self, store, room):
        store.save_draft(_draft(room, "s1"))
        store.mark_elements_sent(room.id, "u1", ["s1"])

        with pytest.raises(ElementLockedError):
            store.save_draft(_draft(room, "s1", color="#ff0000"))

        assert store.list_sent_elements(room.id)[0].payload["color"] == "#2c2c2c"

    def test_save_over_other_authors_draft_is_rejected(self, store, room):
        store.insert_membership(room.id, "u2", capacity=2)
        store.save_draft(_draft(room, "s1", author_id="u1"))

        with pytest.raises(ElementLockedError):
            store.save_draft(_draft(room, "s1", author_id="u2"))

    def test_mark_elements_sent_is_idempotent(self, store, room):
        """测试：重复发送同一批 ID，只有第一次产生变化"""
        for element_id in ("a", "b", "c"):
            store.save_draft(_draft(room, element_id))

        first = store.mark_elements_sent(room.id, "u1", ["a", "b", "b"])
        second = store.mark_elements_sent(room.id, "u1", ["a", "b"])

        assert [e.id for e in first] == ["a", "b"]
        assert all(e.sent and e.sent_at is not None for e in first)
        assert second == []
        assert [e.id for e in store.list_drafts(room.id, "u1")] == ["c"]

    def test_mark_elements_sent_ignores_foreign_and_unknown_ids(self, store, room):
        store.insert_membership(room.id, "u2", capacity=2)
        store.save_draft(_draft(room, "mine", author_id="u1"))
        store.save_draft(_draft(room, "theirs", author_id="u2"))

        sent = store.mark_elements_sent(room.id, "u1", ["mine", "theirs", "ghost"])

        assert [e.id for e in sent] == ["mine"]
        assert [e.id for e in store.list_drafts(room.id, "u2")] == ["theirs"]

    def test_list_sent_elements_ordered_and_draft_free(self, store, room):
        """测试：已发送元素按 created_at 升序，草稿不包含在内"""
        now = datetime.now(UTC)
        late = _draft(room, "late")
        late.created_at = now
        early = _draft(room, "early")
        early.created_at = now - timedelta(minutes=5)
        draft = _draft(room, "draft")
        draft.created_at = now - timedelta(minutes=10)

        store.save_draft(late)
        store.save_draft(early)
        store.save_draft(draft)
        store.mark_elements_sent(room.id, "u1", ["late", "early"])

        assert [e.id for e in store.list_sent_elements(room.id)] == ["early", "late"]

    def test_delete_draft_only_removes_own_unsent_elements(self, store, room):
        store.insert_membership(room.id, "u2", capacity=2)
        store.save_draft(_draft(room, "mine"))
        store.save_draft(_draft(room, "sent"))
        store.save_draft(_draft(room, "theirs", author_id="u2"))
        store.mark_elements_sent(room.id, "u1", ["sent"])

        assert store.delete_draft(room.id, "u1", "mine") is True
        assert store.delete_draft(room.id, "u1", "sent") is False
        assert store.delete_draft(room.id, "u1", "theirs") is False
        assert store.delete_draft(room.id, "u1", "ghost") is False

        assert [e.id for e in store.list_sent_elements(room.id)] == ["sent"]
        assert [e.id for e in store.list_drafts(room.id, "u2")] == ["theirs"]


def test_database_errors_become_store_unavailable():
    """测试：表不存在等数据库错误转换为 StoreUnavailableError"""
    engine = get_sync_engine("sqlite://", echo=False)
    store = SQLAlchemyDurableStore(create_session_factory(engine))

    with pytest.raises(StoreUnavailableError):
        store.find_room_by_code("abc123")

    engine.dispose()
