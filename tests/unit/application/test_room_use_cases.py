"""房间用例单元测试

覆盖：CreateRoomUseCase、JoinRoomByCodeUseCase、ListMyRoomsUseCase、UploadImageUseCase
"""

from unittest.mock import Mock

import pytest

from scrawl.application.use_cases import (
    CreateRoomInput,
    CreateRoomUseCase,
    JoinRoomByCodeInput,
    JoinRoomByCodeUseCase,
    ListMyRoomsUseCase,
    UploadImageInput,
    UploadImageUseCase,
)
from scrawl.domain.entities.room import Room
from scrawl.domain.exceptions import (
    AlreadyMemberError,
    DomainError,
    InvalidElementError,
    RoomFullError,
    RoomNotFoundError,
)


class TestCreateRoomUseCase:
    def test_create_room_makes_owner_a_member(self, memory_store):
        use_case = CreateRoomUseCase(store=memory_store)

        room = use_case.execute(CreateRoomInput(owner_id="alice"))

        assert room.owner_id == "alice"
        assert len(room.code) == 6
        assert room.member_count == 1
        assert memory_store.is_member(room.id, "alice")

    def test_code_collision_is_retried(self, memory_store, make_room, monkeypatch):
        """测试：邀请码冲突时生成新码"""
        make_room("bob", code="taken1")
        codes = iter(["taken1", "fresh1"])
        monkeypatch.setattr(
            "scrawl.application.use_cases.create_room.generate_room_code",
            lambda length: next(codes),
        )

        room = CreateRoomUseCase(store=memory_store).execute(CreateRoomInput(owner_id="alice"))

        assert room.code == "fresh1"

    def test_concurrent_code_claim_is_retried(self, memory_store, monkeypatch):
        """测试：预检查通过但插入时唯一约束冲突，同样重试"""
        codes = iter(["race01", "race02"])
        monkeypatch.setattr(
            "scrawl.application.use_cases.create_room.generate_room_code",
            lambda length: next(codes),
        )
        monkeypatch.setattr(memory_store, "room_code_exists", lambda code: False)
        memory_store.insert_room(Room.create(code="race01", owner_id="bob"))

        room = CreateRoomUseCase(store=memory_store).execute(CreateRoomInput(owner_id="alice"))

        assert room.code == "race02"

    def test_gives_up_after_max_attempts(self, memory_store, make_room, monkeypatch):
        make_room("bob", code="always")
        monkeypatch.setattr(
            "scrawl.application.use_cases.create_room.generate_room_code",
            lambda length: "always",
        )

        with pytest.raises(DomainError, match="3"):
            CreateRoomUseCase(store=memory_store, max_attempts=3).execute(
                CreateRoomInput(owner_id="alice")
            )


class TestJoinRoomByCodeUseCase:
    def test_join_by_code(self, memory_store, make_room):
        make_room("alice", code="k7x2mq")

        room = JoinRoomByCodeUseCase(store=memory_store).execute(
            JoinRoomByCodeInput(code=" K7X2MQ ", user_id="bob")
        )

        assert room.member_count == 2
        assert memory_store.is_member(room.id, "bob")

    def test_unknown_code(self, memory_store):
        with pytest.raises(RoomNotFoundError):
            JoinRoomByCodeUseCase(store=memory_store).execute(
                JoinRoomByCodeInput(code="nope00", user_id="bob")
            )

    def test_third_member_is_rejected(self, memory_store, make_room):
        room = make_room("alice", "bob", code="full01")

        with pytest.raises(RoomFullError):
            JoinRoomByCodeUseCase(store=memory_store).execute(
                JoinRoomByCodeInput(code="full01", user_id="carol")
            )
        assert memory_store.count_memberships(room.id) == 2

    def test_full_is_reported_before_already_member(self, memory_store, make_room):
        make_room("alice", "bob", code="full02")

        with pytest.raises(RoomFullError):
            JoinRoomByCodeUseCase(store=memory_store).execute(
                JoinRoomByCodeInput(code="full02", user_id="bob")
            )

    def test_existing_member_cannot_join_twice(self, memory_store, make_room):
        make_room("alice", code="solo01")

        with pytest.raises(AlreadyMemberError):
            JoinRoomByCodeUseCase(store=memory_store).execute(
                JoinRoomByCodeInput(code="solo01", user_id="alice")
            )


class TestListMyRoomsUseCase:
    def test_lists_only_rooms_of_user(self, memory_store, make_room):
        mine = make_room("alice", "bob", code="room01")
        make_room("carol", code="room02")

        rooms = ListMyRoomsUseCase(store=memory_store).execute("bob")

        assert [r.id for r in rooms] == [mine.id]
        assert rooms[0].member_count == 2


class TestUploadImageUseCase:
    def test_stores_image(self):
        blob_store = Mock()
        blob_store.store.return_value = "/uploads/abc.png"

        url = UploadImageUseCase(blob_store=blob_store, max_bytes=100).execute(
            UploadImageInput(data=b"\x89PNG", content_type="image/png", uploader_id="alice")
        )

        assert url == "/uploads/abc.png"
        blob_store.store.assert_called_once_with(b"\x89PNG", "image/png")

    def test_content_type_parameters_are_ignored(self):
        blob_store = Mock()
        blob_store.store.return_value = "/uploads/abc.jpg"

        UploadImageUseCase(blob_store=blob_store, max_bytes=100).execute(
            UploadImageInput(data=b"jpeg", content_type="IMAGE/JPEG; q=1", uploader_id="alice")
        )

        blob_store.store.assert_called_once_with(b"jpeg", "image/jpeg")

    @pytest.mark.parametrize(
        "data,content_type",
        [
            (b"hello", "text/plain"),
            (b"<svg onload=\"alert(1)\"/>", "image/svg+xml"),
            (b"BM", "image/bmp"),
            (b"", "image/png"),
            (b"x" * 101, "image/png"),
        ],
    )
    def test_rejects_invalid_uploads(self, data, content_type):
        blob_store = Mock()

        with pytest.raises(InvalidElementError):
            UploadImageUseCase(blob_store=blob_store, max_bytes=100).execute(
                UploadImageInput(data=data, content_type=content_type, uploader_id="alice")
            )
        blob_store.store.assert_not_called()
