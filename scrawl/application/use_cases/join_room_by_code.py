"""JoinRoomByCodeUseCase - 通过邀请码加入房间

执行流程：
1. 按邀请码查找房间（RoomNotFoundError）
2. 条件插入成员记录：
   - 成员数已达上限 → RoomFullError
   - 已是成员 → AlreadyMemberError
3. 返回更新了成员数的 Room
"""

import logging
from dataclasses import dataclass

from scrawl.config import settings
from scrawl.domain.entities.room import Room
from scrawl.domain.exceptions import RoomNotFoundError
from scrawl.domain.ports.durable_store import DurableStore

logger = logging.getLogger(__name__)


@dataclass
class JoinRoomByCodeInput:
    code: str
    user_id: str


class JoinRoomByCodeUseCase:
    def __init__(self, store: DurableStore, capacity: int | None = None):
        self.store = store
        self.capacity = capacity or settings.room_capacity

    def execute(self, input_data: JoinRoomByCodeInput) -> Room:
        """执行加入房间用例

        抛出：
            RoomNotFoundError: 邀请码不存在
            RoomFullError: 房间成员已满
            AlreadyMemberError: 已是房间成员
        """
        code = input_data.code.strip().lower()
        room = self.store.find_room_by_code(code)
        if room is None:
            raise RoomNotFoundError(code)

        membership = self.store.insert_membership(room.id, input_data.user_id, self.capacity)
        logger.info("%s joined room %s in slot %d", input_data.user_id, room.id, membership.slot)

        room.member_count = self.store.count_memberships(room.id)
        return room
