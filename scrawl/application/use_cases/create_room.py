"""CreateRoomUseCase - 创建房间用例

业务场景：
已登录身份创建一个新的两人房间，获得可以分享给对方的邀请码

职责：
1. 生成候选邀请码，冲突时重试（预检查 + 唯一约束竞争）
2. 在同一事务中写入房间记录与创建者的成员记录（slot=1）
3. 返回创建的 Room
"""

import logging
from dataclasses import dataclass

from scrawl.config import settings
from scrawl.domain.entities.room import Room, generate_room_code
from scrawl.domain.exceptions import DomainError, RoomCodeTakenError
from scrawl.domain.ports.durable_store import DurableStore

logger = logging.getLogger(__name__)


@dataclass
class CreateRoomInput:
    """创建房间的输入参数

    属性说明：
    - owner_id: 创建者身份 ID
    """

    owner_id: str


class CreateRoomUseCase:
    """创建房间用例

    依赖：
    - DurableStore: 持久化存储（通过构造函数注入）
    """

    def __init__(
        self,
        store: DurableStore,
        code_length: int | None = None,
        max_attempts: int | None = None,
    ):
        self.store = store
        self.code_length = code_length or settings.room_code_length
        self.max_attempts = max_attempts or settings.room_code_max_attempts

    def execute(self, input_data: CreateRoomInput) -> Room:
        """执行创建房间用例

        返回：
            Room 实体（member_count=1）

        抛出：
            DomainError: 多次重试后仍无法生成唯一邀请码
            StoreUnavailableError: 存储暂时不可用
        """
        for attempt in range(1, self.max_attempts + 1):
            code = generate_room_code(self.code_length)
            if self.store.room_code_exists(code):
                logger.debug("Room code %s already exists (attempt %d)", code, attempt)
                continue

            room = Room.create(code=code, owner_id=input_data.owner_id)
            try:
                created = self.store.insert_room(room)
            except RoomCodeTakenError:
                logger.debug("Room code %s taken concurrently (attempt %d)", code, attempt)
                continue

            logger.info("Room %s created by %s with code %s", created.id, created.owner_id, code)
            return created

        raise DomainError(f"无法生成唯一的房间邀请码（已尝试 {self.max_attempts} 次）")
