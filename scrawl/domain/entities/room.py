"""房间与成员实体

Room 是持久化的两人协作空间；Membership 是身份加入房间的长期授权，
与当前是否在线无关。
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from scrawl.domain.entities.element import utcnow
from scrawl.domain.exceptions import DomainError

ROOM_CODE_ALPHABET = string.ascii_lowercase + string.digits


def generate_room_code(length: int = 6) -> str:
    """生成候选邀请码（如 "k7x2mq"），唯一性由调用者保证"""
    if length <= 0:
        raise DomainError("邀请码长度必须大于0")
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


@dataclass
class Room:
    """房间聚合根

    属性说明：
    - id: 房间唯一标识（UUID）
    - code: 邀请码（唯一）
    - owner_id: 创建者身份 ID
    - created_at: 创建时间
    - member_count: 持久成员数（查询时填充）
    """

    id: str
    code: str
    owner_id: str
    created_at: datetime = field(default_factory=utcnow)
    member_count: int = 0

    @staticmethod
    def create(code: str, owner_id: str) -> "Room":
        """创建房间

        抛出：
            DomainError: code 或 owner_id 为空
        """
        if not code:
            raise DomainError("code 不能为空")
        if not owner_id:
            raise DomainError("owner_id 不能为空")
        return Room(id=str(uuid4()), code=code, owner_id=owner_id, created_at=utcnow())


@dataclass
class Membership:
    """成员记录

    - slot: 成员席位（1..capacity），(room_id, slot) 在存储层唯一
    """

    room_id: str
    user_id: str
    slot: int
    joined_at: datetime = field(default_factory=utcnow)
