"""API DTO（Data Transfer Objects）

- 使用 Pydantic v2 验证请求数据
- 与 Domain 实体分离，通过 from_entity 转换
"""

from scrawl.interfaces.api.dto.room_dto import (
    JoinRoomRequest,
    RoomListResponse,
    RoomResponse,
    UploadResponse,
)

__all__ = [
    "JoinRoomRequest",
    "RoomListResponse",
    "RoomResponse",
    "UploadResponse",
]
