"""Room DTO - 房间数据传输对象

定义房间与上传相关的 API 请求和响应格式
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scrawl.domain.entities.room import Room


class JoinRoomRequest(BaseModel):
    """通过邀请码加入房间"""

    code: str = Field(..., description="房间邀请码", min_length=1, max_length=32)


class RoomResponse(BaseModel):
    """房间响应"""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="房间 ID")
    code: str = Field(..., description="邀请码")
    owner_id: str = Field(..., description="创建者身份 ID")
    member_count: int = Field(..., description="持久成员数")
    created_at: datetime = Field(..., description="创建时间")

    @classmethod
    def from_entity(cls, room: Room) -> "RoomResponse":
        return cls.model_validate(room)


class RoomListResponse(BaseModel):
    rooms: list[RoomResponse]
    total: int


class UploadResponse(BaseModel):
    """上传响应：图片访问 URL"""

    url: str = Field(..., description="图片访问 URL")
