"""RoomBroadcaster Port - 向房间在线连接推送消息

目标：
- 应用服务（DraftLedger）只依赖推送抽象，不直接依赖 WebSocket 实现
- 基础设施层的 SessionRegistry 提供具体实现
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class RoomBroadcaster(Protocol):
    async def broadcast(
        self, room_id: str, message: dict[str, Any], exclude: Any | None = None
    ) -> int:
        """向房间内除 exclude 外的在线连接发送消息，返回成功发送的连接数"""
        ...

    async def commit_and_broadcast(
        self,
        room_id: str,
        commit: Callable[[], Awaitable[tuple[T, dict[str, Any] | None]]],
        exclude: Any | None = None,
    ) -> T:
        """与房间成员变化互斥地执行 commit，再广播它返回的消息（None 则不广播）"""
        ...
