"""测试辅助函数"""

from unittest.mock import AsyncMock


def make_websocket() -> AsyncMock:
    """模拟 WebSocket（记录 send_json / close 调用）"""
    websocket = AsyncMock()
    websocket.send_json = AsyncMock()
    websocket.close = AsyncMock()
    return websocket


def sent_messages(websocket: AsyncMock) -> list[dict]:
    return [call.args[0] for call in websocket.send_json.call_args_list]


def sent_types(websocket: AsyncMock) -> list[str]:
    return [message["type"] for message in sent_messages(websocket)]


def messages_of_type(websocket: AsyncMock, message_type: str) -> list[dict]:
    return [m for m in sent_messages(websocket) if m["type"] == message_type]


class RecordingBroadcaster:
    """记录广播消息的 RoomBroadcaster 实现"""

    def __init__(self) -> None:
        self.broadcasts: list[tuple[str, dict, object]] = []

    async def broadcast(self, room_id, message, exclude=None) -> int:
        self.broadcasts.append((room_id, message, exclude))
        return 1

    async def commit_and_broadcast(self, room_id, commit, exclude=None):
        result, message = await commit()
        if message is not None:
            await self.broadcast(room_id, message, exclude)
        return result
