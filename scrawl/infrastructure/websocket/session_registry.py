"""WebSocket 会话注册表

管理每个房间的在线连接，负责在线容量控制：
- 每个房间最多 capacity（默认 2）个在线连接
- 在线连接已满时拒绝任何新连接，包括同一身份的第二个连接
- 同一身份在同一房间最多一个在线连接：有空位时新连接顶替旧连接
- 房间条目在第一次加入时创建，在线连接数归零时移除

并发约束：
同一房间的 join / leave / broadcast / commit_and_broadcast 在该房间的 asyncio.Lock 下串行执行，
两个并发 join 不可能同时看到"还有一个空位"。锁按引用计数创建和回收。

使用示例：
    registry = SessionRegistry(capacity=2)
    connection = LiveConnection(websocket=websocket)
    await registry.join("room-1", identity, connection, on_admitted=send_canvas)
    await registry.broadcast("room-1", message, exclude=connection)
    await registry.leave(connection)
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar
from uuid import uuid4

from scrawl.application.services.protocol_messages import build_message
from scrawl.domain.entities.element import utcnow
from scrawl.domain.exceptions import RoomFullError
from scrawl.domain.value_objects.identity import Identity

logger = logging.getLogger(__name__)

SESSION_REPLACED_CLOSE_CODE = 4000

T = TypeVar("T")


class ConnectionState(str, Enum):
    """连接协议状态"""

    DISCONNECTED = "disconnected"
    JOINING = "joining"
    JOINED = "joined"


@dataclass(eq=False)
class LiveConnection:
    """在线连接

    属性说明：
    - websocket: 底层 WebSocket 对象（需要 send_json / close）
    - connection_id: 连接唯一标识
    - room_id / identity: 加入房间后绑定
    - state: 协议状态
    """

    websocket: Any
    connection_id: str = field(default_factory=lambda: str(uuid4()))
    room_id: str | None = None
    identity: Identity | None = None
    state: ConnectionState = ConnectionState.DISCONNECTED
    connected_at: datetime = field(default_factory=utcnow)
    closed: bool = False

    @property
    def user_id(self) -> str | None:
        return self.identity.user_id if self.identity else None

    async def send(self, message: dict[str, Any]) -> bool:
        """发送消息，失败时只记录日志

        返回：
            是否发送成功
        """
        try:
            await self.websocket.send_json(message)
            return True
        except Exception as e:
            logger.warning(f"发送消息失败: {self.connection_id} - {e}")
            return False

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self.websocket.close(code=code, reason=reason)
        except Exception as e:
            logger.debug(f"关闭连接失败: {self.connection_id} - {e}")


@dataclass
class RoomPresence:
    """房间在线状态：按连接 ID 和身份索引的在线连接"""

    room_id: str
    connections: dict[str, LiveConnection] = field(default_factory=dict)
    identities: dict[str, str] = field(default_factory=dict)

    def add(self, connection: LiveConnection) -> None:
        self.connections[connection.connection_id] = connection
        if connection.user_id:
            self.identities[connection.user_id] = connection.connection_id

    def remove(self, connection: LiveConnection) -> None:
        self.connections.pop(connection.connection_id, None)
        if connection.user_id and self.identities.get(connection.user_id) == connection.connection_id:
            del self.identities[connection.user_id]

    def connection_of(self, user_id: str) -> LiveConnection | None:
        connection_id = self.identities.get(user_id)
        return self.connections.get(connection_id) if connection_id else None

    def is_empty(self) -> bool:
        return not self.connections


class SessionRegistry:
    """会话注册表（实现 RoomBroadcaster）"""

    def __init__(self, capacity: int = 2):
        self.capacity = capacity
        self._rooms: dict[str, RoomPresence] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_refs: dict[str, int] = {}

    @asynccontextmanager
    async def _room_lock(self, room_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(room_id)
        if lock is None:
            lock = self._locks[room_id] = asyncio.Lock()
        self._lock_refs[room_id] = self._lock_refs.get(room_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_refs[room_id] -= 1
            if self._lock_refs[room_id] == 0:
                del self._lock_refs[room_id]
                del self._locks[room_id]

    async def join(
        self,
        room_id: str,
        identity: Identity,
        connection: LiveConnection,
        on_admitted: Callable[[LiveConnection], Awaitable[None]] | None = None,
    ) -> bool:
        """将连接加入房间

        参数：
            room_id: 房间 ID
            identity: 已通过准入校验的身份
            connection: 在线连接
            on_admitted: 登记后、通知对方前执行的回调（画布加载）

        返回：
            True 新加入；False 连接已在该房间（无操作）

        抛出：
            RoomFullError: 在线连接数已达上限（不区分身份），不会留下任何登记
        """
        async with self._room_lock(room_id):
            presence = self._rooms.get(room_id)
            if presence is not None and connection.connection_id in presence.connections:
                return False

            live_count = len(presence.connections) if presence else 0
            if live_count >= self.capacity:
                logger.info(f"房间已满，拒绝连接: {identity.user_id} -> 房间 {room_id}")
                raise RoomFullError(room_id, self.capacity)

            # 还有空位时，同一身份的旧连接被顶替
            previous = presence.connection_of(identity.user_id) if presence else None

            if presence is None:
                presence = self._rooms[room_id] = RoomPresence(room_id=room_id)

            if previous is not None:
                presence.remove(previous)
                previous.state = ConnectionState.DISCONNECTED
                await previous.send(build_message("session-replaced"))
                await previous.close(code=SESSION_REPLACED_CLOSE_CODE, reason="session replaced")
                logger.info(f"连接被顶替: {previous.connection_id} ({identity.user_id})")

            connection.room_id = room_id
            connection.identity = identity
            presence.add(connection)

            if on_admitted is not None:
                try:
                    await on_admitted(connection)
                except BaseException:
                    presence.remove(connection)
                    connection.room_id = None
                    connection.identity = None
                    if presence.is_empty():
                        del self._rooms[room_id]
                    raise

            logger.info(
                f"客户端加入: {connection.connection_id} ({identity.user_id}) -> 房间 {room_id}"
            )

            if len(presence.connections) >= self.capacity:
                message = build_message("partner-joined", members=list(presence.identities))
                for live in list(presence.connections.values()):
                    await live.send(message)

            return True

    async def leave(self, connection: LiveConnection) -> bool:
        """移除连接；未登记的连接无操作

        返回：
            是否确实移除了连接
        """
        room_id = connection.room_id
        if room_id is None:
            return False

        async with self._room_lock(room_id):
            presence = self._rooms.get(room_id)
            if presence is None or presence.connections.get(connection.connection_id) is not connection:
                return False

            presence.remove(connection)
            connection.state = ConnectionState.DISCONNECTED
            logger.info(f"客户端离开: {connection.connection_id} ({connection.user_id}) <- 房间 {room_id}")

            message = build_message("partner-left", user_id=connection.user_id)
            for live in list(presence.connections.values()):
                await live.send(message)

            if presence.is_empty():
                del self._rooms[room_id]
                logger.debug(f"房间条目已移除: {room_id}")
            return True

    async def broadcast(
        self,
        room_id: str,
        message: dict[str, Any],
        exclude: LiveConnection | None = None,
    ) -> int:
        """向房间广播消息

        发送失败只记录日志；断开的连接由其 WebSocket 循环负责 leave。

        返回：
            成功发送的连接数
        """
        async with self._room_lock(room_id):
            return await self._deliver(room_id, message, exclude)

    async def commit_and_broadcast(
        self,
        room_id: str,
        commit: Callable[[], Awaitable[tuple[T, dict[str, Any] | None]]],
        exclude: LiveConnection | None = None,
    ) -> T:
        """在房间锁内执行 commit，并把它返回的消息广播出去

        commit 与广播之间不会有其他连接加入，加入时的画布加载
        要么在 commit 之前（之后收到广播），要么在广播之后（画布中已包含）。

        参数：
            commit: 返回 (结果, 消息) 的协程函数；消息为 None 时不广播
            exclude: 不接收广播的连接（通常是发送方）

        返回：
            commit 的结果
        """
        async with self._room_lock(room_id):
            result, message = await commit()
            if message is not None:
                await self._deliver(room_id, message, exclude)
            return result

    async def _deliver(
        self, room_id: str, message: dict[str, Any], exclude: LiveConnection | None
    ) -> int:
        presence = self._rooms.get(room_id)
        if presence is None:
            return 0

        delivered = 0
        for live in list(presence.connections.values()):
            if exclude is not None and live.connection_id == exclude.connection_id:
                continue
            if await live.send(message):
                delivered += 1
        return delivered

    def is_registered(self, connection: LiveConnection) -> bool:
        presence = self._rooms.get(connection.room_id or "")
        return presence is not None and connection.connection_id in presence.connections

    def connection_count(self, room_id: str) -> int:
        presence = self._rooms.get(room_id)
        return len(presence.connections) if presence else 0

    def live_identities(self, room_id: str) -> list[str]:
        presence = self._rooms.get(room_id)
        return list(presence.identities) if presence else []

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    def get_statistics(self) -> dict[str, Any]:
        """获取连接统计信息

        返回：
            统计信息字典
        """
        rooms = {room_id: len(p.connections) for room_id, p in self._rooms.items()}
        return {
            "total_rooms": len(rooms),
            "total_connections": sum(rooms.values()),
            "rooms": rooms,
        }
