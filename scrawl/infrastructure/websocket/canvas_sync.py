"""WebSocket 画布同步服务

每个连接一个协议状态机：

    DISCONNECTED ──join──▶ JOINING ──准入成功──▶ JOINED ──断开──▶ DISCONNECTED
                              └──准入失败 / 房间已满──▶ DISCONNECTED（服务端关闭连接）

消息格式（客户端 → 服务器）：
    {"action": "join", "room_id": "...", "token": "..."}
    {"action": "save-draft", "element": {...}}
    {"action": "send-drafts", "element_ids": [...]}     // 或 "elements": [{"id": ...}]
    {"action": "delete-draft", "element_id": "..."}
    {"action": "drawing-in-progress", "payload": {...}} // 或 "line"
    {"action": "ping"}

消息格式（服务器 → 客户端）：
    {"type": "canvas-state" | "elements-received" | "drawing-in-progress" |
             "partner-joined" | "partner-left" | "room-full" | "auth-error" |
             "session-replaced" | "draft-saved" | "drafts-sent" |
             "draft-deleted" | "pong" | "error",
     "timestamp": "...", ...}

同一连接上的消息由 WebSocket 循环按顺序逐条处理。
"""

import logging
from typing import Any

from scrawl.application.services.admission_gate import AdmissionGate
from scrawl.application.services.draft_ledger import DraftLedger
from scrawl.application.services.protocol_messages import build_error, build_message
from scrawl.domain.exceptions import (
    DomainError,
    InvalidTokenError,
    NotAMemberError,
    RoomFullError,
    StoreUnavailableError,
)
from scrawl.infrastructure.websocket.session_registry import (
    ConnectionState,
    LiveConnection,
    SessionRegistry,
)

logger = logging.getLogger(__name__)

AUTH_ERROR_CLOSE_CODE = 4401
ROOM_FULL_CLOSE_CODE = 4409
STORE_UNAVAILABLE_CLOSE_CODE = 1011


class CanvasSyncService:
    """画布同步服务

    依赖：
    - AdmissionGate: 令牌与成员资格校验
    - SessionRegistry: 在线连接登记与广播
    - DraftLedger: 草稿/已发送生命周期
    """

    def __init__(self, gate: AdmissionGate, registry: SessionRegistry, ledger: DraftLedger):
        self.gate = gate
        self.registry = registry
        self.ledger = ledger

    async def handle_message(self, connection: LiveConnection, data: Any) -> None:
        """处理一条客户端消息

        参数：
            connection: 当前连接
            data: 已解析的 JSON 消息
        """
        if not isinstance(data, dict):
            await connection.send(build_error("invalid_message", "消息必须是 JSON 对象"))
            return

        action = data.get("action")
        if not action:
            await connection.send(build_error("invalid_message", "Missing 'action' field"))
            return

        if action == "ping":
            await connection.send(build_message("pong"))
            return

        if action == "join":
            await self.handle_join(connection, data)
            return

        if connection.state is not ConnectionState.JOINED:
            await connection.send(build_error("not_joined", "请先加入房间"))
            return

        logger.debug(f"收到消息: action={action}, connection={connection.connection_id}")

        try:
            if action == "save-draft":
                await self._handle_save_draft(connection, data)
            elif action == "send-drafts":
                await self._handle_send_drafts(connection, data)
            elif action == "delete-draft":
                await self._handle_delete_draft(connection, data)
            elif action == "drawing-in-progress":
                await self._handle_drawing_in_progress(connection, data)
            else:
                await connection.send(build_error("unknown_action", f"Unknown action: {action}"))

        except StoreUnavailableError as e:
            logger.warning(f"存储不可用: action={action}, error={e}")
            await connection.send(build_error(StoreUnavailableError.code, "存储暂时不可用，请重试"))
        except DomainError as e:
            await connection.send(build_error(e.code, str(e)))
        except Exception as e:
            logger.error(f"处理消息失败: action={action}, error={e}")
            await connection.send(build_error("internal_error", str(e)))

    async def handle_join(self, connection: LiveConnection, data: dict[str, Any]) -> bool:
        """处理加入请求

        返回：
            连接是否处于 JOINED 状态
        """
        room_id = data.get("room_id", data.get("roomId"))

        if connection.state is ConnectionState.JOINED:
            if room_id == connection.room_id:
                return True
            await connection.send(build_error("already_joined", "连接已加入其他房间"))
            return True

        if not isinstance(room_id, str) or not room_id:
            await connection.send(build_error("invalid_message", "缺少 room_id"))
            return False

        token = data.get("token")
        connection.state = ConnectionState.JOINING

        try:
            identity = await self.gate.admit(token if isinstance(token, str) else "", room_id)
        except (InvalidTokenError, NotAMemberError) as e:
            connection.state = ConnectionState.DISCONNECTED
            logger.info(f"准入失败: room={room_id}, reason={e.code}")
            await connection.send(build_message("auth-error", reason=e.code, message=str(e)))
            await connection.close(code=AUTH_ERROR_CLOSE_CODE, reason=e.code)
            return False
        except StoreUnavailableError as e:
            connection.state = ConnectionState.DISCONNECTED
            logger.warning(f"准入时存储不可用: room={room_id}, error={e}")
            await connection.send(build_error(StoreUnavailableError.code, "存储暂时不可用，请重试"))
            await connection.close(code=STORE_UNAVAILABLE_CLOSE_CODE, reason=StoreUnavailableError.code)
            return False

        try:
            await self.registry.join(room_id, identity, connection, on_admitted=self._hydrate)
        except RoomFullError as e:
            connection.state = ConnectionState.DISCONNECTED
            await connection.send(build_message("room-full", room_id=room_id, capacity=e.capacity))
            await connection.close(code=ROOM_FULL_CLOSE_CODE, reason=RoomFullError.code)
            return False

        return True

    async def handle_disconnect(self, connection: LiveConnection) -> None:
        """连接断开：从注册表移除并通知对方"""
        await self.registry.leave(connection)
        connection.state = ConnectionState.DISCONNECTED

    async def _hydrate(self, connection: LiveConnection) -> None:
        """发送画布初始状态（仅已发送元素）

        存储不可用时降级为空画布，不阻塞加入。
        """
        try:
            elements = await self.ledger.load_sent(connection.room_id)
        except StoreUnavailableError as e:
            logger.warning(f"加载画布失败，发送空画布: room={connection.room_id}, error={e}")
            elements = []

        connection.state = ConnectionState.JOINED
        await connection.send(
            build_message(
                "canvas-state",
                room_id=connection.room_id,
                elements=[element.to_wire() for element in elements],
            )
        )

    async def _handle_save_draft(self, connection: LiveConnection, data: dict[str, Any]) -> None:
        element = data.get("element")
        if not isinstance(element, dict):
            await connection.send(build_error("invalid_message", "缺少 element"))
            return

        saved = await self.ledger.save_draft(connection.room_id, connection.identity, element)
        await connection.send(build_message("draft-saved", element=saved.to_wire()))

    async def _handle_send_drafts(self, connection: LiveConnection, data: dict[str, Any]) -> None:
        element_ids = data.get("element_ids")
        if element_ids is None:
            elements = data.get("elements") or []
            element_ids = [e.get("id") for e in elements if isinstance(e, dict)]
        if not isinstance(element_ids, list):
            await connection.send(build_error("invalid_message", "element_ids 必须是列表"))
            return

        sent = await self.ledger.send_drafts(
            connection.room_id, connection.identity, element_ids, sender=connection
        )
        await connection.send(build_message("drafts-sent", element_ids=[e.id for e in sent]))

    async def _handle_delete_draft(self, connection: LiveConnection, data: dict[str, Any]) -> None:
        element_id = data.get("element_id")
        if element_id is None:
            await connection.send(build_error("invalid_message", "缺少 element_id"))
            return

        deleted = await self.ledger.delete_draft(
            connection.room_id, connection.identity, str(element_id)
        )
        await connection.send(
            build_message("draft-deleted", element_id=str(element_id), deleted=deleted)
        )

    async def _handle_drawing_in_progress(
        self, connection: LiveConnection, data: dict[str, Any]
    ) -> None:
        payload = data.get("payload", data.get("line"))
        await self.ledger.live_ephemeral_broadcast(connection.room_id, connection, payload)
