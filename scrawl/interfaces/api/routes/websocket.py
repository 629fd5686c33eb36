"""WebSocket 路由 - 画布实时同步

使用示例：
    # 前端连接
    const ws = new WebSocket('ws://localhost:3001/ws/canvas');

    # 加入房间
    ws.send(JSON.stringify({action: 'join', room_id: roomId, token}));

    # 接收消息
    ws.onmessage = (event) => {
        const data = JSON.parse(event.data);
        switch(data.type) {
            case 'canvas-state':      // 已发送元素（加入时）
            case 'elements-received': // 对方发送的新元素
            case 'drawing-in-progress':
            case 'partner-joined':
            case 'partner-left':
        }
    };

协议细节见 scrawl.infrastructure.websocket.canvas_sync。
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from scrawl.application.services.protocol_messages import build_error
from scrawl.infrastructure.websocket.session_registry import LiveConnection
from scrawl.interfaces.api.container import ApiContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws/canvas")
async def canvas_websocket(websocket: WebSocket):
    """WebSocket 端点 - 画布同步

    连接建立后客户端必须先发送 join；同一连接上的消息按顺序处理，
    断开时（无论原因）都会执行 leave 并通知对方。
    """
    container: ApiContainer = websocket.app.state.container
    service = container.canvas_sync

    await websocket.accept()
    connection = LiveConnection(websocket=websocket)
    logger.info(f"WebSocket 连接建立: connection={connection.connection_id}")

    try:
        while not connection.closed:
            try:
                data = await websocket.receive_json()
            except WebSocketDisconnect:
                break
            except ValueError:
                await connection.send(build_error("invalid_message", "消息必须是 JSON"))
                continue
            except RuntimeError as e:
                logger.debug(f"接收消息失败: {e}")
                break

            await service.handle_message(connection, data)

    finally:
        await service.handle_disconnect(connection)
        logger.info(f"WebSocket 断开: connection={connection.connection_id}")
