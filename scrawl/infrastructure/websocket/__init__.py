"""WebSocket 基础设施：会话注册表与画布同步协议"""

from scrawl.infrastructure.websocket.canvas_sync import CanvasSyncService
from scrawl.infrastructure.websocket.session_registry import (
    ConnectionState,
    LiveConnection,
    SessionRegistry,
)

__all__ = ["CanvasSyncService", "ConnectionState", "LiveConnection", "SessionRegistry"]
