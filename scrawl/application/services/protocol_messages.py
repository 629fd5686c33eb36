"""协议消息构造

服务端推送给客户端的消息统一带有 type 与 timestamp 字段。
"""

from typing import Any

from scrawl.domain.entities.element import utcnow


def build_message(message_type: str, **fields: Any) -> dict[str, Any]:
    """构造出站消息

    示例：
        >>> build_message("canvas-state", elements=[])
        {'type': 'canvas-state', 'elements': [], 'timestamp': '...'}
    """
    message: dict[str, Any] = {"type": message_type}
    message.update(fields)
    message["timestamp"] = utcnow().isoformat()
    return message


def build_error(code: str, message: str) -> dict[str, Any]:
    return build_message("error", code=code, message=message)
