"""领域层异常定义

异常分层：
- DomainError: 业务规则违反（房间已满、令牌无效等）
- StoreUnavailableError: 持久化/对象存储的暂时性故障

每个异常带有稳定的 ``code``，WebSocket 协议和 HTTP 层用它向客户端报告原因。
"""


class DomainError(Exception):
    """领域层异常基类

    示例：
        if not text:
            raise InvalidElementError("text 不能为空")
    """

    code = "domain_error"


class NotFoundError(DomainError):
    """实体不存在异常

    参数：
        entity_type: 实体类型（如："Room"）
        entity_id: 实体 ID 或查找键
    """

    code = "not_found"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} 不存在: {entity_id}")


class RoomNotFoundError(NotFoundError):
    """按 ID 或邀请码找不到房间"""

    code = "room_not_found"

    def __init__(self, key: str):
        super().__init__("Room", key)


class InvalidTokenError(DomainError):
    """凭证服务无法从令牌解析出身份"""

    code = "invalid_token"


class NotAMemberError(DomainError):
    """身份没有该房间的成员记录"""

    code = "not_a_member"

    def __init__(self, room_id: str, user_id: str):
        self.room_id = room_id
        self.user_id = user_id
        super().__init__(f"用户 {user_id} 不是房间 {room_id} 的成员")


class RoomFullError(DomainError):
    """房间已满

    同时用于两种容量：在线连接数（内存）与持久成员数（数据库）。
    """

    code = "room_full"

    def __init__(self, room_id: str, capacity: int = 2):
        self.room_id = room_id
        self.capacity = capacity
        super().__init__(f"房间 {room_id} 已满（上限 {capacity}）")


class AlreadyMemberError(DomainError):
    """身份已经是房间成员"""

    code = "already_member"

    def __init__(self, room_id: str, user_id: str):
        self.room_id = room_id
        self.user_id = user_id
        super().__init__(f"用户 {user_id} 已经是房间 {room_id} 的成员")


class RoomCodeTakenError(DomainError):
    """邀请码与已有房间冲突（创建房间时重试）"""

    code = "room_code_taken"


class InvalidElementError(DomainError):
    """画布元素格式不合法"""

    code = "invalid_element"


class ElementLockedError(DomainError):
    """元素已发送（不可变）或属于其他作者"""

    code = "element_locked"

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(f"元素不可修改: {element_id}")


class StoreUnavailableError(Exception):
    """持久化存储或对象存储暂时不可用"""

    code = "store_unavailable"
