"""DurableStore Port（持久化存储端口）

会话管理器需要的全部持久化操作：房间、成员记录、画布元素。

约束：
- 只能依赖标准库与 Domain 层类型
- 每个方法是一个完整事务，方法返回即已提交
- 暂时性故障抛出 StoreUnavailableError
- 方法是同步的；异步调用方通过 asyncio.to_thread 调用

命名约定：
- find_xxx: 可以不存在，返回None
- list_xxx: 返回列表
- insert_xxx: 新建记录，冲突时抛出领域异常
"""

from __future__ import annotations

from typing import Protocol

from scrawl.domain.entities.element import Element
from scrawl.domain.entities.room import Membership, Room


class DurableStore(Protocol):
    """持久化存储端口"""

    # ---------- 房间 ----------

    def insert_room(self, room: Room) -> Room:
        """写入房间记录，并在同一事务中为创建者写入成员记录（slot=1）

        抛出：
            RoomCodeTakenError: 邀请码已被占用
        """
        ...

    def find_room_by_id(self, room_id: str) -> Room | None: ...

    def find_room_by_code(self, code: str) -> Room | None: ...

    def room_code_exists(self, code: str) -> bool: ...

    def list_rooms_for_user(self, user_id: str) -> list[Room]:
        """列出身份所属的房间（新的在前，附带成员数）"""
        ...

    # ---------- 成员 ----------

    def insert_membership(self, room_id: str, user_id: str, capacity: int) -> Membership:
        """条件插入成员记录（持久层 compare-and-set）

        抛出：
            RoomFullError: 成员数已达 capacity
            AlreadyMemberError: 身份已是成员
        """
        ...

    def count_memberships(self, room_id: str) -> int: ...

    def is_member(self, room_id: str, user_id: str) -> bool: ...

    # ---------- 元素 ----------

    def save_draft(self, element: Element) -> Element:
        """插入草稿；同一作者未发送的同 ID 草稿则替换内容

        抛出：
            ElementLockedError: 同 ID 元素已发送或属于其他作者
        """
        ...

    def mark_elements_sent(
        self, room_id: str, author_id: str, element_ids: list[str]
    ) -> list[Element]:
        """将作者的草稿标记为已发送

        只处理属于该作者、该房间、且仍为草稿的元素；其余 ID 忽略。

        返回：
            本次调用中状态发生变化的元素（按 element_ids 顺序）
        """
        ...

    def list_sent_elements(self, room_id: str) -> list[Element]:
        """已发送元素，按 created_at 升序（同时间按插入顺序）"""
        ...

    def list_drafts(self, room_id: str, author_id: str) -> list[Element]: ...

    def delete_draft(self, room_id: str, author_id: str, element_id: str) -> bool:
        """删除作者的草稿；已发送或不存在返回 False"""
        ...
