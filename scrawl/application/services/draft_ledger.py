"""DraftLedger - 画布元素的草稿/已发送生命周期

生命周期：
    save_draft ──▶ 草稿（仅作者可见、可修改、可删除）
    send_drafts ──▶ 已发送（不可变，对房间成员可见，广播给对方）

一致性约束：
- 先提交 sent 标记，再广播；广播只发生在提交成功之后
- 提交与广播在同一个房间锁内完成，期间加入的连接不会重复收到元素
- send_drafts 幂等：已发送的元素不会再次广播
- 画布加载（load_sent）永远不包含草稿
"""

import asyncio
import logging
from typing import Any

from scrawl.application.ports.room_broadcaster import RoomBroadcaster
from scrawl.application.services.protocol_messages import build_message
from scrawl.domain.entities.element import Element
from scrawl.domain.ports.durable_store import DurableStore
from scrawl.domain.value_objects.identity import Identity

logger = logging.getLogger(__name__)


class DraftLedger:
    def __init__(self, store: DurableStore, broadcaster: RoomBroadcaster):
        self._store = store
        self._broadcaster = broadcaster

    async def save_draft(self, room_id: str, identity: Identity, data: dict[str, Any]) -> Element:
        """保存（或替换）作者的草稿，不广播

        抛出：
            InvalidElementError: 元素格式不合法
            ElementLockedError: 同 ID 元素已发送或属于其他作者
            StoreUnavailableError: 存储暂时不可用
        """
        element = Element.create_draft(room_id, identity.user_id, data)
        saved = await asyncio.to_thread(self._store.save_draft, element)
        logger.debug("Draft %s saved in room %s by %s", saved.id, room_id, identity.user_id)
        return saved

    async def send_drafts(
        self,
        room_id: str,
        identity: Identity,
        element_ids: list[str],
        sender: Any | None = None,
    ) -> list[Element]:
        """发送作者的草稿

        未知、非本人或已发送的 ID 被忽略。只有本次调用新发送的元素才会
        以一条 elements-received 消息广播给房间内其他连接。

        返回：
            本次新发送的元素（可能为空）
        """
        ids = list(dict.fromkeys(str(i) for i in element_ids if i is not None))
        if not ids:
            return []

        async def commit() -> tuple[list[Element], dict[str, Any] | None]:
            sent = await asyncio.to_thread(
                self._store.mark_elements_sent, room_id, identity.user_id, ids
            )
            if not sent:
                return sent, None
            return sent, build_message(
                "elements-received",
                elements=[e.to_wire() for e in sent],
                **{"from": identity.user_id},
            )

        sent = await self._broadcaster.commit_and_broadcast(room_id, commit, exclude=sender)
        if sent:
            logger.info("%s sent %d element(s) in room %s", identity.user_id, len(sent), room_id)
        else:
            logger.debug("send_drafts in room %s changed nothing", room_id)
        return sent

    async def load_sent(self, room_id: str) -> list[Element]:
        """画布加载：已发送元素，按创建时间升序"""
        return await asyncio.to_thread(self._store.list_sent_elements, room_id)

    async def delete_draft(self, room_id: str, identity: Identity, element_id: str) -> bool:
        """删除作者的草稿；已发送或他人的元素不会被删除"""
        deleted = await asyncio.to_thread(
            self._store.delete_draft, room_id, identity.user_id, str(element_id)
        )
        if deleted:
            logger.debug("Draft %s deleted in room %s", element_id, room_id)
        return deleted

    async def live_ephemeral_broadcast(self, room_id: str, sender: Any, payload: Any) -> int:
        """转发绘制中的临时笔画给房间内其他连接，不写入存储

        参数：
            sender: 发送方连接（带 identity 属性），不会收到自己的消息
        """
        identity = getattr(sender, "identity", None)
        return await self._broadcaster.broadcast(
            room_id,
            build_message(
                "drawing-in-progress",
                payload=payload,
                **{"from": identity.user_id if identity else None},
            ),
            exclude=sender,
        )
