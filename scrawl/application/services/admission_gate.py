"""AdmissionGate - 连接加入房间前的身份与成员校验

职责：
1. 通过凭证服务解析令牌 → Identity
2. 确认身份在该房间有持久成员记录

只读操作，不修改任何状态。房间不存在同样视为 NotAMemberError。
"""

import asyncio
import logging

from scrawl.domain.exceptions import NotAMemberError
from scrawl.domain.ports.credential_service import CredentialService
from scrawl.domain.ports.durable_store import DurableStore
from scrawl.domain.value_objects.identity import Identity

logger = logging.getLogger(__name__)


class AdmissionGate:
    """准入网关

    依赖：
    - CredentialService: 令牌解析
    - DurableStore: 成员记录查询（通过 asyncio.to_thread 调用）
    """

    def __init__(self, credentials: CredentialService, store: DurableStore):
        self._credentials = credentials
        self._store = store

    async def admit(self, token: str, room_id: str) -> Identity:
        """校验令牌与成员资格

        参数：
            token: 客户端提交的访问令牌
            room_id: 目标房间 ID

        返回：
            Identity: 通过校验的身份

        抛出：
            InvalidTokenError: 令牌无效
            NotAMemberError: 没有成员记录（包括房间不存在）
            StoreUnavailableError: 存储暂时不可用
        """
        identity = self._credentials.resolve_identity(token)

        if not room_id or not await asyncio.to_thread(
            self._store.is_member, room_id, identity.user_id
        ):
            logger.info("Rejected %s for room %s: not a member", identity.user_id, room_id)
            raise NotAMemberError(room_id, identity.user_id)

        return identity
