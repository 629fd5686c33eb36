"""CredentialService Port（凭证服务端口）

根据身份声明签发不透明令牌，并从令牌解析身份。
"""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol

from scrawl.domain.value_objects.identity import Identity


class CredentialService(Protocol):
    def issue_token(self, identity: Identity, expires_delta: timedelta | None = None) -> str: ...

    def resolve_identity(self, token: str) -> Identity:
        """解析令牌

        抛出：
            InvalidTokenError: 令牌无效、过期或缺少身份声明
        """
        ...
