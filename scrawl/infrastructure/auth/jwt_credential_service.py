"""JWT 凭证服务

职责：
1. 根据身份签发 JWT 访问令牌
2. 验证令牌并解析出 Identity

令牌声明：
- sub: 用户 ID（必需）
- email: 用户邮箱（可选）
- exp / iat: 过期时间与签发时间

设计原则：
- 使用 HS256 算法（HMAC with SHA-256）
- 密钥与过期时间通过构造函数注入，默认从配置读取
- 任何 PyJWT 异常统一转换为 InvalidTokenError
"""

import logging
from datetime import UTC, datetime, timedelta

import jwt

from scrawl.config import settings
from scrawl.domain.exceptions import InvalidTokenError
from scrawl.domain.value_objects.identity import Identity

logger = logging.getLogger(__name__)


class JWTCredentialService:
    """基于 PyJWT 的 CredentialService 实现"""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expire_minutes: int | None = None,
    ):
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.expire_minutes = expire_minutes or settings.access_token_expire_minutes

    def issue_token(self, identity: Identity, expires_delta: timedelta | None = None) -> str:
        """签发访问令牌

        参数：
            identity: 令牌代表的身份
            expires_delta: 过期时间间隔（默认使用配置值）

        返回：
            编码后的 JWT 字符串
        """
        now = datetime.now(UTC)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))

        to_encode: dict = {"sub": identity.user_id, "exp": expire, "iat": now}
        if identity.email:
            to_encode["email"] = identity.email

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def resolve_identity(self, token: str) -> Identity:
        """解析令牌

        抛出：
            InvalidTokenError: 令牌为空、过期、签名错误或缺少 sub
        """
        if not token:
            raise InvalidTokenError("缺少令牌")

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("令牌已过期") from exc
        except jwt.PyJWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise InvalidTokenError("令牌无效") from exc

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("令牌缺少身份声明")

        email = payload.get("email")
        return Identity(user_id=user_id, email=email if isinstance(email, str) else None)
