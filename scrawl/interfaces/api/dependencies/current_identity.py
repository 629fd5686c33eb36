"""获取当前请求身份的依赖注入

职责：
1. 从 Authorization 请求头中提取 Bearer token
2. 通过凭证服务解析出 Identity
3. 失败时返回 401
"""

from fastapi import Depends, Header, HTTPException, status

from scrawl.domain.exceptions import InvalidTokenError
from scrawl.domain.value_objects.identity import Identity
from scrawl.interfaces.api.container import ApiContainer
from scrawl.interfaces.api.dependencies.container import get_container


def get_current_identity(
    authorization: str | None = Header(None, description="Bearer token"),
    container: ApiContainer = Depends(get_container),
) -> Identity:
    """获取当前身份（必需）

    Args:
        authorization: Authorization header (格式: "Bearer <token>")

    Returns:
        Identity: 令牌中的身份

    Raises:
        HTTPException 401: 缺少令牌、格式错误或令牌无效
    """
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    try:
        scheme, token = authorization.split()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authorization header"
        ) from exc
    if scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication scheme"
        )

    try:
        return container.credentials.resolve_identity(token)
    except InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
