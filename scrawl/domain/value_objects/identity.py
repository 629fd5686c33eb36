"""身份值对象

Identity 由凭证服务从令牌中解析得到，代表一个参与者。
没有独立生命周期，按值相等。
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Identity:
    """参与者身份

    属性说明：
    - user_id: 用户唯一标识（令牌的 sub 声明）
    - email: 用户邮箱（可选，仅用于展示和日志）
    """

    user_id: str
    email: str | None = None

    def __str__(self) -> str:
        return self.user_id
