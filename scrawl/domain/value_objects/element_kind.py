"""画布元素类型值对象"""

from enum import Enum


class ElementKind(str, Enum):
    """画布元素类型枚举

    - STROKE: 手绘笔画（坐标点序列 + 颜色 + 粗细）
    - TEXT: 文本（位置 + 内容 + 字体属性）
    - IMAGE: 图片（位置 + 尺寸 + 访问 URL）
    """

    STROKE = "stroke"
    TEXT = "text"
    IMAGE = "image"

    @classmethod
    def parse(cls, value: object) -> "ElementKind":
        """解析客户端传入的类型

        旧版客户端使用 ``drawing`` 表示手绘笔画。

        抛出：
            ValueError: 未知类型
        """
        if isinstance(value, ElementKind):
            return value
        raw = str(value or "").strip().lower()
        if raw == "drawing":
            return cls.STROKE
        return cls(raw)
