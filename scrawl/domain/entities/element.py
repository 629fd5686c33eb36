"""画布元素实体

Element 是房间画布上的一个条目（笔画、文本或图片），生命周期：

    草稿（sent=False）──send──▶ 已发送（sent=True）

不变式（Invariants）：
1. 草稿只对作者可见，作者可以修改或删除
2. 一旦 sent=True，payload 不可变，对房间两位成员都可见
3. 已发送元素永不删除、不可回退为草稿
4. id 在房间内唯一（由客户端生成）
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from scrawl.domain.exceptions import ElementLockedError, InvalidElementError
from scrawl.domain.value_objects.element_kind import ElementKind

MAX_ELEMENT_ID_LENGTH = 64
MAX_TEXT_LENGTH = 10_000
MAX_STROKE_POINTS = 20_000

DEFAULT_COLOR = "#2c2c2c"
DEFAULT_STROKE_WIDTH = 3
DEFAULT_FONT_SIZE = 18
DEFAULT_FONT_FAMILY = "Georgia, serif"
DEFAULT_IMAGE_WIDTH = 400
DEFAULT_IMAGE_HEIGHT = 300


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class Element:
    """画布元素

    属性说明：
    - id: 元素 ID（房间内唯一，客户端生成）
    - room_id: 所属房间 ID
    - author_id: 作者身份 ID
    - kind: 元素类型
    - payload: 类型相关的数据（已规范化）
    - created_at: 首次保存时间（服务端时间）
    - sent: 是否已发送
    - sent_at: 发送时间
    """

    id: str
    room_id: str
    author_id: str
    kind: ElementKind
    payload: dict[str, Any]
    created_at: datetime = field(default_factory=utcnow)
    sent: bool = False
    sent_at: datetime | None = None

    @staticmethod
    def create_draft(room_id: str, author_id: str, data: dict[str, Any]) -> "Element":
        """从客户端消息创建草稿

        参数：
            room_id: 房间 ID
            author_id: 作者 ID
            data: 客户端元素字典（id、type 以及类型相关字段）

        返回：
            sent=False 的新元素

        抛出：
            InvalidElementError: 格式不合法
        """
        if not isinstance(data, dict):
            raise InvalidElementError("element 必须是对象")

        element_id = _normalize_id(data.get("id"))
        try:
            kind = ElementKind.parse(data.get("type", data.get("kind")))
        except ValueError as exc:
            raise InvalidElementError(f"未知的元素类型: {data.get('type')}") from exc

        return Element(
            id=element_id,
            room_id=room_id,
            author_id=author_id,
            kind=kind,
            payload=normalize_payload(kind, data),
        )

    def replace_payload(self, kind: ElementKind, payload: dict[str, Any]) -> None:
        """修改草稿内容（已发送元素不可修改）"""
        if self.sent:
            raise ElementLockedError(self.id)
        self.kind = kind
        self.payload = payload

    def mark_sent(self, at: datetime | None = None) -> None:
        """草稿 → 已发送"""
        if self.sent:
            raise ElementLockedError(self.id)
        self.sent = True
        self.sent_at = at or utcnow()

    def is_draft_of(self, author_id: str) -> bool:
        return not self.sent and self.author_id == author_id

    def to_wire(self) -> dict[str, Any]:
        """转换为协议消息中的元素格式"""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
        }
        result.update(self.payload)
        result["author_id"] = self.author_id
        result["created_at"] = self.created_at.isoformat()
        result["sent"] = self.sent
        return result


def normalize_payload(kind: ElementKind, data: dict[str, Any]) -> dict[str, Any]:
    """校验并规范化类型相关字段

    接受旧版客户端的字段名（stroke/strokeWidth、fill、fontSize/fontFamily）。
    """
    if kind is ElementKind.STROKE:
        return {
            "points": _normalize_points(data.get("points")),
            "color": _color(data.get("color", data.get("stroke"))),
            "width": _positive(data.get("width", data.get("strokeWidth")), "width", DEFAULT_STROKE_WIDTH),
        }

    if kind is ElementKind.TEXT:
        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            raise InvalidElementError("text 不能为空")
        if len(text) > MAX_TEXT_LENGTH:
            raise InvalidElementError("text 过长")
        font_family = data.get("font_family", data.get("fontFamily")) or DEFAULT_FONT_FAMILY
        return {
            "x": _number(data.get("x"), "x"),
            "y": _number(data.get("y"), "y"),
            "text": text,
            "font_size": _positive(data.get("font_size", data.get("fontSize")), "font_size", DEFAULT_FONT_SIZE),
            "font_family": str(font_family),
            "color": _color(data.get("color", data.get("fill"))),
        }

    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        raise InvalidElementError("image 缺少 url")
    return {
        "x": _number(data.get("x"), "x"),
        "y": _number(data.get("y"), "y"),
        "width": _positive(data.get("width"), "width", DEFAULT_IMAGE_WIDTH),
        "height": _positive(data.get("height"), "height", DEFAULT_IMAGE_HEIGHT),
        "url": url.strip(),
    }


def _normalize_id(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        raise InvalidElementError("element id 不能为空")
    element_id = str(value).strip()
    if not element_id:
        raise InvalidElementError("element id 不能为空")
    if len(element_id) > MAX_ELEMENT_ID_LENGTH:
        raise InvalidElementError("element id 过长")
    return element_id


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)


def _number(value: Any, name: str) -> float:
    if not _is_number(value):
        raise InvalidElementError(f"{name} 必须是数字")
    return value


def _positive(value: Any, name: str, default: float) -> float:
    if value is None:
        return default
    if not _is_number(value) or value <= 0:
        raise InvalidElementError(f"{name} 必须是正数")
    return value


def _color(value: Any) -> str:
    if value is None:
        return DEFAULT_COLOR
    if not isinstance(value, str) or not value.strip():
        raise InvalidElementError("color 必须是字符串")
    return value.strip()


def _normalize_points(value: Any) -> list[list[float]]:
    """坐标点：接受 [[x, y], ...]、[{"x":..,"y":..}, ...] 或扁平 [x1, y1, x2, y2, ...]"""
    if not isinstance(value, list) or not value:
        raise InvalidElementError("points 不能为空")

    if all(_is_number(v) for v in value):
        if len(value) % 2 != 0:
            raise InvalidElementError("points 坐标数必须为偶数")
        pairs = [[value[i], value[i + 1]] for i in range(0, len(value), 2)]
    else:
        pairs = []
        for point in value:
            if isinstance(point, dict):
                point = [point.get("x"), point.get("y")]
            if not isinstance(point, list | tuple) or len(point) != 2:
                raise InvalidElementError("points 必须是坐标对列表")
            pairs.append([_number(point[0], "x"), _number(point[1], "y")])

    if len(pairs) > MAX_STROKE_POINTS:
        raise InvalidElementError("points 过多")
    return pairs
