"""ORM 模型 - 数据库表映射

ORM 模型 vs 领域实体：
- ORM 模型：数据库表映射，关注持久化（Infrastructure 层）
- 领域实体：业务逻辑，关注不变式（Domain 层）
- 通过 Repository 中的 Assembler 方法转换：ORM ⇄ Entity

约定：
- 使用 SQLAlchemy 2.0 风格（Mapped、mapped_column）
- 时间统一以无时区 UTC 存储，读取时补回 UTC 时区
- 容量与唯一性约束放在数据库中，多进程部署时依然成立
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scrawl.infrastructure.database.base import Base


class RoomModel(Base):
    """Room ORM 模型

    表名：rooms

    字段说明：
    - id: 主键（UUID 字符串，36 字符）
    - code: 邀请码（唯一）
    - owner_id: 创建者身份 ID
    - created_at: 创建时间
    """

    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Room ID（UUID）")
    code: Mapped[str] = mapped_column(String(32), nullable=False, comment="邀请码")
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="创建者身份 ID")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")

    memberships: Mapped[list["MembershipModel"]] = relationship(
        "MembershipModel", back_populates="room", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_rooms_code", "code", unique=True),  # 唯一索引
        Index("idx_rooms_owner_id", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<RoomModel(id={self.id}, code={self.code}, owner_id={self.owner_id})>"


class MembershipModel(Base):
    """Membership ORM 模型

    表名：memberships

    约束：
    - uq_memberships_room_user: 同一身份在同一房间只有一条记录
    - uq_memberships_room_slot: 每个席位只能被占用一次（持久层容量 compare-and-set）
    - ck_memberships_slot_positive: slot 从 1 开始
    """

    __tablename__ = "memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        comment="房间 ID",
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="成员身份 ID")
    slot: Mapped[int] = mapped_column(Integer, nullable=False, comment="成员席位")
    joined_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="加入时间")

    room: Mapped["RoomModel"] = relationship("RoomModel", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_memberships_room_user"),
        UniqueConstraint("room_id", "slot", name="uq_memberships_room_slot"),
        CheckConstraint("slot >= 1", name="ck_memberships_slot_positive"),
        Index("idx_memberships_user_id", "user_id"),  # 查询身份所属房间
    )

    def __repr__(self) -> str:
        return (
            f"<MembershipModel(room_id={self.room_id}, user_id={self.user_id}, slot={self.slot})>"
        )


class ElementModel(Base):
    """Element ORM 模型

    表名：elements

    字段说明：
    - seq: 自增主键（同一 created_at 下的稳定排序）
    - element_id: 客户端生成的元素 ID（房间内唯一）
    - room_id / author_id: 所属房间与作者
    - kind: stroke / text / image
    - payload: 类型相关数据（JSON）
    - sent / sent_at: 是否已发送及发送时间
    """

    __tablename__ = "elements"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    element_id: Mapped[str] = mapped_column(String(64), nullable=False, comment="元素 ID")
    room_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        comment="房间 ID",
    )
    author_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="作者身份 ID")
    kind: Mapped[str] = mapped_column(String(16), nullable=False, comment="元素类型")
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, comment="元素数据")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")
    sent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, comment="是否已发送"
    )
    sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="发送时间")

    __table_args__ = (
        UniqueConstraint("room_id", "element_id", name="uq_elements_room_element"),
        Index("idx_elements_room_sent_created", "room_id", "sent", "created_at"),  # 画布加载
        Index("idx_elements_room_author", "room_id", "author_id"),  # 作者草稿
    )

    def __repr__(self) -> str:
        return (
            f"<ElementModel(room_id={self.room_id}, element_id={self.element_id}, "
            f"kind={self.kind}, sent={self.sent})>"
        )
