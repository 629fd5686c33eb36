"""SQLAlchemy Element Repository实现

状态迁移（草稿 → 已发送）使用条件 UPDATE：
    UPDATE elements SET sent = 1 WHERE ... AND sent = 0
rowcount 为 1 表示本次调用完成了迁移；为 0 表示已被其他请求发送或不存在。
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrawl.domain.entities.element import Element
from scrawl.domain.value_objects.element_kind import ElementKind
from scrawl.infrastructure.database.models import ElementModel
from scrawl.infrastructure.database.repositories._time import from_db, to_db


class SQLAlchemyElementRepository:
    """画布元素数据访问"""

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler方法 ====================

    def _to_entity(self, model: ElementModel) -> Element:
        return Element(
            id=model.element_id,
            room_id=model.room_id,
            author_id=model.author_id,
            kind=ElementKind(model.kind),
            payload=dict(model.payload or {}),
            created_at=from_db(model.created_at),
            sent=bool(model.sent),
            sent_at=from_db(model.sent_at),
        )

    def _to_model(self, entity: Element) -> ElementModel:
        return ElementModel(
            element_id=entity.id,
            room_id=entity.room_id,
            author_id=entity.author_id,
            kind=entity.kind.value,
            payload=entity.payload,
            created_at=to_db(entity.created_at),
            sent=entity.sent,
            sent_at=to_db(entity.sent_at),
        )

    # ==================== 命令方法 ====================

    def add(self, element: Element) -> bool:
        """插入元素

        返回：
            True 插入成功；False (room_id, element_id) 已存在
        """
        try:
            with self.session.begin_nested():
                self.session.add(self._to_model(element))
                self.session.flush()
        except IntegrityError:
            return False
        return True

    def replace_draft_payload(self, element: Element) -> bool:
        """替换作者草稿的内容；已发送或非本人元素不变，返回 False"""
        stmt = (
            update(ElementModel)
            .where(
                ElementModel.room_id == element.room_id,
                ElementModel.element_id == element.id,
                ElementModel.author_id == element.author_id,
                ElementModel.sent.is_(False),
            )
            .values(kind=element.kind.value, payload=element.payload)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def mark_sent_if_draft(
        self, room_id: str, author_id: str, element_id: str, sent_at: datetime
    ) -> bool:
        stmt = (
            update(ElementModel)
            .where(
                ElementModel.room_id == room_id,
                ElementModel.element_id == element_id,
                ElementModel.author_id == author_id,
                ElementModel.sent.is_(False),
            )
            .values(sent=True, sent_at=to_db(sent_at))
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def delete_draft(self, room_id: str, author_id: str, element_id: str) -> bool:
        stmt = delete(ElementModel).where(
            ElementModel.room_id == room_id,
            ElementModel.element_id == element_id,
            ElementModel.author_id == author_id,
            ElementModel.sent.is_(False),
        ).execution_options(synchronize_session=False)
        return self.session.execute(stmt).rowcount == 1

    # ==================== 查询方法 ====================

    def find(self, room_id: str, element_id: str) -> Element | None:
        stmt = select(ElementModel).where(
            ElementModel.room_id == room_id, ElementModel.element_id == element_id
        )
        model = self.session.execute(stmt).scalar_one_or_none()
        return self._to_entity(model) if model else None

    def list_sent(self, room_id: str) -> list[Element]:
        stmt = (
            select(ElementModel)
            .where(ElementModel.room_id == room_id, ElementModel.sent.is_(True))
            .order_by(ElementModel.created_at, ElementModel.seq)
        )
        return [self._to_entity(m) for m in self.session.execute(stmt).scalars().all()]

    def list_drafts(self, room_id: str, author_id: str) -> list[Element]:
        stmt = (
            select(ElementModel)
            .where(
                ElementModel.room_id == room_id,
                ElementModel.author_id == author_id,
                ElementModel.sent.is_(False),
            )
            .order_by(ElementModel.created_at, ElementModel.seq)
        )
        return [self._to_entity(m) for m in self.session.execute(stmt).scalars().all()]
