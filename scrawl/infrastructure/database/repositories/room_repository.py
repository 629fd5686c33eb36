"""SQLAlchemy Room Repository实现

职责：
1. 转换：Room 实体 ⇄ RoomModel
2. 持久化：保存、查询房间
3. 异常转换：邀请码唯一约束冲突 → RoomCodeTakenError

事务约定：Repository 只 flush，不 commit；提交由调用者（DurableStore）负责。
"""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrawl.domain.entities.room import Room
from scrawl.domain.exceptions import RoomCodeTakenError
from scrawl.infrastructure.database.models import MembershipModel, RoomModel
from scrawl.infrastructure.database.repositories._time import from_db, to_db


class SQLAlchemyRoomRepository:
    """房间数据访问"""

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler方法 ====================

    def _to_entity(self, model: RoomModel, member_count: int = 0) -> Room:
        return Room(
            id=model.id,
            code=model.code,
            owner_id=model.owner_id,
            created_at=from_db(model.created_at),
            member_count=member_count,
        )

    def _to_model(self, entity: Room) -> RoomModel:
        return RoomModel(
            id=entity.id,
            code=entity.code,
            owner_id=entity.owner_id,
            created_at=to_db(entity.created_at),
        )

    # ==================== 命令方法 ====================

    def add(self, room: Room) -> None:
        """插入房间记录

        使用 SAVEPOINT，唯一约束冲突时只回滚本次插入。

        抛出：
            RoomCodeTakenError: 邀请码已存在
        """
        try:
            with self.session.begin_nested():
                self.session.add(self._to_model(room))
                self.session.flush()
        except IntegrityError as exc:
            raise RoomCodeTakenError(f"邀请码已被占用: {room.code}") from exc

    # ==================== 查询方法 ====================

    def find_by_id(self, room_id: str) -> Room | None:
        model = self.session.get(RoomModel, room_id)
        return self._to_entity(model, self._count_members(model.id)) if model else None

    def find_by_code(self, code: str) -> Room | None:
        stmt = select(RoomModel).where(RoomModel.code == code)
        model = self.session.execute(stmt).scalar_one_or_none()
        return self._to_entity(model, self._count_members(model.id)) if model else None

    def code_exists(self, code: str) -> bool:
        stmt = select(RoomModel.id).where(RoomModel.code == code).limit(1)
        return self.session.execute(stmt).first() is not None

    def list_for_user(self, user_id: str) -> list[Room]:
        """身份所属的房间，按创建时间倒序"""
        member_counts = (
            select(MembershipModel.room_id, func.count(MembershipModel.id).label("members"))
            .group_by(MembershipModel.room_id)
            .subquery()
        )
        stmt = (
            select(RoomModel, member_counts.c.members)
            .join(MembershipModel, MembershipModel.room_id == RoomModel.id)
            .join(member_counts, member_counts.c.room_id == RoomModel.id)
            .where(MembershipModel.user_id == user_id)
            .order_by(RoomModel.created_at.desc(), RoomModel.id)
        )
        rows = self.session.execute(stmt).all()
        return [self._to_entity(model, members) for model, members in rows]

    def _count_members(self, room_id: str) -> int:
        stmt = select(func.count(MembershipModel.id)).where(MembershipModel.room_id == room_id)
        return int(self.session.execute(stmt).scalar_one())
