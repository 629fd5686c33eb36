"""SQLAlchemy Membership Repository实现

成员数上限依靠 (room_id, slot) 唯一约束实现 compare-and-set：
两个并发请求看到同一个空闲席位时，只有一个能插入成功，
另一个收到 IntegrityError 后由调用者重新读取并重试。
"""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrawl.domain.entities.room import Membership
from scrawl.infrastructure.database.models import MembershipModel
from scrawl.infrastructure.database.repositories._time import to_db


class SQLAlchemyMembershipRepository:
    """成员记录数据访问"""

    def __init__(self, session: Session):
        self.session = session

    def add(self, membership: Membership) -> bool:
        """插入成员记录

        返回：
            True 插入成功；False 违反唯一约束（席位或身份已被占用）
        """
        model = MembershipModel(
            room_id=membership.room_id,
            user_id=membership.user_id,
            slot=membership.slot,
            joined_at=to_db(membership.joined_at),
        )
        try:
            with self.session.begin_nested():
                self.session.add(model)
                self.session.flush()
        except IntegrityError:
            return False
        return True

    def count(self, room_id: str) -> int:
        stmt = select(func.count(MembershipModel.id)).where(MembershipModel.room_id == room_id)
        return int(self.session.execute(stmt).scalar_one())

    def exists(self, room_id: str, user_id: str) -> bool:
        stmt = (
            select(MembershipModel.id)
            .where(MembershipModel.room_id == room_id, MembershipModel.user_id == user_id)
            .limit(1)
        )
        return self.session.execute(stmt).first() is not None

    def taken_slots(self, room_id: str) -> set[int]:
        stmt = select(MembershipModel.slot).where(MembershipModel.room_id == room_id)
        return set(self.session.execute(stmt).scalars().all())
