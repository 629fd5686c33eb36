"""SQLAlchemy Repository 实现"""

from scrawl.infrastructure.database.repositories.element_repository import (
    SQLAlchemyElementRepository,
)
from scrawl.infrastructure.database.repositories.membership_repository import (
    SQLAlchemyMembershipRepository,
)
from scrawl.infrastructure.database.repositories.room_repository import SQLAlchemyRoomRepository

__all__ = [
    "SQLAlchemyElementRepository",
    "SQLAlchemyMembershipRepository",
    "SQLAlchemyRoomRepository",
]
