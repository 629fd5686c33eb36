"""Domain 实体

导出所有领域实体，方便其他模块导入
"""

from scrawl.domain.entities.element import Element
from scrawl.domain.entities.room import Membership, Room

__all__ = ["Element", "Membership", "Room"]
