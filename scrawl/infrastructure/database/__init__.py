"""数据库基础设施：ORM 模型、Repository 与持久化存储适配器"""

from scrawl.infrastructure.database.base import Base
from scrawl.infrastructure.database.durable_store import SQLAlchemyDurableStore

__all__ = ["Base", "SQLAlchemyDurableStore"]
