"""数据库引擎配置

设计说明：
- 使用 create_engine 创建同步引擎，Repository 是同步的
- 异步调用方（WebSocket 协议）通过 asyncio.to_thread 在线程池中访问数据库
- SQLite 关闭 check_same_thread，允许线程池中的连接复用
- 从配置文件读取 database_url
"""

from collections.abc import Callable

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from scrawl.config import settings


def get_sync_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """创建同步数据库引擎

    配置说明：
    - echo: 是否打印 SQL（默认跟随 settings.debug）
    - pool_size / max_overflow / pool_pre_ping: 仅对非 SQLite 数据库生效

    参数：
        database_url: 数据库 URL（默认 settings.database_url）
        echo: 是否打印 SQL

    返回：
        Engine: 同步数据库引擎
    """
    url = database_url or settings.database_url
    echo = settings.debug if echo is None else echo

    if url.startswith("sqlite"):
        in_memory = url in {"sqlite://", "sqlite:///:memory:"}
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            # 内存库只有一个连接，否则每个连接看到的是不同的数据库
            poolclass=StaticPool if in_memory else None,
        )
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_size=5,  # 连接池大小
        max_overflow=10,  # 最大溢出连接数
        pool_pre_ping=True,  # 连接前检查（避免使用失效连接）
    )


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """让 pysqlite 由 SQLAlchemy 显式发出 BEGIN

    pysqlite 默认延迟开启事务，SAVEPOINT（session.begin_nested）会被当作
    最外层事务提前提交。关闭驱动自身的事务管理后 SAVEPOINT 才能正确回滚。
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_session_factory(engine: Engine) -> Callable[[], Session]:
    """创建 Session 工厂"""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


# 全局同步引擎实例
sync_engine = get_sync_engine()

# 创建 Session 工厂
SessionLocal = create_session_factory(sync_engine)

