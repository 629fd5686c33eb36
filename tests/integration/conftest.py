"""集成测试 fixtures：SQLite 文件数据库 + 完整 FastAPI 应用"""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from scrawl.config import settings
from scrawl.infrastructure.database.durable_store import SQLAlchemyDurableStore
from scrawl.infrastructure.database.engine import create_session_factory, get_sync_engine
from scrawl.infrastructure.database.schema import ensure_sqlite_schema
from scrawl.infrastructure.storage.local_blob_store import LocalBlobStore
from scrawl.interfaces.api.container import ApiContainer
from scrawl.interfaces.api.main import build_container, create_app


@pytest.fixture
def sqlite_store(tmp_path) -> Iterator[SQLAlchemyDurableStore]:
    engine = get_sync_engine(f"sqlite:///{tmp_path / 'scrawl-test.db'}", echo=False)
    ensure_sqlite_schema(engine)
    yield SQLAlchemyDurableStore(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def container(sqlite_store, credentials) -> ApiContainer:
    return build_container(
        store=sqlite_store,
        credentials=credentials,
        blob_store=LocalBlobStore(settings.upload_dir, settings.upload_base_url),
    )


@pytest.fixture
def client(container) -> Iterator[TestClient]:
    """共享一个事件循环的测试客户端（多个 WebSocket 连接之间需要）"""
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(token_for) -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(user_id)}"}

    return _headers
