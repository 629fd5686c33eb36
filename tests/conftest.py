"""Pytest 配置文件 - 全局 fixtures"""

import os
import tempfile
from collections.abc import Callable

# 在导入 scrawl.config 之前设置，避免测试写入工作目录
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="scrawl-uploads-"))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402

from scrawl.domain.entities.room import Room  # noqa: E402
from scrawl.domain.value_objects.identity import Identity  # noqa: E402
from scrawl.infrastructure.adapters.in_memory_durable_store import (  # noqa: E402
    InMemoryDurableStore,
)
from scrawl.infrastructure.auth.jwt_credential_service import (  # noqa: E402
    JWTCredentialService,
)

TEST_SECRET = "test-secret-key"


@pytest.fixture
def credentials() -> JWTCredentialService:
    """测试用 JWT 凭证服务"""
    return JWTCredentialService(secret_key=TEST_SECRET, algorithm="HS256", expire_minutes=60)


@pytest.fixture
def token_for(credentials) -> Callable[[str], str]:
    """为指定用户签发令牌"""

    def _issue(user_id: str) -> str:
        return credentials.issue_token(Identity(user_id=user_id, email=f"{user_id}@example.com"))

    return _issue


@pytest.fixture
def memory_store() -> InMemoryDurableStore:
    return InMemoryDurableStore()


@pytest.fixture
def make_room(memory_store) -> Callable[..., Room]:
    """创建房间并写入成员记录

    capacity 参数允许测试构造"持久成员多于在线名额"的情况。
    """

    def _make(owner_id: str, *members: str, code: str = "abc123", capacity: int = 2) -> Room:
        room = memory_store.insert_room(Room.create(code=code, owner_id=owner_id))
        for member in members:
            memory_store.insert_membership(room.id, member, capacity)
        return room

    return _make

