"""FastAPI 应用入口"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from scrawl.application.services.admission_gate import AdmissionGate
from scrawl.application.services.draft_ledger import DraftLedger
from scrawl.config import settings
from scrawl.domain.ports.blob_store import BlobStore
from scrawl.domain.ports.credential_service import CredentialService
from scrawl.domain.ports.durable_store import DurableStore
from scrawl.infrastructure.auth.jwt_credential_service import JWTCredentialService
from scrawl.infrastructure.database.durable_store import SQLAlchemyDurableStore
from scrawl.infrastructure.storage.local_blob_store import LocalBlobStore
from scrawl.infrastructure.websocket.canvas_sync import CanvasSyncService
from scrawl.infrastructure.websocket.session_registry import SessionRegistry
from scrawl.interfaces.api.container import ApiContainer
from scrawl.interfaces.api.routes import health, rooms, uploads, websocket

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
    )


def build_container(
    store: DurableStore | None = None,
    credentials: CredentialService | None = None,
    blob_store: BlobStore | None = None,
) -> ApiContainer:
    """组装应用依赖

    未提供的组件使用默认实现：
    - store: SQLAlchemyDurableStore（settings.database_url）
    - credentials: JWTCredentialService（settings.secret_key）
    - blob_store: LocalBlobStore（settings.upload_dir）
    """
    if store is None:
        from scrawl.infrastructure.database.engine import SessionLocal, sync_engine
        from scrawl.infrastructure.database.schema import ensure_sqlite_schema

        try:
            ensure_sqlite_schema(sync_engine)
        except Exception as exc:  # pragma: no cover - best effort startup helper
            logger.warning(f"[DB] 数据库初始化失败（请运行 Alembic 迁移）: {exc}")
        store = SQLAlchemyDurableStore(SessionLocal)

    credentials = credentials or JWTCredentialService()
    blob_store = blob_store or LocalBlobStore(settings.upload_dir, settings.upload_base_url)

    registry = SessionRegistry(capacity=settings.room_capacity)
    ledger = DraftLedger(store=store, broadcaster=registry)
    gate = AdmissionGate(credentials=credentials, store=store)

    return ApiContainer(
        store=store,
        credentials=credentials,
        blob_store=blob_store,
        registry=registry,
        ledger=ledger,
        gate=gate,
        canvas_sync=CanvasSyncService(gate=gate, registry=registry, ledger=ledger),
        room_capacity=settings.room_capacity,
        max_upload_bytes=settings.max_upload_bytes,
    )


def _get_display_host() -> str:
    """Return a host suitable for displaying in links."""
    if settings.host in {"0.0.0.0", "::"}:
        return "127.0.0.1"
    return settings.host


def create_app(container: ApiContainer | None = None) -> FastAPI:
    """创建 FastAPI 应用

    参数：
        container: 预先组装的依赖（测试时注入内存实现）；为空时在 lifespan 中组装
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging()
        display_host = _get_display_host()
        logger.info(f"[*] {settings.app_name} v{settings.app_version} 启动中...")
        logger.info(f"[ENV] 环境: {settings.env}")
        logger.info(f"[DB] 数据库: {settings.database_url}")
        logger.info(f"[URL] 服务地址: http://{display_host}:{settings.port}")

        if getattr(app.state, "container", None) is None:
            app.state.container = build_container()

        try:
            yield
        finally:
            stats = app.state.container.registry.get_statistics()
            logger.info(f"[SHUTDOWN] {settings.app_name} 关闭中... 在线统计: {stats}")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="两人共享画布的协作会话管理服务",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check() -> JSONResponse:
        return JSONResponse(
            content={
                "status": "healthy",
                "app_name": settings.app_name,
                "version": settings.app_version,
                "env": settings.env,
            }
        )

    app.include_router(rooms.router, prefix="/api", tags=["Rooms"])
    app.include_router(uploads.router, prefix="/api", tags=["Uploads"])
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(websocket.router)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.upload_base_url, StaticFiles(directory=upload_dir), name="uploads")

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "scrawl.interfaces.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
