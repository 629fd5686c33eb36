"""健康检查端点"""

from fastapi import APIRouter, Depends

from scrawl.config import settings
from scrawl.interfaces.api.container import ApiContainer
from scrawl.interfaces.api.dependencies.container import get_container

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(container: ApiContainer = Depends(get_container)) -> dict:
    """基本健康检查，附带在线连接统计"""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "realtime": container.registry.get_statistics(),
    }
