"""FastAPI 依赖注入函数"""

from scrawl.interfaces.api.dependencies.container import get_container
from scrawl.interfaces.api.dependencies.current_identity import get_current_identity

__all__ = ["get_container", "get_current_identity"]
