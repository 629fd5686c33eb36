"""内存适配器（单元测试与单进程开发）"""

from scrawl.infrastructure.adapters.in_memory_durable_store import InMemoryDurableStore

__all__ = ["InMemoryDurableStore"]
