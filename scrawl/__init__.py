"""Scrawl - 两人共享画布的协作会话管理服务"""

__version__ = "0.1.0"
