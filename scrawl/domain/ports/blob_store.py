"""BlobStore Port（对象存储端口）"""

from __future__ import annotations

from typing import Protocol


class BlobStore(Protocol):
    def store(self, data: bytes, content_type: str) -> str:
        """保存二进制内容，返回访问 URL

        抛出：
            StoreUnavailableError: 存储暂时不可用
        """
        ...
