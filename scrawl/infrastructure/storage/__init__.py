"""对象存储基础设施"""

from scrawl.infrastructure.storage.local_blob_store import LocalBlobStore

__all__ = ["LocalBlobStore"]
