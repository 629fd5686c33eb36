"""领域层 Ports - 定义领域层需要的外部依赖接口

- 使用 Protocol 定义接口（结构化子类型）
- 方法签名使用领域对象（Entity、Value Object）
- 不依赖任何框架（纯 Python）
"""

from scrawl.domain.ports.blob_store import BlobStore
from scrawl.domain.ports.credential_service import CredentialService
from scrawl.domain.ports.durable_store import DurableStore

__all__ = [
    "BlobStore",
    "CredentialService",
    "DurableStore",
]
