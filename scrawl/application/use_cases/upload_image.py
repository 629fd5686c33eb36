"""UploadImageUseCase - 上传画布图片

只接受位图类型（png / jpeg / gif / webp）且不超过大小上限的内容，
保存到 BlobStore 并返回访问 URL。SVG 可携带脚本，上传后会以 API 同源
提供访问，因此不接受。返回的 URL 由客户端放进 image 元素的 url 字段。
"""

import logging
from dataclasses import dataclass

from scrawl.config import settings
from scrawl.domain.exceptions import InvalidElementError
from scrawl.domain.ports.blob_store import BlobStore

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})


@dataclass
class UploadImageInput:
    """上传输入

    属性说明：
    - data: 文件内容
    - content_type: MIME 类型（如 image/png）
    - uploader_id: 上传者身份 ID（记录在日志中）
    """

    data: bytes
    content_type: str
    uploader_id: str


class UploadImageUseCase:
    def __init__(self, blob_store: BlobStore, max_bytes: int | None = None):
        self.blob_store = blob_store
        self.max_bytes = max_bytes or settings.max_upload_bytes

    def execute(self, input_data: UploadImageInput) -> str:
        """保存图片

        返回：
            图片访问 URL

        抛出：
            InvalidElementError: 不支持的类型、空文件或超出大小上限
            StoreUnavailableError: 对象存储暂时不可用
        """
        content_type = (input_data.content_type or "").split(";")[0].strip().lower()
        if content_type not in ALLOWED_IMAGE_TYPES:
            logger.info(
                "Rejected upload from %s: unsupported type %s",
                input_data.uploader_id,
                input_data.content_type,
            )
            raise InvalidElementError(f"不支持的图片类型: {input_data.content_type}")
        if not input_data.data:
            raise InvalidElementError("上传内容为空")
        if len(input_data.data) > self.max_bytes:
            raise InvalidElementError(f"图片超过大小上限（{self.max_bytes} 字节）")

        url = self.blob_store.store(input_data.data, content_type)
        logger.info("%s uploaded %d bytes as %s", input_data.uploader_id, len(input_data.data), url)
        return url
