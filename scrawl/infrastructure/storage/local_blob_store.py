"""本地文件系统 BlobStore 实现

上传的图片保存在 upload_dir 下，文件名为随机 UUID 加扩展名，
通过 base_url 对外提供访问（由 FastAPI StaticFiles 挂载）。
"""

import logging
import mimetypes
from pathlib import Path
from uuid import uuid4

from scrawl.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class LocalBlobStore:
    def __init__(self, upload_dir: str | Path, base_url: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")

    def store(self, data: bytes, content_type: str) -> str:
        extension = mimetypes.guess_extension(content_type.split(";")[0].strip()) or ".bin"
        name = f"{uuid4().hex}{extension}"
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            (self.upload_dir / name).write_bytes(data)
        except OSError as exc:
            logger.warning("Failed to store upload %s: %s", name, exc)
            raise StoreUnavailableError(str(exc)) from exc

        logger.info("Stored upload %s (%d bytes)", name, len(data))
        return f"{self.base_url}/{name}"
