"""Uploads 路由

- POST /api/uploads - 上传画布图片（multipart 字段名 file），返回 {url}
"""

import asyncio

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from scrawl.application.use_cases import UploadImageInput, UploadImageUseCase
from scrawl.domain.exceptions import InvalidElementError, StoreUnavailableError
from scrawl.domain.value_objects.identity import Identity
from scrawl.interfaces.api.container import ApiContainer
from scrawl.interfaces.api.dependencies import get_container, get_current_identity
from scrawl.interfaces.api.dto import UploadResponse

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    identity: Identity = Depends(get_current_identity),
    container: ApiContainer = Depends(get_container),
) -> UploadResponse:
    """上传图片

    异常处理：
    - 400: 不支持的图片类型（包括 SVG）、空文件或超过大小上限
    - 503: 对象存储不可用
    """
    # 多读一个字节即可判断是否超限
    data = await file.read(container.max_upload_bytes + 1)
    use_case = UploadImageUseCase(container.blob_store, max_bytes=container.max_upload_bytes)

    try:
        url = await asyncio.to_thread(
            use_case.execute,
            UploadImageInput(
                data=data,
                content_type=file.content_type or "",
                uploader_id=identity.user_id,
            ),
        )
    except InvalidElementError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    return UploadResponse(url=url)
