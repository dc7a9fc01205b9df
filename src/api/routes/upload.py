"""
Image upload endpoints.

Two ways to get an image into the bucket:
1. POST /api/upload - the server receives the file, optionally converts it
   to WebP, names it and stores it.
2. POST /api/upload/presign - the server only reserves a key and returns a
   presigned PUT URL; the client sends the bytes straight to R2.

Both require an admin session cookie.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, Field

from ...core.images.models import UploadOptions, UploadValidationError
from ...core.images.normalizer import mime_for_key
from ...infrastructure.storage.client import StorageError
from ..dependencies import ImageServiceDep, SettingsDep, require_session
from ..errors import APIError
from ..schemas import CamelModel, ImageData

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_session)])


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadResponse(BaseModel):
    success: bool = True
    data: ImageData


class PresignRequest(CamelModel):
    filename: str = Field(min_length=1, description="Original file name")
    content_type: str = Field(description="MIME type the client will upload")
    use_hash_name: Optional[bool] = Field(default=None, description="Use a random key")


class PresignData(CamelModel):
    key: str
    upload_url: str = Field(description="Presigned URL to PUT the bytes to")
    url: str = Field(description="Public URL once uploaded")
    expires_in: int = Field(description="Seconds until upload_url expires")


class PresignResponse(BaseModel):
    success: bool = True
    data: PresignData


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def parse_flag(value: Optional[str], default: bool) -> bool:
    """Form checkboxes arrive as the string 'true'; anything else is off."""
    if value is None:
        return default
    return value == "true"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload an image",
    description="Upload one image, optionally converting it to WebP",
)
async def upload_image(
    service: ImageServiceDep,
    settings: SettingsDep,
    file: Annotated[Optional[UploadFile], File(description="Image file (JPEG, PNG, GIF, WebP, SVG)")] = None,
    quality: Annotated[Optional[int], Form()] = None,
    use_hash_name: Annotated[Optional[str], Form(alias="useHashName")] = None,
    enable_webp_compression: Annotated[Optional[str], Form(alias="enableWebpCompression")] = None,
) -> UploadResponse:
    if file is None:
        raise UploadValidationError("No file provided")

    filename = file.filename or "upload"
    mime_type = file.content_type or mime_for_key(filename)

    options = UploadOptions(
        use_hash_name=parse_flag(use_hash_name, settings.default_use_hash_name),
        compress_to_webp=parse_flag(enable_webp_compression, settings.default_enable_webp_compression),
        quality=quality if quality is not None else settings.default_quality,
    )

    logger.info(
        "Image upload started",
        extra={
            "upload_filename": filename,
            "content_type": mime_type,
            "compress": options.compress_to_webp,
        }
    )

    if file.size is not None:
        service.check_file_size(file.size)

    data = await file.read()

    try:
        info = await service.upload(data, filename, mime_type, options)
    except StorageError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Upload failed", str(e)) from e

    return UploadResponse(data=ImageData.from_info(info))


@router.post(
    "/presign",
    response_model=PresignResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a presigned upload URL",
    description="Reserve a key and return a URL the client can PUT the image to directly",
)
async def presign_upload(
    request: PresignRequest,
    service: ImageServiceDep,
    settings: SettingsDep,
) -> PresignResponse:
    use_hash_name = (
        request.use_hash_name
        if request.use_hash_name is not None
        else settings.default_use_hash_name
    )

    try:
        target = await service.create_upload_url(
            request.filename,
            request.content_type,
            use_hash_name=use_hash_name,
            expires_in=settings.presigned_url_expiry_seconds,
        )
    except StorageError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create upload URL", str(e)) from e

    return PresignResponse(
        data=PresignData(
            key=target.key,
            upload_url=target.upload_url,
            url=target.url,
            expires_in=target.expires_in,
        )
    )
