"""
Image management endpoints.

Listing and deleting objects already in the bucket. Both require an admin
session unless PROTECT_MANAGEMENT_ENDPOINTS is turned off.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from ...core.images.models import UploadValidationError
from ...infrastructure.storage.client import StorageError
from ..dependencies import ImageServiceDep, require_management_session
from ..errors import APIError
from ..schemas import ImageData, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_management_session)])


class ImageListResponse(BaseModel):
    success: bool = True
    data: list[ImageData]


class DeleteRequest(BaseModel):
    """Either a single key or a batch of keys."""
    key: Optional[str] = Field(default=None, description="Key to delete")
    keys: Optional[list[str]] = Field(default=None, description="Keys to delete one by one")


@router.get(
    "",
    response_model=ImageListResponse,
    status_code=status.HTTP_200_OK,
    summary="List stored images",
    description="Page through the bucket in key order using limit and offset",
)
async def list_images(
    service: ImageServiceDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    prefix: Annotated[str, Query()] = "",
) -> ImageListResponse:
    try:
        images = await service.list_images(limit=limit, offset=offset, prefix=prefix)
    except StorageError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to list images", str(e)) from e

    return ImageListResponse(data=[ImageData.from_info(info) for info in images])


@router.delete(
    "",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete images",
    description="Delete one key, or several keys attempted independently",
)
async def delete_images(
    request: DeleteRequest,
    service: ImageServiceDep,
) -> SuccessResponse:
    if request.keys:
        deleted = await service.delete_images(request.keys)
        logger.info(
            "Batch delete finished",
            extra={"requested": len(request.keys), "deleted": deleted}
        )
        return SuccessResponse(message="Images deleted successfully")

    if not request.key:
        raise UploadValidationError("No key provided")

    try:
        await service.delete_image(request.key)
    except StorageError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete image", str(e)) from e

    return SuccessResponse(message="Image deleted successfully")
