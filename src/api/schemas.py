"""
Response models shared by the upload and image management routes.

The browser client expects camelCase keys (mimeType, uploadedAt), so these
models alias their fields and FastAPI serializes by alias.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.images.models import ImageInfo


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageData(CamelModel):
    """A stored image as returned to the browser."""
    key: str = Field(description="Object key in the bucket")
    url: str = Field(description="Public URL of the object")
    size: int = Field(description="Stored size in bytes")
    mime_type: str = Field(description="Stored content type")
    uploaded_at: datetime = Field(description="Upload or last-modified time")

    @classmethod
    def from_info(cls, info: ImageInfo) -> "ImageData":
        return cls(
            key=info.key,
            url=info.url,
            size=info.size,
            mime_type=info.mime_type,
            uploaded_at=info.uploaded_at,
        )


class SuccessResponse(BaseModel):
    success: bool = True
    message: str
