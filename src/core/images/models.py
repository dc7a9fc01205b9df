"""
Domain models for hosted images.

These models have no dependencies on FastAPI, boto3 or Pillow. The
infrastructure layer translates store listings into ObjectEntry values and
the service turns those into ImageInfo records for the API.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
})

SVG_MIME_TYPE = "image/svg+xml"
WEBP_MIME_TYPE = "image/webp"

# One year; keys are never overwritten so clients can cache forever.
CACHE_CONTROL = "public, max-age=31536000"


class UploadValidationError(Exception):
    """Raised when an upload or management request fails validation."""
    pass


@dataclass(frozen=True)
class UploadOptions:
    """Caller-chosen options for a single upload."""
    use_hash_name: bool = False
    compress_to_webp: bool = False
    quality: int = 80

    def __post_init__(self) -> None:
        if not 1 <= self.quality <= 100:
            raise UploadValidationError("Quality must be between 1 and 100")


@dataclass(frozen=True)
class ObjectEntry:
    """One object as reported by the store's listing call."""
    key: str
    size: int
    last_modified: Optional[datetime] = None


@dataclass
class ImageInfo:
    """
    A stored image as exposed to API clients.

    The object store owns the bytes; this is only a transient view built
    from an upload result or a listing.
    """
    key: str
    url: str
    size: int
    mime_type: str
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class UploadTarget:
    """Where a client should PUT bytes for a presigned upload."""
    key: str
    upload_url: str
    url: str
    expires_in: int
