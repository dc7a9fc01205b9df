"""
Image hosting logic.

Contains the upload/list/delete service, the key naming policy and the
WebP normalization policy.
"""

from .models import (
    ALLOWED_MIME_TYPES,
    ImageInfo,
    ObjectEntry,
    UploadOptions,
    UploadTarget,
    UploadValidationError,
)
from .naming import generate_object_key
from .normalizer import ImageEncoder, ImageNormalizer, NormalizedImage
from .service import ImageService, ObjectStore

__all__ = [
    "ALLOWED_MIME_TYPES",
    "ImageInfo",
    "ObjectEntry",
    "UploadOptions",
    "UploadTarget",
    "UploadValidationError",
    "generate_object_key",
    "ImageEncoder",
    "ImageNormalizer",
    "NormalizedImage",
    "ImageService",
    "ObjectStore",
]
